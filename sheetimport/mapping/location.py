"""
Location composition
====================

Vessel sheets carry departure country and port in separate columns; the
dashboards key on a single ``{code}-{port}`` token such as ``RO-Constanta``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from sheetimport.logger import get_logger
from sheetimport.mapping.countries import CountryResolver, get_country_resolver, strip_key

logger = get_logger(__name__)

# Stripped spelling -> canonical port name.
PORT_CORRECTIONS: Mapping[str, str] = {
    "constantza": "Constanta",
    "constanta": "Constanta",
}


@dataclass(frozen=True)
class ComposedLocation:
    """
    A location token plus how trustworthy it is.

    ``needs_review`` is set when only the port was known, and when the
    country code came from the unverified prefix fallback.
    """

    value: str
    country_code: str = ""
    port: str = ""
    needs_review: bool = False
    country_degraded: bool = False


def normalize_port(port: str) -> str:
    """Fix the known alternate spelling and title-case the port name."""
    text = " ".join(str(port or "").split())
    if not text:
        return ""
    corrected = PORT_CORRECTIONS.get(strip_key(text))
    if corrected:
        return corrected
    return text.title()


def compose_location(
    country: Optional[str],
    port: Optional[str],
    existing: Optional[str] = None,
    resolver: Optional[CountryResolver] = None,
) -> ComposedLocation:
    """
    Build the location token from whatever the row provides.

    - country and port -> ``{code}-{Port}``
    - country only -> ``{code}``
    - port only -> raw port text, flagged for manual review
    - neither -> *existing* location value, else ``""``
    """
    country = (country or "").strip()
    port = (port or "").strip()
    resolver = resolver or get_country_resolver()

    if country:
        resolved = resolver.resolve(country)
        if port:
            clean_port = normalize_port(port)
            return ComposedLocation(
                value=f"{resolved.code}-{clean_port}",
                country_code=resolved.code,
                port=clean_port,
                needs_review=resolved.degraded,
                country_degraded=resolved.degraded,
            )
        return ComposedLocation(
            value=resolved.code,
            country_code=resolved.code,
            needs_review=resolved.degraded,
            country_degraded=resolved.degraded,
        )

    if port:
        logger.warning("Location built from port %r alone; country code needs a manual fix", port)
        return ComposedLocation(value=port, port=port, needs_review=True)

    return ComposedLocation(value=(existing or "").strip())


def parse_location(location: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Split ``"RO-Constanta"`` into ``("RO", "Constanta")``.

    Only the first hyphen separates, so hyphenated port names survive.
    Returns ``None`` when either half is missing.
    """
    if not location or not isinstance(location, str):
        return None
    code, sep, port = location.partition("-")
    code, port = code.strip(), port.strip()
    if not sep or not code or not port:
        return None
    return code, port
