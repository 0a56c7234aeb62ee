"""
Country resolution
==================

Turns free-text country names from vendor sheets into ISO 3166-1 alpha-2
codes. The lookup table is built once from the ``pycountry`` corpus plus a
small table of known misspellings and short forms, and is shared read-only.

Lookup order (first hit wins):
  1. exact lower-cased name
  2. name with spaces, punctuation and accents stripped, including the
     known misspellings and short forms
  3. rapidfuzz ratio against the corpus
  4. substring containment in either direction
  5. manual typo / short-form table, for tables not built by ``build``
  6. the input is already a known two-letter code
  7. first two letters of the input, upper-cased (unverified)
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import pycountry
from rapidfuzz import fuzz, process

from sheetimport.config import get_settings
from sheetimport.ir import ResolvedCountry
from sheetimport.logger import get_logger

logger = get_logger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_WHITESPACE_RE = re.compile(r"\s+")
_CODE_RE = re.compile(r"^[A-Za-z]{2}$")

# Keys are in stripped form (see ``strip_key``).
MANUAL_ALIASES: Mapping[str, str] = MappingProxyType({
    "romaina": "RO",
    "rumania": "RO",
    "uk": "GB",
    "greatbritain": "GB",
    "britain": "GB",
    "england": "GB",
    "usa": "US",
    "us": "US",
    "america": "US",
    "russia": "RU",
    "turkey": "TR",
    "holland": "NL",
    "uae": "AE",
    "ksa": "SA",
    "ivorycoast": "CI",
    "southkorea": "KR",
    "korea": "KR",
    "northkorea": "KP",
    "congodr": "CD",
    "drcongo": "CD",
    "drc": "CD",
    "democraticrepublicofcongo": "CD",
    "dominicanrep": "DO",
})

# Inputs shorter than these skip the fuzzy and substring tiers; short forms
# such as "UK" would otherwise match inside "Ukraine".
FUZZY_MIN_LEN = 5
SUBSTRING_MIN_LEN = 4


def lower_key(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", str(text)).strip().lower()


def strip_key(text: str) -> str:
    """Lower-case, fold accents to ASCII and drop everything but letters and digits."""
    folded = unicodedata.normalize("NFKD", str(text))
    folded = folded.encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM_RE.sub("", folded.lower())


@dataclass(frozen=True)
class CountryTable:
    """Immutable bidirectional lookup built from the country corpus."""

    by_name: Mapping[str, str]
    by_stripped: Mapping[str, str]
    by_code: Mapping[str, str]
    aliases: Mapping[str, str]
    # Stripped names, alphabetical; fuzzy and substring candidates.
    candidates: Tuple[str, ...]

    @classmethod
    def build(cls, aliases: Mapping[str, str] = MANUAL_ALIASES) -> "CountryTable":
        by_name: Dict[str, str] = {}
        by_stripped: Dict[str, str] = {}
        by_code: Dict[str, str] = {}

        countries = sorted(pycountry.countries, key=lambda c: c.alpha_2)
        # Short names first so an official name never shadows another
        # country's short name.
        for attr in ("name", "common_name", "official_name"):
            for country in countries:
                value = getattr(country, attr, None)
                if not value:
                    continue
                by_name.setdefault(lower_key(value), country.alpha_2)
                stripped = strip_key(value)
                if stripped:
                    by_stripped.setdefault(stripped, country.alpha_2)
        candidates = tuple(sorted(by_stripped))
        # Short forms join the stripped tier so they answer before the fuzzy
        # and substring tiers ("Korea" would otherwise land on KP).
        for alias, code in aliases.items():
            by_stripped.setdefault(alias, code)
        for country in countries:
            by_code[country.alpha_2] = getattr(country, "common_name", None) or country.name

        return cls(
            by_name=MappingProxyType(by_name),
            by_stripped=MappingProxyType(by_stripped),
            by_code=MappingProxyType(by_code),
            aliases=MappingProxyType(dict(aliases)),
            candidates=candidates,
        )


@lru_cache(maxsize=1)
def get_country_table() -> CountryTable:
    table = CountryTable.build()
    logger.debug("Country table built: %d names, %d codes", len(table.by_name), len(table.by_code))
    return table


class CountryResolver:
    """
    Resolve country names to alpha-2 codes.

    ``resolve`` is total: every non-empty input yields some code. Results
    from tier 7 are guesses and carry ``degraded == True``.
    """

    def __init__(
        self,
        table: Optional[CountryTable] = None,
        fuzzy_threshold: Optional[float] = None,
    ):
        self._table = table or get_country_table()
        self._fuzzy_threshold = (
            fuzzy_threshold if fuzzy_threshold is not None
            else get_settings().COUNTRY_FUZZY_THRESHOLD
        )

    @property
    def table(self) -> CountryTable:
        return self._table

    def _result(self, code: str, tier: int, fallback_name: str = "") -> ResolvedCountry:
        return ResolvedCountry(
            code=code,
            name=self._table.by_code.get(code, fallback_name),
            tier=tier,
        )

    def resolve(self, raw: Optional[str]) -> ResolvedCountry:
        text = lower_key(raw or "")
        if not text:
            return ResolvedCountry(code="", name="", tier=0)
        t = self._table

        code = t.by_name.get(text)
        if code:
            return self._result(code, 1)

        stripped = strip_key(text)
        code = t.by_stripped.get(stripped)
        if code:
            return self._result(code, 2)

        code = self._fuzzy(stripped)
        if code:
            return self._result(code, 3)

        code = self._substring(stripped)
        if code:
            return self._result(code, 4)

        code = t.aliases.get(stripped)
        if code:
            return self._result(code, 5)

        candidate = str(raw).strip()
        if _CODE_RE.match(candidate) and candidate.upper() in t.by_code:
            return self._result(candidate.upper(), 6)

        letters = "".join(ch for ch in candidate if ch.isalpha())
        guess = (letters[:2] or candidate[:2]).upper()
        logger.warning("Country %r not recognised; using unverified prefix code %r", raw, guess)
        return ResolvedCountry(code=guess, name=candidate, tier=7)

    def to_code(self, raw: Optional[str]) -> str:
        return self.resolve(raw).code

    # ------------------------------------------------------------------
    # Tiers 3 and 4
    # ------------------------------------------------------------------

    def _fuzzy(self, stripped: str) -> Optional[str]:
        if len(stripped) < FUZZY_MIN_LEN:
            return None
        match = process.extractOne(
            stripped,
            self._table.candidates,
            scorer=fuzz.ratio,
            score_cutoff=self._fuzzy_threshold,
        )
        if not match:
            return None
        logger.debug("Country %r fuzzy-matched %r (score %.1f)", stripped, match[0], match[1])
        return self._table.by_stripped[match[0]]

    def _substring(self, stripped: str) -> Optional[str]:
        """
        Containment in either direction against the corpus names.

        Names contained in the input are tried first, longest first; then
        names containing the input, shortest first. Ties go alphabetically.
        """
        if len(stripped) < SUBSTRING_MIN_LEN:
            return None
        names = [k for k in self._table.candidates if len(k) >= SUBSTRING_MIN_LEN]

        inside = sorted((k for k in names if k in stripped), key=lambda k: (-len(k), k))
        if inside:
            return self._table.by_stripped[inside[0]]

        around = sorted((k for k in names if stripped in k), key=lambda k: (len(k), k))
        if around:
            return self._table.by_stripped[around[0]]
        return None


@lru_cache(maxsize=1)
def get_country_resolver() -> CountryResolver:
    """Process-wide resolver sharing the read-only country table."""
    return CountryResolver()


def country_name(code: str) -> str:
    """Display name for *code*, or *code* itself when unknown."""
    return get_country_table().by_code.get((code or "").strip().upper(), code)


def is_valid_country_code(code: str) -> bool:
    return (code or "").strip().upper() in get_country_table().by_code
