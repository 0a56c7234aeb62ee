"""
Commodity normalisation
=======================

Maps vendor commodity wording onto the fixed taxonomy used by the port
dashboards. Rules are tried in order and the first hit wins. A product is the seed
family plus a "meal" or "oil" qualifier anywhere in the text, and within
each family the qualified products are tested before the bare seed.
Text that matches no rule is returned trimmed but otherwise unchanged, so
wheat, barley and anything new pass straight through.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from sheetimport.ir import CommodityTaxon

_SUNFLOWER_RE = re.compile(r"SUN\s*FLOWER", re.IGNORECASE)
_RAPESEED_RE = re.compile(r"CANOLA|RAPE\s*SEEDS?", re.IGNORECASE)
# Qualifiers stand alone or run straight on from the seed word ("Rapeseedmeal").
_QUALIFIER_START = r"(?:\b|(?<=SEED)|(?<=SEEDS)|(?<=FLOWER))"
_MEAL_RE = re.compile(_QUALIFIER_START + r"MEALS?\b", re.IGNORECASE)
_OIL_RE = re.compile(_QUALIFIER_START + r"OILS?\b", re.IGNORECASE)
_CORN_RE = re.compile(r"CORN|MAIZE", re.IGNORECASE)


@dataclass(frozen=True)
class CommodityRule:
    name: str
    predicate: Callable[[str], bool]
    taxon: CommodityTaxon

    def matches(self, text: str) -> bool:
        return self.predicate(text)


def _has(pattern: re.Pattern) -> Callable[[str], bool]:
    return lambda text: pattern.search(text) is not None


def _qualified(family: re.Pattern, qualifier: re.Pattern) -> Callable[[str], bool]:
    return lambda text: family.search(text) is not None and qualifier.search(text) is not None


def _bare(family: re.Pattern) -> Callable[[str], bool]:
    return lambda text: (
        family.search(text) is not None
        and _MEAL_RE.search(text) is None
        and _OIL_RE.search(text) is None
    )


COMMODITY_RULES: Tuple[CommodityRule, ...] = (
    CommodityRule("sunflower_meal", _qualified(_SUNFLOWER_RE, _MEAL_RE), CommodityTaxon.SFS_MEAL),
    CommodityRule("sunflower_oil", _qualified(_SUNFLOWER_RE, _OIL_RE), CommodityTaxon.SFS_OIL),
    CommodityRule("sunflower_seeds", _bare(_SUNFLOWER_RE), CommodityTaxon.SFS),
    CommodityRule("rapeseed_meal", _qualified(_RAPESEED_RE, _MEAL_RE), CommodityTaxon.RPS_MEAL),
    CommodityRule("rapeseed_oil", _qualified(_RAPESEED_RE, _OIL_RE), CommodityTaxon.RPS_OIL),
    CommodityRule("rapeseed", _bare(_RAPESEED_RE), CommodityTaxon.RPS),
    CommodityRule("corn", _has(_CORN_RE), CommodityTaxon.CORN),
)


def classify_commodity(description: Optional[str]) -> Optional[CommodityTaxon]:
    """Return the first matching taxon, or ``None`` when no rule applies."""
    text = str(description or "").strip()
    if not text:
        return None
    for rule in COMMODITY_RULES:
        if rule.matches(text):
            return rule.taxon
    return None


def normalize_commodity(description: Optional[str]) -> str:
    """Taxon value for *description*, or the trimmed input when unmapped."""
    taxon = classify_commodity(description)
    if taxon is not None:
        return taxon.value
    return str(description or "").strip()
