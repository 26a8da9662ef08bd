"""
Food-name cleanup used before any lookup.

Inventory names arrive from manual entry and receipt scans ("Milk (2 lb) -
Organic!", "Crème Fraîche 200ml"). Both the shelf-life knowledge base and the
recipe ranker compare names as plain lower-case ASCII words, so everything
else is stripped here.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


# Unit spellings that may follow a number on a label
UNIT_ALIASES: Tuple[str, ...] = (
    "oz", "ounce", "ounces",
    "lb", "lbs", "pound", "pounds",
    "g", "gram", "grams", "kg", "kilogram", "kilograms",
    "ml", "milliliter", "milliliters", "l", "liter", "liters", "litre", "litres",
    "gal", "gallon", "gallons",
    "ct", "count", "pk", "pack",
)

_AMOUNT = r"\d+(?:\.\d+)?"
_MULTIPACK = r"\d+\s*x\s*\d+"


def _quantity_pattern(units: Iterable[str]) -> "re.Pattern[str]":
    # Longest spelling first so "lbs" wins over "lb"
    alternatives = "|".join(sorted((re.escape(u) for u in units), key=len, reverse=True))
    return re.compile(rf"{_MULTIPACK}|{_AMOUNT}\s*(?:{alternatives})\b", re.IGNORECASE)


@dataclass
class NormalizedText:
    original: str
    normalized: str
    removed_tokens: List[str] = field(default_factory=list)


class TextNormalizer:
    """Folds accents and case, drops quantities and punctuation."""

    def __init__(
        self,
        units: Iterable[str] = UNIT_ALIASES,
        strip_quantities: bool = True,
        fold_accents: bool = True,
    ):
        self.strip_quantities = strip_quantities
        self.fold_accents = fold_accents
        self._quantities = _quantity_pattern(units)

    def normalize(self, text: Optional[str]) -> NormalizedText:
        raw = text or ""
        if not raw.strip():
            return NormalizedText(original=raw, normalized="")

        working = _ascii_fold(raw) if self.fold_accents else raw
        working = working.lower()

        quantities: List[str] = []
        if self.strip_quantities:
            quantities = [m.group(0) for m in self._quantities.finditer(working)]
            working = self._quantities.sub(" ", working)

        words = re.findall(r"[a-z0-9]+", working)
        return NormalizedText(original=raw, normalized=" ".join(words), removed_tokens=quantities)


def _ascii_fold(text: str) -> str:
    """Strip combining marks, e.g. crème fraîche -> creme fraiche."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(text: Optional[str]) -> str:
    """Lower-case and trim a name, collapsing inner whitespace."""
    if not text:
        return ""
    return " ".join(text.lower().split())


def substring_match(a: str, b: str) -> bool:
    """True when either non-empty string contains the other."""
    if not a or not b:
        return False
    return a in b or b in a
