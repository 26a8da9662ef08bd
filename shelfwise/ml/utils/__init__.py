"""Text utilities."""

from .text_normalizer import TextNormalizer, NormalizedText, normalize_name, substring_match

__all__ = ["TextNormalizer", "NormalizedText", "normalize_name", "substring_match"]
