"""Control identifier cleaning and finding reconciliation."""

from .controls import (
    CONTROL_FAMILIES,
    ControlPatternMatcher,
    derive_families,
    derive_family,
    leading_control,
    normalize_control,
)
from .finding_normalizer import FindingNormalizer, RawFinding, build_search_blob
from .references import normalize_reference_token, split_reference_codes

__all__ = [
    "CONTROL_FAMILIES",
    "ControlPatternMatcher",
    "FindingNormalizer",
    "RawFinding",
    "build_search_blob",
    "derive_families",
    "derive_family",
    "leading_control",
    "normalize_control",
    "normalize_reference_token",
    "split_reference_codes",
]
