"""NIST SP 800-53 control identifier cleaning and free-text extraction."""

from __future__ import annotations

import re
from typing import Callable, FrozenSet, Iterable, Optional

CONTROL_FAMILIES = (
    "AC", "AT", "AU", "CA", "CM", "CP", "IA", "IR", "MA", "MP", "PE", "PL", "PM", "PS",
    "RA", "SA", "SC", "SI", "SR", "PT", "SE", "AR", "IP", "TR", "DM", "RS", "RC",
)

_FAMILY_PATTERN = "|".join(CONTROL_FAMILIES)

# Canonical form: AC-2, AC-2(1), SC-7(4) A
_CANONICAL_RE = re.compile(rf"^(?:{_FAMILY_PATTERN})-\d+[A-Z]?(?:\([0-9A-Z]+\))?(?: ?[A-Z])?$")

# Candidates are validated by normalize_control().
_TEXT_RE = re.compile(
    rf"\b(?:{_FAMILY_PATTERN})\s*-\s*\d+[A-Za-z]?(?:\s*\([0-9a-z]+\))?(?:\s*[a-z])?(?![0-9A-Za-z])",
    re.IGNORECASE,
)

_LEADING_RE = re.compile(r"^\s*([A-Za-z]{2,3}\s*-\s*\d+(?:\s*\([^)]+\))?)")
_FAMILY_RE = re.compile(r"^[A-Z]{2,3}(?=-)")

_DASH_RE = re.compile(r"\s*-\s*")
_OPEN_RE = re.compile(r"\s*\(\s*")
_CLOSE_RE = re.compile(r"\s*\)\s*")
_SPACE_RE = re.compile(r"\s+")


def normalize_control(candidate: Optional[str]) -> str:
    """Return the canonical form of *candidate* or ``""`` when it is not a control.

    >>> normalize_control("ac - 2 ( 1 )")
    'AC-2(1)'
    >>> normalize_control("ZZ-9")
    ''
    """

    if not candidate or not isinstance(candidate, str):
        return ""

    cleaned = candidate.upper().strip()
    cleaned = _DASH_RE.sub("-", cleaned)
    cleaned = _OPEN_RE.sub("(", cleaned)
    cleaned = _CLOSE_RE.sub(")", cleaned)
    cleaned = _SPACE_RE.sub(" ", cleaned).strip()

    return cleaned if _CANONICAL_RE.match(cleaned) else ""


def derive_family(control: Optional[str]) -> str:
    """Return the family prefix of a canonical control (``AC-2(1)`` -> ``AC``)."""

    if not control:
        return ""
    match = _FAMILY_RE.match(control)
    return match.group(0) if match else ""


def derive_families(controls: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted({family for family in map(derive_family, controls) if family}))


def leading_control(text: Optional[str]) -> str:
    """Return the control at the start of *text*, dropping statement parts.

    CCI list references carry indexes such as ``AC-2 e`` or ``AC-17 (2)``;
    only the control and its enhancement are kept.
    """

    if not text:
        return ""
    match = _LEADING_RE.match(text)
    return normalize_control(match.group(1)) if match else ""


class ControlPatternMatcher:
    """Best-effort scanner for control identifiers embedded in prose."""

    def __init__(
        self,
        *,
        normalizer: Callable[[Optional[str]], str] = normalize_control,
        delimiter: str = "\n",
    ) -> None:
        self._normalizer = normalizer
        self._delimiter = delimiter

    def find_all(self, *texts: Optional[str]) -> FrozenSet[str]:
        """Return every accepted control identifier found in *texts*."""

        text = self._delimiter.join(part for part in texts if part)
        if not text:
            return frozenset()

        found: set[str] = set()
        for match in _TEXT_RE.finditer(text):
            control = self._normalizer(match.group(0))
            if control:
                found.add(control)
        return frozenset(found)


__all__ = [
    "CONTROL_FAMILIES",
    "ControlPatternMatcher",
    "derive_families",
    "derive_family",
    "leading_control",
    "normalize_control",
]
