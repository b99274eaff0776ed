"""Normalization of external reference codes (CCIs)."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Union

CCI_PREFIX = "CCI-"
CCI_DIGITS = 6

_DELIMITER_RE = re.compile(r"[\s,;:]+")
_BARE_DIGITS_RE = re.compile(rf"^\d{{1,{CCI_DIGITS}}}$")
_PREFIXED_DIGITS_RE = re.compile(rf"^{CCI_PREFIX}(\d{{1,{CCI_DIGITS}}})$")
_PREFIXED_CODE_RE = re.compile(rf"^{CCI_PREFIX}[0-9A-Z]+$")

ReferenceValue = Union[str, Iterable[Optional[str]], None]


def normalize_reference_token(token: Optional[str]) -> str:
    """Return the ``CCI-NNNNNN`` form of *token*, or ``""`` if it is not a CCI.

    ``"196"`` and ``"CCI-196"`` both become ``"CCI-000196"``.
    """

    if not token:
        return ""
    cleaned = token.strip().upper()
    if not cleaned:
        return ""

    prefixed = _PREFIXED_DIGITS_RE.match(cleaned)
    if prefixed:
        return CCI_PREFIX + prefixed.group(1).zfill(CCI_DIGITS)
    if _PREFIXED_CODE_RE.match(cleaned):
        return cleaned
    if _BARE_DIGITS_RE.match(cleaned):
        return CCI_PREFIX + cleaned.zfill(CCI_DIGITS)
    return ""


def split_reference_codes(*values: ReferenceValue) -> List[str]:
    """Split raw candidate values into unique normalized codes, first seen first."""

    codes: List[str] = []
    seen: set[str] = set()
    for value in values:
        if value is None:
            continue
        raw_items = [value] if isinstance(value, str) else list(value)
        for raw in raw_items:
            if not isinstance(raw, str):
                continue
            for token in _DELIMITER_RE.split(raw):
                code = normalize_reference_token(token)
                if code and code not in seen:
                    seen.add(code)
                    codes.append(code)
    return codes


__all__ = ["CCI_PREFIX", "normalize_reference_token", "split_reference_codes"]
