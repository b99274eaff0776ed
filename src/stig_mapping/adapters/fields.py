"""Ordered field-alias lookups for loosely specified JSON records."""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple

_CONTROL_DELIMITER_RE = re.compile(r"[;,|]")


class FieldAliases:
    """Alternative locations of one logical field, checked in priority order.

    Each alias is a key or a dotted path into nested objects
    (``"references.nist"``). :meth:`lookup` returns the first value that is
    present, non-blank and an instance of one of the accepted types.
    """

    __slots__ = ("_paths", "_accept")

    def __init__(self, *aliases: str, accept: Tuple[type, ...] = (str,)) -> None:
        if not aliases:
            raise ValueError("FieldAliases requires at least one alias")
        self._paths = tuple(tuple(alias.split(".")) for alias in aliases)
        self._accept = accept

    @property
    def aliases(self) -> Tuple[str, ...]:
        return tuple(".".join(path) for path in self._paths)

    def lookup(self, record: Mapping[str, Any]) -> Optional[Any]:
        for path in self._paths:
            value = _resolve(record, path)
            if _is_blank(value) or isinstance(value, bool):
                continue
            if isinstance(value, self._accept):
                return value
        return None

    def text(self, record: Mapping[str, Any], default: str = "") -> str:
        """Return the first matching value as a stripped string."""

        value = self.lookup(record)
        if value is None:
            return default
        return str(value).strip()


def _resolve(record: Mapping[str, Any], path: Sequence[str]) -> Any:
    current: Any = record
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def split_controls(value: Any) -> List[str]:
    """Split an explicit control field (list or ``;``/``,``/``|`` string)."""

    if isinstance(value, str):
        return [part.strip() for part in _CONTROL_DELIMITER_RE.split(value) if part.strip()]
    if isinstance(value, (list, tuple)):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


# Plain text fields accept numbers too (``"rule_version": 3``).
TEXT_TYPES: Tuple[type, ...] = (str, int, float)
LIST_OR_TEXT: Tuple[type, ...] = (list, str)

__all__ = ["FieldAliases", "LIST_OR_TEXT", "TEXT_TYPES", "split_controls"]
