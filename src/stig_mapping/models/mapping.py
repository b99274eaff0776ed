"""Read-only CCI to control-identifier mapping."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import AbstractSet, Dict, FrozenSet, Iterable, Iterator, List


class ControlMappingDictionary(Mapping[str, FrozenSet[str]]):
    """Map external reference codes (CCIs) to sets of control identifiers.

    The dictionary is immutable once constructed so a single instance can be
    shared by every worker of a batch import without locking.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Iterable[str]] | None = None) -> None:
        frozen: Dict[str, FrozenSet[str]] = {}
        for code, controls in (entries or {}).items():
            values = frozenset(control for control in controls if control)
            if values:
                frozen[code] = values
        self._entries = MappingProxyType(frozen)

    @classmethod
    def empty(cls) -> "ControlMappingDictionary":
        return cls()

    # Mapping protocol ---------------------------------------------------
    def __getitem__(self, code: str) -> FrozenSet[str]:
        return self._entries[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} codes)"

    # ------------------------------------------------------------------
    def controls_for(self, code: str) -> FrozenSet[str]:
        """Return the identifiers mapped to *code*, or an empty set."""

        return self._entries.get(code, frozenset())

    def resolve(self, codes: Iterable[str]) -> FrozenSet[str]:
        """Return the union of identifiers mapped to any of *codes*."""

        resolved: set[str] = set()
        for code in codes:
            resolved.update(self._entries.get(code, ()))
        return frozenset(resolved)

    def merge(self, other: Mapping[str, AbstractSet[str]]) -> "ControlMappingDictionary":
        """Return a new dictionary holding the union of both mappings."""

        combined: Dict[str, set[str]] = {code: set(values) for code, values in self._entries.items()}
        for code, values in other.items():
            combined.setdefault(code, set()).update(values)
        return ControlMappingDictionary(combined)

    def to_dict(self) -> Dict[str, List[str]]:
        return {code: sorted(self._entries[code]) for code in sorted(self._entries)}
