"""Filtering of normalized findings by control, family, CCI and free text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .models import Finding


@dataclass(frozen=True, slots=True)
class FindingFilter:
    """Case-insensitive filter over findings; unset criteria match everything.

    ``family``, ``control``, ``cci`` and ``stig`` match by substring,
    ``severity`` and ``status`` by equality and ``search`` against the
    finding's search blob.
    """

    family: Optional[str] = None
    control: Optional[str] = None
    severity: Optional[str] = None
    status: Optional[str] = None
    stig: Optional[str] = None
    cci: Optional[str] = None
    search: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.family, self.control, self.severity, self.status, self.stig, self.cci, self.search)
        )

    def matches(self, finding: Finding) -> bool:
        family = _needle(self.family)
        if family and not any(family in value.lower() for value in finding.families):
            return False

        control = _needle(self.control)
        if control and not any(control in value.lower() for value in finding.control_identifiers):
            return False

        severity = _needle(self.severity)
        if severity and finding.severity.value != severity:
            return False

        status = _needle(self.status)
        if status and finding.status.value != status:
            return False

        stig = _needle(self.stig)
        if stig and stig not in finding.stig_name.lower():
            return False

        cci = _needle(self.cci)
        if cci and not any(cci in value.lower() for value in finding.ccis):
            return False

        search = _needle(self.search)
        if search and search not in finding.search_blob:
            return False

        return True

    def apply(self, findings: Iterable[Finding]) -> List[Finding]:
        return [finding for finding in findings if self.matches(finding)]


def _needle(value: Optional[str]) -> str:
    return value.strip().lower() if value else ""


__all__ = ["FindingFilter"]
