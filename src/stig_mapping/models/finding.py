"""Finding models shared across parsers, the normalizer and reporting layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class FindingSeverity(str, Enum):
    """Severity levels, ordered from ``unknown`` to ``critical``."""

    UNKNOWN = "unknown"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def from_vendor(cls, value: object) -> "FindingSeverity":
        """Map a vendor severity string (``CAT I``, ``moderate`` ...) onto the enum."""

        if isinstance(value, FindingSeverity):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = " ".join(value.strip().lower().replace("_", " ").split())
        return _SEVERITY_ALIASES.get(key, cls.UNKNOWN)


_SEVERITY_RANK = {
    FindingSeverity.UNKNOWN: 0,
    FindingSeverity.LOW: 1,
    FindingSeverity.MEDIUM: 2,
    FindingSeverity.HIGH: 3,
    FindingSeverity.CRITICAL: 4,
}

_SEVERITY_ALIASES = {
    "unknown": FindingSeverity.UNKNOWN,
    "low": FindingSeverity.LOW,
    "minor": FindingSeverity.LOW,
    "cat iii": FindingSeverity.LOW,
    "category iii": FindingSeverity.LOW,
    "iii": FindingSeverity.LOW,
    "medium": FindingSeverity.MEDIUM,
    "moderate": FindingSeverity.MEDIUM,
    "cat ii": FindingSeverity.MEDIUM,
    "category ii": FindingSeverity.MEDIUM,
    "ii": FindingSeverity.MEDIUM,
    "high": FindingSeverity.HIGH,
    "major": FindingSeverity.HIGH,
    "cat i": FindingSeverity.HIGH,
    "category i": FindingSeverity.HIGH,
    "i": FindingSeverity.HIGH,
    "critical": FindingSeverity.CRITICAL,
    "severe": FindingSeverity.CRITICAL,
}


class FindingStatus(str, Enum):
    """Review status of a checklist item."""

    NOT_REVIEWED = "not_reviewed"
    OPEN = "open"
    NOT_A_FINDING = "not_a_finding"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"
    PASSED = "passed"

    @classmethod
    def from_vendor(cls, value: object) -> "FindingStatus":
        """Normalize STIG Viewer, CKLB and XCCDF status spellings.

        Blank or unrecognized values are treated as not reviewed.
        """

        if isinstance(value, FindingStatus):
            return value
        if not isinstance(value, str):
            return cls.NOT_REVIEWED
        key = "".join(ch for ch in value.strip().lower() if ch.isalnum())
        return _STATUS_ALIASES.get(key, cls.NOT_REVIEWED)


_STATUS_ALIASES = {
    "notreviewed": FindingStatus.NOT_REVIEWED,
    "nr": FindingStatus.NOT_REVIEWED,
    "open": FindingStatus.OPEN,
    "o": FindingStatus.OPEN,
    "notafinding": FindingStatus.NOT_A_FINDING,
    "naf": FindingStatus.NOT_A_FINDING,
    "nf": FindingStatus.NOT_A_FINDING,
    "notapplicable": FindingStatus.NOT_APPLICABLE,
    "na": FindingStatus.NOT_APPLICABLE,
    "fail": FindingStatus.FAILED,
    "failed": FindingStatus.FAILED,
    "pass": FindingStatus.PASSED,
    "passed": FindingStatus.PASSED,
}


@dataclass(frozen=True, slots=True)
class Finding:
    """One normalized compliance check result.

    ``families`` is always the sorted set of family prefixes of
    ``control_identifiers``; instances are built by
    :class:`~stig_mapping.normalization.FindingNormalizer` and never mutated.
    """

    group_id: str = ""
    rule_id: str = ""
    rule_version: str = ""
    rule_title: str = ""
    severity: FindingSeverity = FindingSeverity.UNKNOWN
    status: FindingStatus = FindingStatus.NOT_REVIEWED
    stig_name: str = ""
    stig_id: str = ""
    stig_version: str = ""
    stig_release: str = ""
    group_title: str = ""
    discussion: str = ""
    check_content: str = ""
    fix_text: str = ""
    finding_details: str = ""
    comments: str = ""
    ccis: Tuple[str, ...] = ()
    control_identifiers: Tuple[str, ...] = ()
    families: Tuple[str, ...] = ()
    search_blob: str = ""

    @property
    def is_open(self) -> bool:
        """Return ``True`` when the check needs remediation."""

        return self.status in (FindingStatus.OPEN, FindingStatus.FAILED)
