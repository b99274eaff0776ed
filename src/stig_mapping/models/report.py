"""Per-document and per-batch import results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, MutableMapping, Optional

from .finding import Finding, FindingSeverity, FindingStatus
from .mapping import ControlMappingDictionary


class DocumentFormat(str, Enum):
    """Format tag recorded for every imported document."""

    CKLB = "cklb"
    CKL = "ckl"
    EXPORT = "export"
    CCI = "cci"


class IssueKind(str, Enum):
    """Non-fatal problems absorbed while parsing a single document."""

    ENTRY_DATA_MISSING = "entry_data_missing"
    DICTIONARY_ENTRY_SKIPPED = "dictionary_entry_skipped"


@dataclass(frozen=True, slots=True)
class EntryIssue:
    kind: IssueKind
    location: str
    message: str


@dataclass(slots=True)
class ImportResult:
    """Outcome of importing one source document."""

    source: str
    format: DocumentFormat
    findings: List[Finding] = field(default_factory=list)
    dictionary: Optional[ControlMappingDictionary] = None
    issues: List[EntryIssue] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FileFailure:
    """A document that could not be imported at all."""

    source: str
    error: str
    kind: str


@dataclass(slots=True)
class BatchImportReport:
    """Aggregate of a batch import, preserving file submission order."""

    findings: List[Finding] = field(default_factory=list)
    results: List[ImportResult] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def files_total(self) -> int:
        return len(self.results) + len(self.failures)

    @property
    def files_imported(self) -> int:
        return len(self.results)

    @property
    def files_failed(self) -> int:
        return len(self.failures)

    @property
    def issues(self) -> List[EntryIssue]:
        return [issue for result in self.results for issue in result.issues]

    @property
    def highest_severity(self) -> FindingSeverity | None:
        if not self.findings:
            return None
        return max((finding.severity for finding in self.findings), key=lambda severity: severity.rank)

    def counts_by_severity(self) -> dict[str, int]:
        counts: MutableMapping[FindingSeverity, int] = {severity: 0 for severity in FindingSeverity}
        for finding in self.findings:
            counts[finding.severity] += 1
        return {severity.value: count for severity, count in counts.items()}

    def counts_by_status(self) -> dict[str, int]:
        counts: MutableMapping[FindingStatus, int] = {status: 0 for status in FindingStatus}
        for finding in self.findings:
            counts[finding.status] += 1
        return {status.value: count for status, count in counts.items()}

    def summary(self) -> Dict[str, Any]:
        highest = self.highest_severity
        return {
            "files_total": self.files_total,
            "files_imported": self.files_imported,
            "files_failed": self.files_failed,
            "total_findings": len(self.findings),
            "highest_severity": highest.value if highest else None,
            "issues": len(self.issues),
            "severity_counts": self.counts_by_severity(),
            "status_counts": self.counts_by_status(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "files": [
                {
                    "source": result.source,
                    "format": result.format.value,
                    "findings": len(result.findings),
                    "issues": [
                        {"kind": issue.kind.value, "location": issue.location, "message": issue.message}
                        for issue in result.issues
                    ],
                }
                for result in self.results
            ],
            "failures": [
                {"source": failure.source, "error": failure.error, "kind": failure.kind}
                for failure in self.failures
            ],
            "findings": [serialize_finding(finding) for finding in self.findings],
        }


def serialize_finding(finding: Finding) -> Dict[str, Any]:
    """Return a JSON-ready dictionary for *finding* using its field names."""

    return {
        "group_id": finding.group_id,
        "rule_id": finding.rule_id,
        "rule_version": finding.rule_version,
        "rule_title": finding.rule_title,
        "severity": finding.severity.value,
        "status": finding.status.value,
        "stig_name": finding.stig_name,
        "stig_id": finding.stig_id,
        "stig_version": finding.stig_version,
        "stig_release": finding.stig_release,
        "group_title": finding.group_title,
        "discussion": finding.discussion,
        "check_content": finding.check_content,
        "fix_text": finding.fix_text,
        "finding_details": finding.finding_details,
        "comments": finding.comments,
        "ccis": list(finding.ccis),
        "control_identifiers": list(finding.control_identifiers),
        "families": list(finding.families),
        "search_blob": finding.search_blob,
    }
