"""Data models for normalized STIG findings, CCI mappings and import reports."""

from .finding import Finding, FindingSeverity, FindingStatus
from .mapping import ControlMappingDictionary
from .report import (
    BatchImportReport,
    DocumentFormat,
    EntryIssue,
    FileFailure,
    ImportResult,
    IssueKind,
    serialize_finding,
)

__all__ = [
    "BatchImportReport",
    "ControlMappingDictionary",
    "DocumentFormat",
    "EntryIssue",
    "FileFailure",
    "Finding",
    "FindingSeverity",
    "FindingStatus",
    "ImportResult",
    "IssueKind",
    "serialize_finding",
]
