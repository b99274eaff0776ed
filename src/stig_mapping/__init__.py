"""Normalize STIG checklist findings and map them to NIST SP 800-53 controls."""

from .models import (
    BatchImportReport,
    ControlMappingDictionary,
    Finding,
    FindingSeverity,
    FindingStatus,
    ImportResult,
)
from .service import DocumentKind, ImportCoordinator, SourceDocument

__all__ = [
    "BatchImportReport",
    "ControlMappingDictionary",
    "DocumentKind",
    "Finding",
    "FindingSeverity",
    "FindingStatus",
    "ImportCoordinator",
    "ImportResult",
    "SourceDocument",
]
