"""Build ``cci-stig-mappings`` export documents that re-import losslessly."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from .models import ControlMappingDictionary, Finding

EXPORT_TYPE = "cci-stig-mappings"
EXPORT_VERSION = "1.0"


def finding_to_export(finding: Finding, *, exported_at: str) -> Dict[str, Any]:
    return {
        "vulnId": finding.group_id,
        "ruleId": finding.rule_id,
        "ruleVersion": finding.rule_version,
        "title": finding.rule_title,
        "severity": finding.severity.value,
        "status": finding.status.value,
        "stigName": finding.stig_name,
        "stigId": finding.stig_id,
        "stigVersion": finding.stig_version,
        "stigRelease": finding.stig_release,
        "groupTitle": finding.group_title,
        "nistControls": list(finding.control_identifiers),
        "ccis": list(finding.ccis),
        "families": list(finding.families),
        "discussion": finding.discussion,
        "checkContent": finding.check_content,
        "fixText": finding.fix_text,
        "findingDetails": finding.finding_details,
        "comments": finding.comments,
        "exportedAt": exported_at,
    }


def build_export_document(
    findings: Sequence[Finding],
    dictionary: Optional[Mapping[str, Iterable[str]]] = None,
    *,
    exported_at: datetime | None = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the JSON-ready export for *findings* and the active CCI mapping."""

    timestamp = (exported_at or datetime.now(timezone.utc)).isoformat()
    if isinstance(dictionary, ControlMappingDictionary):
        mappings = dictionary.to_dict()
    else:
        mappings = {code: sorted(values) for code, values in sorted((dictionary or {}).items())}

    document_metadata: Dict[str, Any] = {
        "exportType": EXPORT_TYPE,
        "version": EXPORT_VERSION,
        "exportedAt": timestamp,
        "totalVulnerabilities": len(findings),
        "totalCciMappings": len(mappings),
    }
    if metadata:
        document_metadata.update(metadata)

    return {
        "metadata": document_metadata,
        "vulnerabilities": [finding_to_export(finding, exported_at=timestamp) for finding in findings],
        "cciMappings": mappings,
    }


__all__ = ["EXPORT_TYPE", "EXPORT_VERSION", "build_export_document", "finding_to_export"]
