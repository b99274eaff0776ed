from __future__ import annotations

from datetime import datetime, timezone

from stig_mapping.export import EXPORT_TYPE, build_export_document, finding_to_export
from stig_mapping.models import ControlMappingDictionary, Finding, FindingSeverity, FindingStatus


def test_export_document_layout() -> None:
    finding = Finding(
        group_id="V-1",
        rule_id="SV-1r1_rule",
        severity=FindingSeverity.HIGH,
        status=FindingStatus.OPEN,
        ccis=("CCI-000015",),
        control_identifiers=("AC-2",),
        families=("AC",),
    )
    dictionary = ControlMappingDictionary({"CCI-000015": ["AC-2"], "CCI-000130": ["AU-3"]})

    document = build_export_document(
        [finding],
        dictionary,
        exported_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        metadata={"totalFiles": 1},
    )

    assert document["metadata"] == {
        "exportType": EXPORT_TYPE,
        "version": "1.0",
        "exportedAt": "2024-05-01T12:00:00+00:00",
        "totalVulnerabilities": 1,
        "totalCciMappings": 2,
        "totalFiles": 1,
    }
    entry = document["vulnerabilities"][0]
    assert entry["vulnId"] == "V-1"
    assert entry["severity"] == "high"
    assert entry["nistControls"] == ["AC-2"]
    assert entry["families"] == ["AC"]
    assert document["cciMappings"] == {"CCI-000015": ["AC-2"], "CCI-000130": ["AU-3"]}


def test_plain_mapping_is_accepted() -> None:
    document = build_export_document([], {"CCI-000130": {"AU-3"}})

    assert document["cciMappings"] == {"CCI-000130": ["AU-3"]}
    assert document["vulnerabilities"] == []


def test_finding_to_export_uses_given_timestamp() -> None:
    entry = finding_to_export(Finding(group_id="V-9"), exported_at="2024-01-01T00:00:00+00:00")

    assert entry["exportedAt"] == "2024-01-01T00:00:00+00:00"
    assert entry["status"] == "not_reviewed"
    assert entry["severity"] == "unknown"
