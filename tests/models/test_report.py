from __future__ import annotations

import pytest

from stig_mapping.models import (
    BatchImportReport,
    DocumentFormat,
    EntryIssue,
    FileFailure,
    Finding,
    FindingSeverity,
    FindingStatus,
    ImportResult,
    IssueKind,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("CAT I", FindingSeverity.HIGH),
        ("cat_ii", FindingSeverity.MEDIUM),
        ("Category III", FindingSeverity.LOW),
        ("moderate", FindingSeverity.MEDIUM),
        ("Critical", FindingSeverity.CRITICAL),
        ("", FindingSeverity.UNKNOWN),
        ("whatever", FindingSeverity.UNKNOWN),
        (None, FindingSeverity.UNKNOWN),
    ],
)
def test_severity_from_vendor(value: object, expected: FindingSeverity) -> None:
    assert FindingSeverity.from_vendor(value) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Open", FindingStatus.OPEN),
        ("NotAFinding", FindingStatus.NOT_A_FINDING),
        ("not_a_finding", FindingStatus.NOT_A_FINDING),
        ("Not_Applicable", FindingStatus.NOT_APPLICABLE),
        ("N/A", FindingStatus.NOT_APPLICABLE),
        ("fail", FindingStatus.FAILED),
        ("pass", FindingStatus.PASSED),
        ("", FindingStatus.NOT_REVIEWED),
        ("unexpected", FindingStatus.NOT_REVIEWED),
    ],
)
def test_status_from_vendor(value: str, expected: FindingStatus) -> None:
    assert FindingStatus.from_vendor(value) is expected


def test_batch_report_summary_and_serialization() -> None:
    findings = [
        Finding(group_id="V-1", severity=FindingSeverity.HIGH, status=FindingStatus.OPEN),
        Finding(group_id="V-2", severity=FindingSeverity.LOW, status=FindingStatus.NOT_A_FINDING),
    ]
    issue = EntryIssue(
        kind=IssueKind.ENTRY_DATA_MISSING, location="stigs[0].rules[2]", message="missing"
    )
    report = BatchImportReport(
        findings=findings,
        results=[
            ImportResult(
                source="a.cklb", format=DocumentFormat.CKLB, findings=findings, issues=[issue]
            )
        ],
        failures=[FileFailure(source="b.ckl", error="Invalid XML", kind="MalformedDocumentError")],
    )

    summary = report.summary()
    assert summary["files_total"] == 2
    assert summary["files_failed"] == 1
    assert summary["highest_severity"] == "high"
    assert summary["issues"] == 1
    assert summary["severity_counts"]["high"] == 1
    assert summary["status_counts"]["open"] == 1

    payload = report.to_dict()
    assert payload["files"][0]["issues"][0]["location"] == "stigs[0].rules[2]"
    assert payload["failures"] == [
        {"source": "b.ckl", "error": "Invalid XML", "kind": "MalformedDocumentError"}
    ]
    assert [entry["group_id"] for entry in payload["findings"]] == ["V-1", "V-2"]


def test_empty_report_has_no_highest_severity() -> None:
    assert BatchImportReport().highest_severity is None
