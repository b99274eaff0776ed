from __future__ import annotations

import pytest

from stig_mapping.models import ControlMappingDictionary, FindingSeverity, FindingStatus
from stig_mapping.normalization import FindingNormalizer, RawFinding

DICTIONARY = ControlMappingDictionary(
    {
        "CCI-000015": ["AC-2"],
        "CCI-000130": ["AU-3"],
        "CCI-001414": ["sc - 7"],
    }
)


def _raw(**overrides: object) -> RawFinding:
    values: dict[str, object] = {
        "group_id": "V-1001",
        "rule_id": "SV-1001r1_rule",
        "rule_title": "Accounts must be managed.",
        "severity": "CAT I",
        "status": "Open",
        "stig_name": "Example STIG",
    }
    values.update(overrides)
    return RawFinding(**values)  # type: ignore[arg-type]


def test_explicit_and_mapped_controls_suppress_heuristics() -> None:
    raw = _raw(
        explicit_controls=("ac-2",),
        ccis=("CCI-000130",),
        discussion="Boundary protection per SC-7 is out of scope here.",
    )

    finding = FindingNormalizer().normalize(raw, DICTIONARY)

    assert finding.control_identifiers == ("AC-2", "AU-3")
    assert finding.families == ("AC", "AU")
    assert "SC-7" not in finding.control_identifiers


def test_heuristics_apply_only_without_explicit_or_mapped_controls() -> None:
    raw = _raw(ccis=("CCI-999999",), discussion="Boundary protection per SC-7 (4) applies.")

    finding = FindingNormalizer().normalize(raw, DICTIONARY)

    assert finding.control_identifiers == ("SC-7(4)",)
    assert finding.families == ("SC",)


def test_mapped_controls_are_normalized() -> None:
    finding = FindingNormalizer().normalize(_raw(ccis=("CCI-001414",)), DICTIONARY)

    assert finding.control_identifiers == ("SC-7",)


def test_invalid_explicit_controls_are_dropped() -> None:
    raw = _raw(explicit_controls=("ZZ-1", "not a control", "CM-6"))

    finding = FindingNormalizer().normalize(raw)

    assert finding.control_identifiers == ("CM-6",)


@pytest.mark.parametrize("dictionary", [None, ControlMappingDictionary.empty()])
def test_missing_dictionary_leaves_codes_unmapped(dictionary: ControlMappingDictionary | None) -> None:
    raw = _raw(ccis=("CCI-000015",))

    finding = FindingNormalizer().normalize(raw, dictionary)

    assert finding.ccis == ("CCI-000015",)
    assert finding.control_identifiers == ()
    assert finding.families == ()


def test_normalize_is_idempotent_and_does_not_mutate_dictionary() -> None:
    normalizer = FindingNormalizer()
    raw = _raw(ccis=("CCI-000015", "CCI-000130"))
    before = DICTIONARY.to_dict()

    first = normalizer.normalize(raw, DICTIONARY)
    second = normalizer.normalize(raw, DICTIONARY)

    assert first == second
    assert DICTIONARY.to_dict() == before


def test_severity_status_and_search_blob() -> None:
    raw = _raw(ccis=("CCI-000015",), finding_details="Stale ACCOUNT found")

    finding = FindingNormalizer().normalize(raw, DICTIONARY)

    assert finding.severity is FindingSeverity.HIGH
    assert finding.status is FindingStatus.OPEN
    assert finding.is_open
    assert finding.search_blob == finding.search_blob.lower()
    expected = (
        "example stig",
        "v-1001",
        "sv-1001r1_rule",
        "high",
        "open",
        "cci-000015",
        "stale account",
    )
    for fragment in expected:
        assert fragment in finding.search_blob


def test_restore_uses_explicit_controls_only() -> None:
    raw = _raw(
        explicit_controls=("IA-5(1)",),
        ccis=("CCI-000015",),
        discussion="Mentions AC-17 in passing.",
    )

    finding = FindingNormalizer().restore(raw)

    assert finding.control_identifiers == ("IA-5(1)",)
    assert finding.families == ("IA",)
    assert finding.ccis == ("CCI-000015",)


def test_normalize_all_preserves_order() -> None:
    entries = [_raw(group_id=f"V-{index}") for index in range(5)]

    findings = FindingNormalizer().normalize_all(entries, DICTIONARY)

    assert [finding.group_id for finding in findings] == [f"V-{index}" for index in range(5)]
