from __future__ import annotations

from pathlib import Path

import pytest

from stig_mapping.adapters import CciDocumentParser, ChecklistXmlParser, MalformedDocumentError
from stig_mapping.models import DocumentFormat, FindingSeverity, FindingStatus, IssueKind

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


def _dictionary():
    return CciDocumentParser().parse((FIXTURES / "U_CCI_List.xml").read_bytes()).dictionary


def _parse_fixture(dictionary=None):
    content = (FIXTURES / "two_stigs.ckl").read_bytes()
    return ChecklistXmlParser().parse(content, source="two_stigs.ckl", dictionary=dictionary)


def test_parses_every_vuln_across_sections() -> None:
    result = _parse_fixture(_dictionary())

    assert result.format is DocumentFormat.CKL
    assert [finding.group_id for finding in result.findings] == [
        "V-205625",
        "V-205626",
        "V-205627",
        "V-235720",
        "",
    ]


def test_section_metadata_comes_from_own_stig_info() -> None:
    findings = _parse_fixture().findings

    windows, edge = findings[0], findings[3]
    assert windows.stig_name == "Microsoft Windows Server 2019 Security Technical Implementation Guide"
    assert windows.stig_id == "MS_Windows_Server_2019_STIG"
    assert windows.stig_version == "2"
    assert windows.stig_release == "Release: 5 Benchmark Date: 27 Jan 2022"
    assert edge.stig_name == "MS_Edge_STIG"
    assert edge.stig_version == "1"


def test_vuln_fields_and_vendor_values() -> None:
    finding = _parse_fixture().findings[0]

    assert finding.rule_id == "SV-205625r569188_rule"
    assert finding.rule_version == "WN19-00-000010"
    assert finding.group_title == "SRG-OS-000073-GPOS-00041"
    assert finding.severity is FindingSeverity.HIGH
    assert finding.status is FindingStatus.OPEN
    assert finding.finding_details == "Reversible encryption is enabled on this host."
    assert finding.comments == ""


def test_repeated_cci_references_are_deduplicated_in_order() -> None:
    findings = _parse_fixture().findings

    assert findings[0].ccis == ("CCI-000196", "CCI-000366")
    assert findings[1].ccis == ("CCI-000054", "CCI-002235")
    assert findings[3].ccis == ("CCI-001453", "CCI-000197")


def test_controls_resolved_through_dictionary() -> None:
    findings = _parse_fixture(_dictionary()).findings

    assert findings[0].control_identifiers == ("CM-6", "IA-5(1)")
    assert findings[0].families == ("CM", "IA")
    assert findings[1].control_identifiers == ("AC-10", "AC-6(10)", "AC-6(9)")
    assert findings[1].families == ("AC",)
    assert findings[3].control_identifiers == ("AC-17(2)", "IA-5(1)")


def test_heuristic_fallback_for_unmapped_vuln() -> None:
    finding = _parse_fixture(_dictionary()).findings[2]

    assert finding.ccis == ()
    assert finding.control_identifiers == ("AU-12",)
    assert finding.status is FindingStatus.NOT_APPLICABLE


def test_vuln_without_identity_is_reported() -> None:
    result = _parse_fixture()

    assert [(issue.kind, issue.location) for issue in result.issues] == [
        (IssueKind.ENTRY_DATA_MISSING, "iSTIG[1]/VULN[1]")
    ]
    assert result.findings[4].rule_title == "Entry without identifiers."


def test_references_do_not_leak_between_sections() -> None:
    content = b"""<CHECKLIST><STIGS>
      <iSTIG>
        <STIG_INFO><SI_DATA><SID_NAME>title</SID_NAME><SID_DATA>First</SID_DATA></SI_DATA></STIG_INFO>
        <VULN>
          <STIG_DATA><VULN_ATTRIBUTE>Vuln_Num</VULN_ATTRIBUTE><ATTRIBUTE_DATA>V-1</ATTRIBUTE_DATA></STIG_DATA>
        </VULN>
      </iSTIG>
      <iSTIG>
        <STIG_INFO><SI_DATA><SID_NAME>title</SID_NAME><SID_DATA>Second</SID_DATA></SI_DATA></STIG_INFO>
        <VULN>
          <STIG_DATA><VULN_ATTRIBUTE>Vuln_Num</VULN_ATTRIBUTE><ATTRIBUTE_DATA>V-2</ATTRIBUTE_DATA></STIG_DATA>
          <STIG_DATA><VULN_ATTRIBUTE>CCI_REF</VULN_ATTRIBUTE><ATTRIBUTE_DATA>CCI-000015</ATTRIBUTE_DATA></STIG_DATA>
        </VULN>
      </iSTIG>
    </STIGS></CHECKLIST>"""

    first, second = ChecklistXmlParser().parse(content).findings

    assert (first.group_id, first.stig_name, first.ccis) == ("V-1", "First", ())
    assert (second.group_id, second.stig_name, second.ccis) == ("V-2", "Second", ("CCI-000015",))


def test_explicit_nist_attribute_is_used() -> None:
    content = b"""<CHECKLIST><STIGS><iSTIG><VULN>
      <STIG_DATA><VULN_ATTRIBUTE>Vuln_Num</VULN_ATTRIBUTE><ATTRIBUTE_DATA>V-3</ATTRIBUTE_DATA></STIG_DATA>
      <STIG_DATA><VULN_ATTRIBUTE>NIST</VULN_ATTRIBUTE><ATTRIBUTE_DATA>AC-7; ac-7 a</ATTRIBUTE_DATA></STIG_DATA>
      <STIG_DATA><VULN_ATTRIBUTE>Vuln_Discuss</VULN_ATTRIBUTE><ATTRIBUTE_DATA>See SI-4.</ATTRIBUTE_DATA></STIG_DATA>
    </VULN></iSTIG></STIGS></CHECKLIST>"""

    finding = ChecklistXmlParser().parse(content).findings[0]

    assert finding.control_identifiers == ("AC-7", "AC-7 A")
    assert finding.stig_name == "Unknown STIG"


def test_truncated_checklist_raises() -> None:
    content = (FIXTURES / "truncated.ckl").read_bytes()

    with pytest.raises(MalformedDocumentError, match="truncated.ckl"):
        ChecklistXmlParser().parse(content, source="truncated.ckl")


def test_document_without_sections_reports_issue() -> None:
    content = (FIXTURES / "U_CCI_List.xml").read_bytes()

    result = ChecklistXmlParser().parse(content, source="U_CCI_List.xml")

    assert result.findings == []
    assert [(issue.kind, issue.location) for issue in result.issues] == [
        (IssueKind.ENTRY_DATA_MISSING, "cci_list")
    ]
