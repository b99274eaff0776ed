"""Parser for STIG Viewer CKL checklists (XML)."""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple
from xml.etree.ElementTree import Element

from ..models import ControlMappingDictionary, DocumentFormat, EntryIssue, ImportResult, IssueKind
from ..normalization import FindingNormalizer, RawFinding, split_reference_codes
from .base import (
    UNKNOWN_STIG,
    DocumentParser,
    child_text,
    element_text,
    iter_children,
    local_name,
    parse_xml,
)
from .fields import split_controls

logger = logging.getLogger(__name__)

SECTION_TAG = "iSTIG"
FINDING_TAG = "VULN"

# Keys are compared upper-cased, for both STIG_DATA attributes and element tags.
REFERENCE_KEYS = frozenset({"CCI_REF", "CCI_REFS", "CCI", "CCIS"})
EXPLICIT_CONTROL_KEYS = frozenset({"NIST", "NIST_CONTROL", "NIST_CONTROLS"})

ATTRIBUTE_FIELDS: Dict[str, str] = {
    "group_id": "VULN_NUM",
    "rule_id": "RULE_ID",
    "rule_version": "RULE_VER",
    "rule_title": "RULE_TITLE",
    "severity": "SEVERITY",
    "group_title": "GROUP_TITLE",
    "discussion": "VULN_DISCUSS",
    "check_content": "CHECK_CONTENT",
    "fix_text": "FIX_TEXT",
}

Attribute = Tuple[str, str]


class ChecklistXmlParser(DocumentParser):
    """Parse ``CHECKLIST/STIGS/iSTIG/VULN`` documents.

    Each ``iSTIG`` section is processed on its own and every lookup for a
    ``VULN`` is confined to that element's subtree, so neighbouring sections
    never contribute CCIs or metadata to one another.
    """

    format = DocumentFormat.CKL

    def __init__(self, *, normalizer: FindingNormalizer | None = None) -> None:
        self._normalizer = normalizer or FindingNormalizer()

    def parse(
        self,
        content: bytes,
        *,
        source: str = "<memory>",
        dictionary: Optional[ControlMappingDictionary] = None,
    ) -> ImportResult:
        root = parse_xml(content, source)

        sections = list(_iter_scoped(root, SECTION_TAG))
        if not sections and local_name(root.tag) == SECTION_TAG:
            sections = [root]

        raw_findings: List[RawFinding] = []
        issues: List[EntryIssue] = []
        if not sections:
            logger.warning(
                "No iSTIG sections found in %s (root element %s)", source, local_name(root.tag)
            )
            issues.append(
                EntryIssue(
                    kind=IssueKind.ENTRY_DATA_MISSING,
                    location=local_name(root.tag),
                    message="Document has no iSTIG sections",
                )
            )
        for section_index, section in enumerate(sections):
            stig_info = self._stig_info(section)
            for vuln_index, vuln in enumerate(_iter_scoped(section, FINDING_TAG)):
                raw = self._parse_vuln(vuln, stig_info)
                if not raw.has_identity:
                    issues.append(
                        EntryIssue(
                            kind=IssueKind.ENTRY_DATA_MISSING,
                            location=f"iSTIG[{section_index}]/VULN[{vuln_index}]",
                            message="VULN has no Vuln_Num or Rule_ID",
                        )
                    )
                raw_findings.append(raw)

        findings = self._normalizer.normalize_all(raw_findings, dictionary)
        logger.debug(
            "Parsed %d VULN entries across %d iSTIG sections from %s",
            len(findings),
            len(sections),
            source,
        )
        return ImportResult(source=source, format=self.format, findings=findings, issues=issues)

    # ------------------------------------------------------------------
    def _stig_info(self, section: Element) -> Dict[str, str]:
        info: Dict[str, str] = {}
        for stig_info in _iter_scoped(section, "STIG_INFO"):
            for si_data in iter_children(stig_info, "SI_DATA"):
                name = child_text(si_data, "SID_NAME")
                value = child_text(si_data, "SID_DATA")
                if name and value and name not in info:
                    info[name] = value
        return info

    def _parse_vuln(self, vuln: Element, stig_info: Dict[str, str]) -> RawFinding:
        attributes = self._attributes(vuln)
        values = {field: _first(attributes, key) for field, key in ATTRIBUTE_FIELDS.items()}

        return RawFinding(
            **values,
            status=child_text(vuln, "STATUS"),
            finding_details=child_text(vuln, "FINDING_DETAILS"),
            comments=child_text(vuln, "COMMENTS"),
            stig_name=stig_info.get("title") or stig_info.get("stigid") or UNKNOWN_STIG,
            stig_id=stig_info.get("stigid", ""),
            stig_version=stig_info.get("version", ""),
            stig_release=stig_info.get("releaseinfo", ""),
            explicit_controls=tuple(
                control
                for value in _all(attributes, EXPLICIT_CONTROL_KEYS)
                for control in split_controls(value)
            ),
            ccis=tuple(split_reference_codes(self._reference_candidates(vuln, attributes))),
        )

    def _attributes(self, vuln: Element) -> List[Attribute]:
        attributes: List[Attribute] = []
        for stig_data in _iter_scoped(vuln, "STIG_DATA"):
            key = child_text(stig_data, "VULN_ATTRIBUTE")
            if key:
                attributes.append((key.upper(), child_text(stig_data, "ATTRIBUTE_DATA")))
        return attributes

    def _reference_candidates(self, vuln: Element, attributes: Sequence[Attribute]) -> List[str]:
        candidates = _all(attributes, REFERENCE_KEYS)
        for node in _iter_scoped(vuln, *REFERENCE_KEYS, match_upper=True):
            candidates.append(element_text(node))
        return candidates


def _first(attributes: Sequence[Attribute], key: str) -> str:
    for name, value in attributes:
        if name == key and value:
            return value
    return ""


def _all(attributes: Sequence[Attribute], keys: FrozenSet[str]) -> List[str]:
    return [value for name, value in attributes if name in keys and value]


def _iter_scoped(
    element: Element,
    *names: str,
    stop: Sequence[str] = (SECTION_TAG, FINDING_TAG),
    match_upper: bool = False,
) -> Iterator[Element]:
    """Yield descendants named *names* without entering nested sections or findings.

    Matched elements are not descended into. Document order is preserved.
    """

    wanted = {name.upper() for name in names} if match_upper else set(names)
    stack = list(reversed(list(element)))
    while stack:
        node = stack.pop()
        tag = local_name(node.tag)
        if (tag.upper() if match_upper else tag) in wanted:
            yield node
            continue
        if tag in stop:
            continue
        stack.extend(reversed(list(node)))


__all__ = ["ChecklistXmlParser", "EXPLICIT_CONTROL_KEYS", "REFERENCE_KEYS"]
