"""Parser for CKLB JSON checklists and re-imported finding exports."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..models import (
    ControlMappingDictionary,
    DocumentFormat,
    EntryIssue,
    ImportResult,
    IssueKind,
)
from ..normalization import FindingNormalizer, RawFinding, normalize_control, split_reference_codes
from .base import UNKNOWN_STIG, DocumentParser, MalformedDocumentError
from .fields import LIST_OR_TEXT, TEXT_TYPES, FieldAliases, split_controls

logger = logging.getLogger(__name__)

# CKLB sections and rules ------------------------------------------------
STIG_SECTIONS = FieldAliases("stigs", accept=(list,))
STIG_NAME = FieldAliases("display_name", "stig_name", "stig_id", accept=TEXT_TYPES)
STIG_ID = FieldAliases("stig_id", accept=TEXT_TYPES)
STIG_VERSION = FieldAliases("version", accept=TEXT_TYPES)
STIG_RELEASE = FieldAliases("release_info", "releaseinfo", accept=TEXT_TYPES)
STIG_RULES = FieldAliases("rules", accept=(list,))

RULE_FIELDS: Dict[str, FieldAliases] = {
    "group_id": FieldAliases("group_id", "group_id_src", accept=TEXT_TYPES),
    "rule_id": FieldAliases("rule_id", "rule_id_src", accept=TEXT_TYPES),
    "rule_version": FieldAliases("rule_version", accept=TEXT_TYPES),
    "rule_title": FieldAliases("rule_title", accept=TEXT_TYPES),
    "severity": FieldAliases("severity", accept=TEXT_TYPES),
    "status": FieldAliases("status", accept=TEXT_TYPES),
    "group_title": FieldAliases("group_title", accept=TEXT_TYPES),
    "discussion": FieldAliases("discussion", accept=TEXT_TYPES),
    "check_content": FieldAliases("check_content", accept=TEXT_TYPES),
    "fix_text": FieldAliases("fix_text", accept=TEXT_TYPES),
    "finding_details": FieldAliases("finding_details", accept=TEXT_TYPES),
    "comments": FieldAliases("comments", accept=TEXT_TYPES),
}
EXPLICIT_CONTROLS = FieldAliases(
    "nist",
    "nist_controls",
    "nistControls",
    "NIST",
    "mappings.nist",
    "references.nist",
    accept=LIST_OR_TEXT,
)
RULE_CCIS = FieldAliases("ccis", "cci_refs", accept=LIST_OR_TEXT)

# Exported findings (camelCase export keys first, then our own JSON keys) ---
EXPORT_FIELDS: Dict[str, FieldAliases] = {
    "group_id": FieldAliases("vulnId", "group_id", accept=TEXT_TYPES),
    "rule_id": FieldAliases("ruleId", "rule_id", accept=TEXT_TYPES),
    "rule_version": FieldAliases("ruleVersion", "rule_version", accept=TEXT_TYPES),
    "rule_title": FieldAliases("title", "rule_title", accept=TEXT_TYPES),
    "severity": FieldAliases("severity", accept=TEXT_TYPES),
    "status": FieldAliases("status", accept=TEXT_TYPES),
    "stig_name": FieldAliases("stigName", "stig_name", accept=TEXT_TYPES),
    "stig_id": FieldAliases("stigId", "stig_id", accept=TEXT_TYPES),
    "stig_version": FieldAliases("stigVersion", "stig_version", accept=TEXT_TYPES),
    "stig_release": FieldAliases("stigRelease", "stig_release", accept=TEXT_TYPES),
    "group_title": FieldAliases("groupTitle", "group_title", accept=TEXT_TYPES),
    "discussion": FieldAliases("discussion", accept=TEXT_TYPES),
    "check_content": FieldAliases("checkContent", "check_content", accept=TEXT_TYPES),
    "fix_text": FieldAliases("fixText", "fix_text", accept=TEXT_TYPES),
    "finding_details": FieldAliases("findingDetails", "finding_details", accept=TEXT_TYPES),
    "comments": FieldAliases("comments", accept=TEXT_TYPES),
}
EXPORT_CONTROLS = FieldAliases("nistControls", "control_identifiers", accept=LIST_OR_TEXT)
EXPORT_CCIS = FieldAliases("ccis", accept=LIST_OR_TEXT)
EXPORT_ENTRIES = FieldAliases("vulnerabilities", "findings", accept=(list,))


class JsonBenchmarkParser(DocumentParser):
    """Parse CKLB checklists (``{"stigs": [...]}``) and finding exports.

    Export documents hold a flat ``vulnerabilities``/``findings`` array (or
    are a bare array) whose entries already carry resolved controls; they
    are mapped straight onto :class:`Finding` without re-deriving controls.
    """

    format = DocumentFormat.CKLB

    def __init__(self, *, normalizer: FindingNormalizer | None = None) -> None:
        self._normalizer = normalizer or FindingNormalizer()

    # ------------------------------------------------------------------
    def parse(
        self,
        content: bytes,
        *,
        source: str = "<memory>",
        dictionary: Optional[ControlMappingDictionary] = None,
    ) -> ImportResult:
        data = self._load(content, source)

        if isinstance(data, list):
            return self._parse_export(data, None, source)

        if not isinstance(data, Mapping):
            raise MalformedDocumentError(
                f"JSON document {source} must be an object or an array, got {type(data).__name__}"
            )

        stigs = STIG_SECTIONS.lookup(data)
        if stigs is not None:
            return self._parse_checklist(stigs, source, dictionary)

        entries = EXPORT_ENTRIES.lookup(data)
        if entries is not None:
            return self._parse_export(entries, data.get("cciMappings"), source)

        logger.warning("No STIG sections or exported findings found in %s", source)
        return ImportResult(source=source, format=self.format)

    # ------------------------------------------------------------------
    def _load(self, content: bytes, source: str) -> Any:
        try:
            return json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
            raise MalformedDocumentError(f"Invalid JSON in {source}: {exc}") from exc

    # CKLB ---------------------------------------------------------------
    def _parse_checklist(
        self,
        stigs: Sequence[Any],
        source: str,
        dictionary: Optional[ControlMappingDictionary],
    ) -> ImportResult:
        raw_findings: List[RawFinding] = []
        issues: List[EntryIssue] = []

        for stig_index, stig in enumerate(stigs):
            if not isinstance(stig, Mapping):
                logger.warning("Ignoring non-object STIG section %d in %s", stig_index, source)
                continue

            section = {
                "stig_name": STIG_NAME.text(stig, UNKNOWN_STIG),
                "stig_id": STIG_ID.text(stig),
                "stig_version": STIG_VERSION.text(stig),
                "stig_release": STIG_RELEASE.text(stig),
            }
            for rule_index, rule in enumerate(STIG_RULES.lookup(stig) or []):
                location = f"stigs[{stig_index}].rules[{rule_index}]"
                if not isinstance(rule, Mapping):
                    rule = {}
                raw = self._raw_rule(rule, section)
                if not raw.has_identity:
                    issues.append(
                        EntryIssue(
                            kind=IssueKind.ENTRY_DATA_MISSING,
                            location=location,
                            message="Rule has no group_id or rule_id",
                        )
                    )
                raw_findings.append(raw)

        findings = self._normalizer.normalize_all(raw_findings, dictionary)
        logger.debug("Parsed %d CKLB rules from %s", len(findings), source)
        return ImportResult(
            source=source,
            format=DocumentFormat.CKLB,
            findings=findings,
            issues=issues,
        )

    def _raw_rule(self, rule: Mapping[str, Any], section: Mapping[str, str]) -> RawFinding:
        values = {name: aliases.text(rule) for name, aliases in RULE_FIELDS.items()}
        return RawFinding(
            **values,
            **section,
            explicit_controls=tuple(split_controls(EXPLICIT_CONTROLS.lookup(rule))),
            ccis=tuple(split_reference_codes(RULE_CCIS.lookup(rule))),
        )

    # Exports ------------------------------------------------------------
    def _parse_export(
        self,
        entries: Sequence[Any],
        mappings: Any,
        source: str,
    ) -> ImportResult:
        findings = []
        issues: List[EntryIssue] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                entry = {}
            values = {name: aliases.text(entry) for name, aliases in EXPORT_FIELDS.items()}
            raw = RawFinding(
                **values,
                explicit_controls=tuple(split_controls(EXPORT_CONTROLS.lookup(entry))),
                ccis=tuple(split_reference_codes(EXPORT_CCIS.lookup(entry))),
            )
            if not raw.has_identity:
                issues.append(
                    EntryIssue(
                        kind=IssueKind.ENTRY_DATA_MISSING,
                        location=f"vulnerabilities[{index}]",
                        message="Exported finding has no vulnId or ruleId",
                    )
                )
            findings.append(self._normalizer.restore(raw))

        logger.debug("Restored %d exported findings from %s", len(findings), source)
        return ImportResult(
            source=source,
            format=DocumentFormat.EXPORT,
            findings=findings,
            dictionary=_export_dictionary(mappings),
            issues=issues,
        )


def _export_dictionary(mappings: Any) -> Optional[ControlMappingDictionary]:
    if not isinstance(mappings, Mapping):
        return None

    entries: Dict[str, List[str]] = {}
    for code, controls in mappings.items():
        if not isinstance(code, str):
            continue
        normalized = [normalize_control(control) for control in split_controls(controls)]
        entries[code] = [control for control in normalized if control]
    return ControlMappingDictionary(entries)


__all__ = ["JsonBenchmarkParser"]
