"""Reconcile control identifiers for raw checklist entries and build Findings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..models import Finding, FindingSeverity, FindingStatus
from .controls import ControlPatternMatcher, derive_families, normalize_control

logger = logging.getLogger(__name__)

MappingSource = Mapping[str, AbstractSet[str]]


@dataclass(frozen=True, slots=True)
class RawFinding:
    """Parser output for one checklist entry, before control reconciliation."""

    group_id: str = ""
    rule_id: str = ""
    rule_version: str = ""
    rule_title: str = ""
    severity: str = ""
    status: str = ""
    stig_name: str = ""
    stig_id: str = ""
    stig_version: str = ""
    stig_release: str = ""
    group_title: str = ""
    discussion: str = ""
    check_content: str = ""
    fix_text: str = ""
    finding_details: str = ""
    comments: str = ""
    explicit_controls: Tuple[str, ...] = ()
    ccis: Tuple[str, ...] = ()

    @property
    def has_identity(self) -> bool:
        return bool(self.group_id or self.rule_id)


class FindingNormalizer:
    """Turn :class:`RawFinding` entries into immutable :class:`Finding` records.

    Control identifiers are taken, in order of authority, from explicit
    fields, from the CCI mapping dictionary and, only when both of those are
    empty, from a heuristic scan of the free-text fields.
    """

    def __init__(self, *, matcher: ControlPatternMatcher | None = None) -> None:
        self._matcher = matcher or ControlPatternMatcher()

    def normalize(self, raw: RawFinding, dictionary: Optional[MappingSource] = None) -> Finding:
        """Return the normalized finding for *raw*; *dictionary* is never mutated."""

        explicit = self._explicit_controls(raw.explicit_controls)
        mapped = self._mapped_controls(raw.ccis, dictionary)
        heuristic: frozenset[str] = frozenset()
        if not explicit and not mapped:
            heuristic = self._matcher.find_all(
                raw.rule_title,
                raw.discussion,
                raw.check_content,
                raw.fix_text,
                raw.group_title,
                raw.finding_details,
                raw.comments,
            )

        return self._build(raw, explicit | mapped | heuristic)

    def restore(self, raw: RawFinding) -> Finding:
        """Rebuild a finding whose controls were resolved by an earlier import.

        ``raw.explicit_controls`` are taken as the complete control list; no
        dictionary lookup or text scan happens.
        """

        return self._build(raw, self._explicit_controls(raw.explicit_controls))

    def normalize_all(
        self,
        entries: Iterable[RawFinding],
        dictionary: Optional[MappingSource] = None,
    ) -> List[Finding]:
        findings = [self.normalize(entry, dictionary) for entry in entries]
        logger.debug("Normalized %d findings", len(findings))
        return findings

    # ------------------------------------------------------------------
    def _build(self, raw: RawFinding, resolved: AbstractSet[str]) -> Finding:
        controls = tuple(sorted(resolved))
        severity = FindingSeverity.from_vendor(raw.severity)
        status = FindingStatus.from_vendor(raw.status)

        return Finding(
            group_id=raw.group_id,
            rule_id=raw.rule_id,
            rule_version=raw.rule_version,
            rule_title=raw.rule_title,
            severity=severity,
            status=status,
            stig_name=raw.stig_name,
            stig_id=raw.stig_id,
            stig_version=raw.stig_version,
            stig_release=raw.stig_release,
            group_title=raw.group_title,
            discussion=raw.discussion,
            check_content=raw.check_content,
            fix_text=raw.fix_text,
            finding_details=raw.finding_details,
            comments=raw.comments,
            ccis=tuple(raw.ccis),
            control_identifiers=controls,
            families=derive_families(controls),
            search_blob=build_search_blob(raw, severity=severity, status=status),
        )

    def _explicit_controls(self, candidates: Sequence[str]) -> frozenset[str]:
        return frozenset(control for control in map(normalize_control, candidates) if control)

    def _mapped_controls(
        self, ccis: Sequence[str], dictionary: Optional[MappingSource]
    ) -> frozenset[str]:
        if not dictionary or not ccis:
            return frozenset()

        mapped: set[str] = set()
        for cci in ccis:
            for control in dictionary.get(cci, ()):
                normalized = normalize_control(control)
                if normalized:
                    mapped.add(normalized)
        return frozenset(mapped)


def build_search_blob(
    raw: RawFinding,
    *,
    severity: FindingSeverity,
    status: FindingStatus,
) -> str:
    """Lower-cased, space-joined text used for substring search."""

    fields = [
        raw.stig_name,
        raw.group_id,
        raw.rule_id,
        raw.rule_version,
        raw.rule_title,
        severity.value,
        status.value,
        " ".join(raw.ccis),
        raw.group_title,
        raw.discussion,
        raw.check_content,
        raw.fix_text,
        raw.finding_details,
        raw.comments,
    ]
    return " ".join(field for field in fields if field).lower()
