"""Parser for the DISA CCI list (``U_CCI_List.xml``)."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence
from xml.etree.ElementTree import Element

from ..models import (
    ControlMappingDictionary,
    DocumentFormat,
    EntryIssue,
    ImportResult,
    IssueKind,
)
from ..normalization import ControlPatternMatcher, leading_control, normalize_reference_token
from .base import DocumentParser, element_text, iter_descendants, parse_xml

logger = logging.getLogger(__name__)

DEFAULT_FRAMEWORK_MARKERS = ("NIST",)


class CciDocumentParser(DocumentParser):
    """Build a :class:`ControlMappingDictionary` from a CCI list document.

    Only references whose ``creator`` names one of ``framework_markers`` are
    used. The control is read from the reference ``index`` (``AC-2 e`` ->
    ``AC-2``); when the index holds none, the reference title and body are
    scanned instead. ``revision`` restricts references to one ``version``.
    """

    format = DocumentFormat.CCI

    def __init__(
        self,
        *,
        framework_markers: Sequence[str] = DEFAULT_FRAMEWORK_MARKERS,
        revision: str | None = None,
        matcher: ControlPatternMatcher | None = None,
    ) -> None:
        self.framework_markers = tuple(marker.upper() for marker in framework_markers if marker)
        self.revision = revision.strip() if revision else None
        self._matcher = matcher or ControlPatternMatcher()

    # ------------------------------------------------------------------
    def parse(
        self,
        content: bytes,
        *,
        source: str = "<memory>",
        dictionary: Optional[ControlMappingDictionary] = None,
    ) -> ImportResult:
        root = parse_xml(content, source)

        entries: Dict[str, set[str]] = {}
        issues: List[EntryIssue] = []
        for position, item in enumerate(iter_descendants(root, "cci_item"), start=1):
            raw_code = (item.get("id") or "").strip()
            code = normalize_reference_token(raw_code) or raw_code
            if not code:
                issues.append(
                    EntryIssue(
                        kind=IssueKind.DICTIONARY_ENTRY_SKIPPED,
                        location=f"cci_item[{position}]",
                        message="CCI item has no id attribute",
                    )
                )
                continue

            controls = self._controls_for_item(item)
            if controls:
                entries.setdefault(code, set()).update(controls)

        mapping = ControlMappingDictionary(entries)
        if issues:
            logger.warning("Skipped %d CCI items without an id in %s", len(issues), source)
        logger.debug("Parsed %d CCI mappings from %s", len(mapping), source)

        return ImportResult(
            source=source,
            format=self.format,
            dictionary=mapping,
            issues=issues,
        )

    # ------------------------------------------------------------------
    def _controls_for_item(self, item: Element) -> set[str]:
        controls: set[str] = set()
        for reference in iter_descendants(item, "reference"):
            if not self._is_framework_reference(reference):
                continue

            control = leading_control(reference.get("index"))
            if control:
                controls.add(control)
                continue

            controls.update(self._matcher.find_all(reference.get("title"), element_text(reference)))
        return controls

    def _is_framework_reference(self, reference: Element) -> bool:
        creator = (reference.get("creator") or "").upper()
        if not any(marker in creator for marker in self.framework_markers):
            return False
        if self.revision is not None:
            return (reference.get("version") or "").strip() == self.revision
        return True


__all__ = ["CciDocumentParser", "DEFAULT_FRAMEWORK_MARKERS"]
