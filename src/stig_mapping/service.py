"""Orchestration layer that dispatches documents to parsers and aggregates results."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

from .adapters import (
    CciDocumentParser,
    ChecklistXmlParser,
    DocumentImportError,
    DocumentParser,
    JsonBenchmarkParser,
    UnsupportedFormatError,
)
from .models import BatchImportReport, ControlMappingDictionary, FileFailure, ImportResult
from .normalization import FindingNormalizer

logger = logging.getLogger(__name__)


class DocumentKind(str, Enum):
    """Which parser handles a document."""

    JSON_BENCHMARK = "json"
    CHECKLIST_XML = "ckl"
    CCI_MAPPING = "cci"


SUFFIX_KINDS: Mapping[str, DocumentKind] = {
    ".cklb": DocumentKind.JSON_BENCHMARK,
    ".json": DocumentKind.JSON_BENCHMARK,
    ".ckl": DocumentKind.CHECKLIST_XML,
    ".xml": DocumentKind.CHECKLIST_XML,
}


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """A document to import, held in memory or read lazily from *path*."""

    name: str
    content: Optional[bytes] = None
    path: Optional[Path] = None
    kind: Optional[DocumentKind] = None

    @classmethod
    def from_path(
        cls, path: Union[str, Path], *, kind: Optional[DocumentKind] = None
    ) -> "SourceDocument":
        resolved = Path(path)
        return cls(name=resolved.name, path=resolved, kind=kind)

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise DocumentImportError(f"No content or path provided for {self.name}")
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise DocumentImportError(f"Failed to read {self.path}: {exc.strerror or exc}") from exc


class ImportCoordinator:
    """Dispatch documents to parsers by kind and aggregate batch results.

    Parsing never touches shared mutable state: the mapping dictionary is
    read-only, so documents of a batch may be parsed on a thread pool. The
    report always lists files and findings in submission order.
    """

    def __init__(
        self,
        *,
        parsers: Mapping[DocumentKind, DocumentParser] | None = None,
        normalizer: FindingNormalizer | None = None,
        max_workers: int | None = None,
    ) -> None:
        normalizer = normalizer or FindingNormalizer()
        registry: MutableMapping[DocumentKind, DocumentParser] = {
            DocumentKind.JSON_BENCHMARK: JsonBenchmarkParser(normalizer=normalizer),
            DocumentKind.CHECKLIST_XML: ChecklistXmlParser(normalizer=normalizer),
            DocumentKind.CCI_MAPPING: CciDocumentParser(),
        }
        if parsers:
            registry.update(parsers)
        self._parsers = dict(registry)
        self._max_workers = max_workers

    # ------------------------------------------------------------------
    def resolve_kind(self, source: str, kind: DocumentKind | None = None) -> DocumentKind:
        """Return *kind* or the kind registered for the file suffix of *source*."""

        if kind is not None:
            return kind

        suffix = PurePath(source).suffix.lower()
        try:
            return SUFFIX_KINDS[suffix]
        except KeyError:
            raise UnsupportedFormatError(f"Unsupported file type: {source}") from None

    def import_document(
        self,
        content: bytes,
        *,
        source: str,
        kind: DocumentKind | None = None,
        dictionary: ControlMappingDictionary | None = None,
    ) -> ImportResult:
        """Parse a single in-memory document.

        Raises :class:`UnsupportedFormatError` or
        :class:`~stig_mapping.adapters.MalformedDocumentError`.
        """

        resolved = self.resolve_kind(source, kind)
        parser = self._parsers.get(resolved)
        if parser is None:
            raise UnsupportedFormatError(
                f"No parser registered for {resolved.value} documents: {source}"
            )

        result = parser.parse(content, source=source, dictionary=dictionary)
        logger.info(
            "Imported %s as %s: %d findings, %d issues",
            source,
            result.format.value,
            len(result.findings),
            len(result.issues),
        )
        return result

    def build_dictionary(
        self, documents: Iterable[SourceDocument]
    ) -> ControlMappingDictionary:
        """Parse CCI mapping documents and merge them into one dictionary.

        Any failure is fatal: a batch must not start with a partial mapping.
        """

        dictionary = ControlMappingDictionary.empty()
        for document in documents:
            result = self.import_document(
                document.read(),
                source=document.name,
                kind=document.kind or DocumentKind.CCI_MAPPING,
            )
            if result.dictionary is not None:
                dictionary = dictionary.merge(result.dictionary)
        logger.info("CCI dictionary holds %d mapped codes", len(dictionary))
        return dictionary

    def import_batch(
        self,
        documents: Sequence[SourceDocument],
        dictionary: ControlMappingDictionary | None = None,
        *,
        max_workers: int | None = None,
    ) -> BatchImportReport:
        """Import every document, recording failures without aborting the batch."""

        workers = max_workers if max_workers is not None else self._max_workers
        if workers and workers > 1 and len(documents) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(lambda doc: self._import_one(doc, dictionary), documents))
        else:
            outcomes = [self._import_one(document, dictionary) for document in documents]

        report = BatchImportReport()
        for outcome in outcomes:
            if isinstance(outcome, FileFailure):
                report.failures.append(outcome)
                continue
            report.results.append(outcome)
            report.findings.extend(outcome.findings)
        return report

    # ------------------------------------------------------------------
    def _import_one(
        self,
        document: SourceDocument,
        dictionary: ControlMappingDictionary | None,
    ) -> Union[ImportResult, FileFailure]:
        try:
            return self.import_document(
                document.read(),
                source=document.name,
                kind=document.kind,
                dictionary=dictionary,
            )
        except DocumentImportError as exc:
            logger.warning("Failed to import %s: %s", document.name, exc)
            return FileFailure(source=document.name, error=str(exc), kind=type(exc).__name__)


def documents_from_paths(
    paths: Iterable[Union[str, Path]], *, kind: DocumentKind | None = None
) -> List[SourceDocument]:
    return [SourceDocument.from_path(path, kind=kind) for path in paths]


__all__ = [
    "DocumentKind",
    "ImportCoordinator",
    "SUFFIX_KINDS",
    "SourceDocument",
    "documents_from_paths",
]
