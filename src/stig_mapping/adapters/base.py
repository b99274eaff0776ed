"""Parser contract, document-level errors and shared XML helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from ..models import ControlMappingDictionary, DocumentFormat, ImportResult

UNKNOWN_STIG = "Unknown STIG"


class DocumentImportError(RuntimeError):
    """Base class for errors that abort the import of a whole document."""


class MalformedDocumentError(DocumentImportError):
    """Raised when a document is not well-formed XML or JSON."""


class UnsupportedFormatError(DocumentImportError):
    """Raised when no parser is registered for a document."""


class DocumentParser(ABC):
    """Abstract base class describing the document parser contract."""

    format: DocumentFormat

    @abstractmethod
    def parse(
        self,
        content: bytes,
        *,
        source: str = "<memory>",
        dictionary: Optional[ControlMappingDictionary] = None,
    ) -> ImportResult:
        """Parse *content* and return the findings (or mapping) it holds."""


# XML helpers ------------------------------------------------------------
def parse_xml(content: bytes, source: str) -> Element:
    """Parse untrusted XML, refusing DTD entity tricks."""

    try:
        return DefusedET.fromstring(content)
    except DefusedET.ParseError as exc:
        raise MalformedDocumentError(f"Invalid XML in {source}: {exc}") from exc
    except DefusedXmlException as exc:
        raise MalformedDocumentError(f"Rejected unsafe XML in {source}: {exc}") from exc


def local_name(tag: object) -> str:
    """Return *tag* without its ``{namespace}`` prefix."""

    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_children(element: Element, name: str) -> Iterator[Element]:
    for child in element:
        if local_name(child.tag) == name:
            yield child


def iter_descendants(element: Element, name: str) -> Iterator[Element]:
    """Yield descendants of *element* (not *element* itself) named *name*."""

    for node in element.iter():
        if node is not element and local_name(node.tag) == name:
            yield node


def child_text(element: Element, name: str) -> str:
    for child in iter_children(element, name):
        return element_text(child)
    return ""


def element_text(element: Element) -> str:
    return "".join(element.itertext()).strip()


__all__ = [
    "DocumentImportError",
    "DocumentParser",
    "MalformedDocumentError",
    "UNKNOWN_STIG",
    "UnsupportedFormatError",
    "child_text",
    "element_text",
    "iter_children",
    "iter_descendants",
    "local_name",
    "parse_xml",
]
