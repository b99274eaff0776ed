"""Adapter layer package for parsing checklist and CCI mapping documents."""

from .base import (
    DocumentImportError,
    DocumentParser,
    MalformedDocumentError,
    UnsupportedFormatError,
)
from .cci_parser import DEFAULT_FRAMEWORK_MARKERS, CciDocumentParser
from .checklist_xml import ChecklistXmlParser
from .fields import FieldAliases
from .json_benchmark import JsonBenchmarkParser

__all__ = [
    "CciDocumentParser",
    "ChecklistXmlParser",
    "DEFAULT_FRAMEWORK_MARKERS",
    "DocumentImportError",
    "DocumentParser",
    "FieldAliases",
    "JsonBenchmarkParser",
    "MalformedDocumentError",
    "UnsupportedFormatError",
]
