"""Command-line interface implementation for the STIG control-mapping tooling."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from ..adapters import DEFAULT_FRAMEWORK_MARKERS, CciDocumentParser, DocumentImportError
from ..export import build_export_document
from ..manifests import ImportManifest, ManifestError, ManifestLoader
from ..models import BatchImportReport, ControlMappingDictionary, FindingSeverity, FindingStatus
from ..query import FindingFilter
from ..service import DocumentKind, ImportCoordinator, documents_from_paths
from .log_config import setup_logger

OUTPUT_FORMATS = ("table", "json", "export")
TITLE_WIDTH = 60


def render_table(report: BatchImportReport) -> str:
    """Render findings and file failures as a simple text table for terminal output."""

    lines: list[str] = []
    if not report.findings:
        lines.append("No findings imported.")
    else:
        headers = ("Severity", "Status", "Group", "Rule", "Controls", "Title")
        rows = [headers]
        for finding in report.findings:
            title = finding.rule_title
            if len(title) > TITLE_WIDTH:
                title = title[: TITLE_WIDTH - 3] + "..."
            rows.append(
                (
                    finding.severity.value,
                    finding.status.value,
                    finding.group_id or "-",
                    finding.rule_id or "-",
                    ", ".join(finding.control_identifiers) or "-",
                    title or "-",
                )
            )

        widths = [max(len(str(row[idx])) for row in rows) for idx in range(len(headers))]

        def format_row(values: Sequence[str]) -> str:
            padded = (value.ljust(width) for value, width in zip(values, widths, strict=True))
            return "  ".join(padded).rstrip()

        lines.append(format_row(headers))
        lines.append("  ".join("=" * width for width in widths))
        for row in rows[1:]:
            lines.append(format_row(row))

    lines.append("")
    lines.append(
        f"{len(report.findings)} findings from {report.files_imported} of {report.files_total} files"
    )
    for failure in report.failures:
        lines.append(f"Failed: {failure.source}: {failure.error}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="stig-mapper",
        description="Map STIG checklist findings to NIST SP 800-53 controls",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command")

    import_parser = subparsers.add_parser(
        "import", help="Import CKL/CKLB checklists or exports and report normalized findings."
    )
    import_parser.add_argument(
        "paths",
        type=Path,
        nargs="*",
        help="Checklist files (.ckl, .cklb, .xml, .json) to import, in order.",
    )
    import_parser.add_argument(
        "--manifest",
        dest="manifests",
        action="append",
        type=Path,
        default=None,
        help="Batch manifest (YAML/JSON) listing documents, CCI lists and parser options.",
    )
    _add_cci_arguments(import_parser)
    import_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parse documents concurrently on this many threads.",
    )

    filters = import_parser.add_argument_group("filters")
    filters.add_argument("--family", default=None, help="Only findings in a matching control family.")
    filters.add_argument("--control", default=None, help="Only findings mapped to a matching control.")
    filters.add_argument(
        "--severity",
        choices=[severity.value for severity in FindingSeverity],
        default=None,
        help="Only findings with this severity.",
    )
    filters.add_argument(
        "--status",
        choices=[status.value for status in FindingStatus],
        default=None,
        help="Only findings with this status.",
    )
    filters.add_argument("--stig", default=None, help="Only findings from a matching STIG.")
    filters.add_argument("--cci-code", default=None, help="Only findings referencing a matching CCI.")
    filters.add_argument("--search", default=None, help="Free-text search over all finding fields.")

    import_parser.add_argument(
        "--fail-on",
        choices=[severity.value for severity in FindingSeverity],
        default=None,
        help="Exit with status 1 when open findings at or above this severity are present.",
    )
    import_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="table",
        help="Output format: terminal table, JSON report, or re-importable export document.",
    )
    import_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write output to this file instead of standard output.",
    )

    cci_parser = subparsers.add_parser(
        "cci", help="Compile CCI list documents into a JSON CCI-to-control mapping."
    )
    cci_parser.add_argument("paths", type=Path, nargs="+", help="CCI list XML documents.")
    _add_cci_arguments(cci_parser, include_files=False)
    cci_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the mapping to this file instead of standard output.",
    )

    return parser


def _add_cci_arguments(parser: argparse.ArgumentParser, *, include_files: bool = True) -> None:
    if include_files:
        parser.add_argument(
            "--cci",
            dest="cci_files",
            action="append",
            type=Path,
            default=None,
            help="CCI list XML used to map CCIs to controls (repeatable).",
        )
    parser.add_argument(
        "--framework-marker",
        dest="framework_markers",
        action="append",
        default=None,
        help="Reference creator marker to accept (default: NIST).",
    )
    parser.add_argument(
        "--revision",
        default=None,
        help="Only use CCI references for this framework revision (e.g. 4 or 5).",
    )


def create_coordinator(
    *,
    framework_markers: Sequence[str] | None = None,
    revision: str | None = None,
    max_workers: int | None = None,
) -> ImportCoordinator:
    """Create an import coordinator with the configured CCI list parser."""

    cci_parser = CciDocumentParser(
        framework_markers=list(framework_markers or DEFAULT_FRAMEWORK_MARKERS),
        revision=revision,
    )
    return ImportCoordinator(
        parsers={DocumentKind.CCI_MAPPING: cci_parser},
        max_workers=max_workers,
    )


def _merge_settings(args: argparse.Namespace) -> ImportManifest:
    manifest = ManifestLoader().load(getattr(args, "manifests", None))

    manifest.documents.extend(getattr(args, "paths", None) or [])
    manifest.cci.extend(getattr(args, "cci_files", None) or [])
    manifest.framework_markers.extend(args.framework_markers or [])
    if args.revision:
        manifest.revision = args.revision
    workers = getattr(args, "workers", None)
    if workers is not None:
        if workers < 1:
            raise ManifestError("--workers must be a positive integer")
        manifest.max_workers = workers
    return manifest


def _build_filter(args: argparse.Namespace) -> FindingFilter:
    return FindingFilter(
        family=args.family,
        control=args.control,
        severity=args.severity,
        status=args.status,
        stig=args.stig,
        cci=args.cci_code,
        search=args.search,
    )


def _format_report(
    report: BatchImportReport,
    dictionary: ControlMappingDictionary,
    *,
    output_format: str,
) -> str:
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"format must be one of {', '.join(OUTPUT_FORMATS)}")

    if output_format == "json":
        return json.dumps(report.to_dict(), indent=2)
    if output_format == "export":
        document = build_export_document(
            report.findings,
            dictionary,
            metadata={"totalFiles": report.files_imported},
        )
        return json.dumps(document, indent=2)
    return render_table(report)


def _should_fail(report: BatchImportReport, fail_on: FindingSeverity | None) -> bool:
    if report.failures:
        return True
    if fail_on is None:
        return False
    return any(finding.is_open and finding.severity.rank >= fail_on.rank for finding in report.findings)


def _emit(output: str, destination: Path | None) -> None:
    if destination is None:
        print(output)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(output + "\n", encoding="utf-8")


def _handle_import(args: argparse.Namespace) -> int:
    try:
        settings = _merge_settings(args)
    except ManifestError as exc:
        print(f"Error: {exc}")
        return 2

    if not settings.documents:
        print("Error: no documents to import")
        return 2

    coordinator = create_coordinator(
        framework_markers=settings.framework_markers,
        revision=settings.revision,
        max_workers=settings.max_workers,
    )

    try:
        dictionary = coordinator.build_dictionary(
            documents_from_paths(settings.cci, kind=DocumentKind.CCI_MAPPING)
        )
    except DocumentImportError as exc:
        print(f"Error: {exc}")
        return 2

    report = coordinator.import_batch(documents_from_paths(settings.documents), dictionary)

    finding_filter = _build_filter(args)
    if not finding_filter.is_empty:
        report = BatchImportReport(
            findings=finding_filter.apply(report.findings),
            results=report.results,
            failures=report.failures,
        )

    output = _format_report(report, dictionary, output_format=args.format)
    _emit(output, args.output)

    fail_on = FindingSeverity(args.fail_on) if args.fail_on else None
    return 1 if _should_fail(report, fail_on) else 0


def _handle_cci(args: argparse.Namespace) -> int:
    coordinator = create_coordinator(
        framework_markers=args.framework_markers,
        revision=args.revision,
    )
    try:
        dictionary = coordinator.build_dictionary(
            documents_from_paths(args.paths, kind=DocumentKind.CCI_MAPPING)
        )
    except DocumentImportError as exc:
        print(f"Error: {exc}")
        return 2

    _emit(json.dumps(dictionary.to_dict(), indent=2), args.output)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(args.verbose, args.log_file)

    if args.command == "import":
        return _handle_import(args)
    if args.command == "cci":
        return _handle_cci(args)

    parser.print_help()
    return 0


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
