"""Command-line interface package for the STIG control-mapping tooling."""

from .app import (
    OUTPUT_FORMATS,
    build_parser,
    create_coordinator,
    main,
    render_table,
    run,
)

__all__ = [
    "OUTPUT_FORMATS",
    "build_parser",
    "create_coordinator",
    "main",
    "render_table",
    "run",
]
