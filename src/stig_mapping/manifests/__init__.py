"""Batch manifest loading utilities."""

from .manifest_loader import ImportManifest, ManifestError, ManifestLoader

__all__ = [
    "ImportManifest",
    "ManifestError",
    "ManifestLoader",
]
