"""Utilities for loading and merging batch import manifest files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

import yaml


class ManifestError(RuntimeError):
    """Raised when batch manifests cannot be loaded or parsed."""


@dataclass(slots=True)
class ImportManifest:
    """Documents and parser settings for one batch import."""

    documents: List[Path] = field(default_factory=list)
    cci: List[Path] = field(default_factory=list)
    framework_markers: List[str] = field(default_factory=list)
    revision: str | None = None
    max_workers: int | None = None


class ManifestLoader:
    """Load YAML/JSON manifests and merge them in order.

    List keys (``documents``, ``cci``, ``framework_markers``) extend earlier
    manifests; scalar keys (``revision``, ``max_workers``) override them.
    Relative paths are resolved against the manifest's own directory.
    """

    def __init__(self, default_manifests: Sequence[Path | str] | None = None) -> None:
        self._default_manifests = [Path(path) for path in default_manifests or []]

    # ------------------------------------------------------------------
    def load(self, manifests: Sequence[Path | str] | None = None) -> ImportManifest:
        """Return the merged manifest for the defaults plus *manifests*."""

        manifest_paths = list(self._default_manifests)
        if manifests:
            manifest_paths.extend(Path(path) for path in manifests)

        merged = ImportManifest()
        for manifest_path in manifest_paths:
            data = self._load_manifest(manifest_path)
            base_dir = manifest_path.resolve().parent

            merged.documents.extend(self._paths(data, "documents", base_dir, manifest_path))
            merged.cci.extend(self._paths(data, "cci", base_dir, manifest_path))
            merged.framework_markers.extend(self._strings(data, "framework_markers", manifest_path))

            if data.get("revision") is not None:
                merged.revision = str(data["revision"]).strip() or None

            if data.get("max_workers") is not None:
                workers = data["max_workers"]
                if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
                    raise ManifestError(
                        f"max_workers must be a positive integer in manifest {manifest_path}"
                    )
                merged.max_workers = workers

        return merged

    # ------------------------------------------------------------------
    def _paths(
        self, data: Mapping[str, Any], key: str, base_dir: Path, manifest_path: Path
    ) -> List[Path]:
        paths: List[Path] = []
        for value in self._strings(data, key, manifest_path):
            path = Path(value).expanduser()
            paths.append(path if path.is_absolute() else base_dir / path)
        return paths

    def _strings(self, data: Mapping[str, Any], key: str, manifest_path: Path) -> List[str]:
        value = data.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ManifestError(
                f"'{key}' must be a string or a list of strings in manifest {manifest_path}"
            )
        return [item.strip() for item in value if item.strip()]

    def _load_manifest(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ManifestError(f"Batch manifest not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
            raise ManifestError(f"Failed to read batch manifest {path}") from exc

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as exc:
            raise ManifestError(f"Invalid YAML in batch manifest {path}") from exc

        if not isinstance(data, Mapping):
            raise ManifestError(f"Batch manifest must be a mapping: {path}")

        return dict(data)
