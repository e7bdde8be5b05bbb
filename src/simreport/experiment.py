"""Experiment records and the YAML manifest loader."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from simreport.configs.logger import logger
from simreport.errors import ManifestError
from simreport.metadata.avu import AttributeValueSet

# Per-file metadata keys for tabular data
DATA_LABELS = "DATA_LABELS"
DATA_UNITS = "DATA_UNITS"
PLOT_TITLE = "PLOT_TITLE"


class FileFormat(str, Enum):
    """Analysis file formats the report knows how to embed."""

    JPEG = "JPEG"
    PNG = "PNG"
    BMP = "BMP"
    GIF = "GIF"
    CSV = "CSV"

    @classmethod
    def from_path(cls, path: str | Path) -> FileFormat | None:
        return _EXTENSION_FORMATS.get(Path(path).suffix.lower().lstrip("."))


_EXTENSION_FORMATS = {
    "jpg": FileFormat.JPEG,
    "jpeg": FileFormat.JPEG,
    "png": FileFormat.PNG,
    "bmp": FileFormat.BMP,
    "gif": FileFormat.GIF,
    "csv": FileFormat.CSV,
}


@dataclass(frozen=True)
class AnalysisFile:
    path: Path
    name: str
    format: FileFormat
    metadata: dict[str, str] = field(default_factory=dict, compare=False)

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        file_format: FileFormat | None = None,
        metadata: dict[str, Any] | None = None,
        name: str | None = None,
    ) -> AnalysisFile:
        path = Path(path).resolve()
        file_format = file_format or FileFormat.from_path(path)
        if file_format is None:
            raise ValueError(f"Unsupported analysis file format: {path}")
        return cls(
            path=path,
            name=name or path.name,
            format=file_format,
            metadata={str(k): str(v) for k, v in (metadata or {}).items()},
        )


@dataclass(frozen=True)
class ExperimentRecord:
    name: str
    metadata: AttributeValueSet = field(default_factory=AttributeValueSet)
    description: str | None = None
    systems_summary: dict[str, Any] = field(default_factory=dict)
    tasks_summary: dict[str, Any] = field(default_factory=dict)
    analysis_files: dict[FileFormat, list[AnalysisFile]] = field(default_factory=dict)

    def files_by_format(self) -> dict[FileFormat, list[AnalysisFile]]:
        """Return analysis files grouped by format tag, in manifest order."""
        return {fmt: list(files) for fmt, files in self.analysis_files.items()}


def group_files(files: list[AnalysisFile]) -> dict[FileFormat, list[AnalysisFile]]:
    grouped: dict[FileFormat, list[AnalysisFile]] = {}
    for analysis_file in files:
        grouped.setdefault(analysis_file.format, []).append(analysis_file)
    return grouped


def _parse_file_entry(entry: Any, base_dir: Path) -> AnalysisFile | None:
    if isinstance(entry, str):
        entry = {"path": entry}
    if not isinstance(entry, dict) or "path" not in entry:
        raise ManifestError(f"Invalid analysis file entry: {entry!r}")

    path = Path(entry["path"]).expanduser()
    if not path.is_absolute():
        path = base_dir / path

    file_format = None
    if entry.get("format"):
        try:
            file_format = FileFormat(str(entry["format"]).upper())
        except ValueError:
            logger.debug("Skipping %s: unsupported format %s", path, entry["format"])
            return None
    elif FileFormat.from_path(path) is None:
        logger.debug("Skipping %s: unsupported file extension", path)
        return None

    return AnalysisFile.from_path(
        path,
        file_format=file_format,
        metadata=entry.get("metadata"),
        name=entry.get("name"),
    )


def load_experiment(manifest_path: str | Path) -> ExperimentRecord:
    """Load an experiment record from a YAML manifest.

    Relative file paths are resolved against the manifest's directory.

    Raises:
        ManifestError: If the manifest is malformed or has no ``name``.
        FileNotFoundError: If the manifest does not exist.
    """
    manifest_path = Path(manifest_path)
    with manifest_path.open(encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as e:
            raise ManifestError(f"Cannot parse manifest {manifest_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ManifestError(f"Manifest {manifest_path} must be a mapping")
    name = str(raw.get("name") or "").strip()
    if not name:
        raise ManifestError(f"Manifest {manifest_path} has no experiment name")

    base_dir = manifest_path.resolve().parent
    files = []
    for entry in raw.get("files") or []:
        analysis_file = _parse_file_entry(entry, base_dir)
        if analysis_file is not None:
            files.append(analysis_file)

    return ExperimentRecord(
        name=name,
        description=raw.get("description"),
        metadata=AttributeValueSet(raw.get("metadata") or {}),
        systems_summary=dict(raw.get("systems") or {}),
        tasks_summary=dict(raw.get("tasks") or {}),
        analysis_files=group_files(files),
    )
