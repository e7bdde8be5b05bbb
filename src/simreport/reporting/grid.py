"""Lay out analysis images into a fixed-column table."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from simreport.experiment import AnalysisFile, FileFormat
from simreport.reporting.document import ImageGrid

GRID_COLUMNS = 2

# Static images are embedded in this order, before any generated plots
STATIC_IMAGE_FORMATS = (
    FileFormat.JPEG,
    FileFormat.PNG,
    FileFormat.BMP,
    FileFormat.GIF,
)


def collect_static_images(
    files_by_format: Mapping[FileFormat, Sequence[AnalysisFile]],
) -> list[Path]:
    images = []
    for file_format in STATIC_IMAGE_FORMATS:
        images.extend(f.path for f in files_by_format.get(file_format, ()))
    return images


def layout_grid(images: Sequence[Path], columns: int = GRID_COLUMNS) -> ImageGrid | None:
    """Place images row by row, padding the last row with empty cells.

    Returns ``None`` for an empty image list.
    """
    if columns < 1:
        raise ValueError(f"columns must be >= 1, got {columns}")
    if not images:
        return None

    rows = []
    for start in range(0, len(images), columns):
        row = list(images[start : start + columns])
        row.extend([None] * (columns - len(row)))
        rows.append(tuple(row))
    return ImageGrid(columns=columns, rows=tuple(rows))
