"""Plot generation for tabular analysis files."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path

import matplotlib as mpl
import matplotlib.pyplot as plt
import pandas as pd

from simreport.configs.logger import logger
from simreport.errors import PlotError
from simreport.experiment import (
    DATA_LABELS,
    DATA_UNITS,
    PLOT_TITLE,
    AnalysisFile,
)
from simreport.utils.parallel import parallel_map

mpl.use("Agg")

Plotter = Callable[[str, Mapping[str, str], str, str], None]

PLOT_SUFFIX = "_plot"

plt.rcParams.update(
    {
        "font.size": 11,
        "axes.titlesize": 13,
        "axes.labelsize": 11,
        "legend.fontsize": 9,
    }
)


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",")]


def _axis_label(label: str, unit: str) -> str:
    return f"{label} ({unit})" if unit else label


def render_plot(
    source_path: str,
    axis_metadata: Mapping[str, str],
    dest_without_extension: str,
    image_format: str = "png",
) -> None:
    """Plot a CSV file and save it as ``<dest_without_extension>.<image_format>``.

    The first column is the x axis and every other column is drawn as a line
    against it. ``DATA_LABELS`` and ``DATA_UNITS`` are comma-separated lists
    aligned with the columns; when labels are given the file is read without
    a header row.

    Raises:
        PlotError: If the file has fewer than two numeric columns or no rows.
    """
    labels = _split_list(axis_metadata.get(DATA_LABELS))
    units = _split_list(axis_metadata.get(DATA_UNITS))

    df = pd.read_csv(source_path, comment="#", header=None if labels else "infer")
    df = df.apply(pd.to_numeric, errors="coerce").dropna(axis=1, how="all").dropna()
    if df.shape[1] < 2:
        raise PlotError(f"{source_path}: need at least two numeric columns")
    if df.empty:
        raise PlotError(f"{source_path}: no numeric rows to plot")

    n_cols = df.shape[1]
    if labels:
        names = (labels + [f"column {i + 1}" for i in range(len(labels), n_cols)])[:n_cols]
    else:
        names = [str(c) for c in df.columns]
    units = (units + [""] * n_cols)[:n_cols]

    fig, ax = plt.subplots(figsize=(6, 4.5))
    try:
        x = df.iloc[:, 0]
        for idx in range(1, n_cols):
            ax.plot(x, df.iloc[:, idx], linewidth=1.0, label=names[idx])
        ax.set_xlabel(_axis_label(names[0], units[0]))
        if n_cols == 2:
            ax.set_ylabel(_axis_label(names[1], units[1]))
        else:
            ax.legend(loc="best", frameon=False)
        title = axis_metadata.get(PLOT_TITLE) or Path(source_path).name
        ax.set_title(title)
        ax.grid(alpha=0.3)
        fig.tight_layout()
        fig.savefig(f"{dest_without_extension}.{image_format}", dpi=150)
    finally:
        plt.close(fig)


@dataclass(frozen=True)
class PlotJob:
    source: AnalysisFile
    dest_base: Path


@dataclass(frozen=True)
class PlotResult:
    source: AnalysisFile
    image_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image_path is not None


def plot_output_base(temp_dir: Path, index: int, source: AnalysisFile) -> Path:
    """Per-file unique target path (without extension) inside *temp_dir*."""
    return Path(temp_dir) / f"{index:03d}_{source.name}{PLOT_SUFFIX}"


def _run_plot_job(job: PlotJob, plotter: Plotter, image_format: str) -> PlotResult:
    plotter(str(job.source.path), dict(job.source.metadata), str(job.dest_base), image_format)
    image_path = Path(f"{job.dest_base}.{image_format}")
    if not image_path.is_file():
        raise PlotError(f"plotter produced no image at {image_path}")
    return PlotResult(source=job.source, image_path=image_path)


def _failed(job: PlotJob, exc: BaseException) -> PlotResult:
    reason = str(exc) or type(exc).__name__
    logger.warning(
        "Plot for '%s' could not be generated: %s", job.source.path, reason
    )
    return PlotResult(source=job.source, error=reason)


def generate_plots(
    csv_files: Sequence[AnalysisFile],
    temp_dir: str | os.PathLike,
    plotter: Plotter = render_plot,
    image_format: str = "png",
    n_jobs: int = 1,
    timeout: float | None = None,
    progress: Callable[[int, int], None] | None = None,
) -> list[PlotResult]:
    """Plot every tabular file into *temp_dir*, isolating failures.

    A file whose plot raises, times out or produces no image yields a failed
    :class:`PlotResult` and a warning; the remaining files are still plotted.
    Results are returned in input order.
    *progress* is called as ``progress(done, total)`` after each file.
    """
    temp_dir = Path(temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    jobs = [
        PlotJob(source=f, dest_base=plot_output_base(temp_dir, idx, f))
        for idx, f in enumerate(csv_files)
    ]
    worker = partial(_run_plot_job, plotter=plotter, image_format=image_format)
    return parallel_map(
        worker,
        jobs,
        n_jobs=n_jobs,
        timeout=timeout,
        on_error=_failed,
        progress=progress,
    )
