"""Report generator for simulation experiment records."""

from __future__ import annotations

import getpass
import shutil
import tempfile
from datetime import datetime
from enum import Enum
from pathlib import Path

from simreport.configs.logger import logger
from simreport.errors import ReportStateError
from simreport.experiment import ExperimentRecord, FileFormat
from simreport.metadata import attributes as attr
from simreport.metadata.attributes import AttributeResolver
from simreport.reporting import methods
from simreport.reporting.document import (
    Block,
    ReportDocument,
    Section,
    TextBlock,
    TextStyle,
)
from simreport.reporting.formatting import format_attribute, format_composition
from simreport.reporting.grid import GRID_COLUMNS, collect_static_images, layout_grid
from simreport.reporting.pdf_writer import write_pdf
from simreport.reporting.plots import Plotter, PlotResult, generate_plots, render_plot
from simreport.reporting.theme import DEFAULT_THEME, ReportTheme

CREATOR = "simreport"

TITLE_SECTION = "Title"
MOLECULAR_SYSTEM_SECTION = "Molecular system"
ANALYSIS_SECTION = "Analysis data"
NO_ANALYSIS_DATA = "No analysis data available"


class BuildState(str, Enum):
    INITIALIZING = "initializing"
    TITLE_WRITTEN = "title_written"
    SECTIONS_WRITTEN = "sections_written"
    FINALIZED = "finalized"


def sweep_temp_dir(temp_dir: Path) -> int:
    """Delete every file in *temp_dir*; failures are logged and ignored.

    Returns:
        Number of files deleted.
    """
    deleted = 0
    try:
        entries = list(Path(temp_dir).iterdir())
    except OSError as e:
        logger.debug("Cannot list temp directory %s: %s", temp_dir, e)
        return 0
    for entry in entries:
        try:
            if entry.is_file() or entry.is_symlink():
                entry.unlink()
                deleted += 1
        except OSError as e:
            logger.debug("Could not delete temp file %s: %s", entry, e)
    return deleted


class ReportBuilder:
    """Builds one PDF report for one experiment.

    Steps run strictly in order (title, sections, finalize) and a builder is
    not reusable. :meth:`build` runs them all; the temp location is swept
    after finalization and also when an earlier step fails.
    """

    def __init__(
        self,
        experiment: ExperimentRecord,
        resolver: AttributeResolver,
        output_path: str | Path,
        temp_dir: str | Path,
        *,
        theme: ReportTheme = DEFAULT_THEME,
        verbose: bool = True,
        isolate_temp: bool = False,
        n_jobs: int = 1,
        plot_timeout: float | None = None,
        image_format: str = "png",
        plotter: Plotter = render_plot,
        author: str | None = None,
        now: datetime | None = None,
    ):
        """Initialize the report builder.

        Args:
            experiment: Experiment record to report on (never modified)
            resolver: Attribute dictionary used for display labels
            output_path: Where the PDF is written
            temp_dir: Location for generated plot images
            theme: Fonts, colors and page format
            verbose: Log progress lines at INFO instead of DEBUG
            isolate_temp: Use a fresh sub-directory of ``temp_dir`` for this
                build and remove it afterwards
            n_jobs: Worker processes for plot generation
            plot_timeout: Seconds allowed per plot, ``None`` for no limit
            image_format: Format of generated plot images
            plotter: Plotting utility for CSV files
            author: Document author, defaults to the current user
            now: Creation timestamp, defaults to the current time
        """
        self.experiment = experiment
        self.resolver = resolver
        self.output_path = Path(output_path)
        self.theme = theme
        self.verbose = verbose
        self.n_jobs = n_jobs
        self.plot_timeout = plot_timeout
        self.image_format = image_format
        self.plotter = plotter

        self._say("Initializing PDF document...")
        base_temp = Path(temp_dir)
        base_temp.mkdir(parents=True, exist_ok=True)
        self._owns_temp = isolate_temp
        self.temp_dir = (
            Path(tempfile.mkdtemp(prefix="build_", dir=base_temp))
            if isolate_temp
            else base_temp
        )

        self.author = author or getpass.getuser()
        self.created = now or datetime.now()
        self.state = BuildState.INITIALIZING
        self.plot_results: list[PlotResult] = []
        self._sections: list[Section] = []
        self._document: ReportDocument | None = None

    def _say(self, message: str, *args) -> None:
        if self.verbose:
            logger.info(message, *args)
        else:
            logger.debug(message, *args)

    def _plot_progress(self, done: int, total: int) -> None:
        self._say("Plotted %d/%d CSV files", done, total)

    def _advance(self, expected: BuildState, new_state: BuildState) -> None:
        if self.state != expected:
            raise ReportStateError(
                f"Cannot move to {new_state.value}: builder is {self.state.value}, "
                f"expected {expected.value}"
            )
        self.state = new_state

    @property
    def document(self) -> ReportDocument:
        """The assembled document, available once all sections are written."""
        if self._document is None:
            raise ReportStateError("Report sections have not been written yet")
        return self._document

    def build(self) -> ReportDocument:
        """Run every step and write the PDF.

        Returns:
            The immutable document that was written.
        """
        try:
            self.write_title()
            self.write_sections()
        except BaseException:
            self.cleanup()
            raise
        self.finalize()
        logger.info("Report generated: %s", self.output_path)
        return self.document

    def write_title(self) -> None:
        self._advance(BuildState.INITIALIZING, BuildState.TITLE_WRITTEN)
        self._say("Adding text...")
        blocks: list[Block] = [
            TextBlock(self.experiment.name.upper(), TextStyle.TITLE),
            TextBlock(
                f"Report automatically generated by {CREATOR} "
                f"({self.author}, {self.created:%a %b %d %H:%M:%S %Y})",
                TextStyle.BYLINE,
            ),
        ]
        description = (self.experiment.description or "").strip()
        if description:
            blocks.append(TextBlock(description, TextStyle.ABSTRACT))
        self._sections.append(Section(TITLE_SECTION, tuple(blocks), heading=False))

    def write_sections(self) -> None:
        self._advance(BuildState.TITLE_WRITTEN, BuildState.SECTIONS_WRITTEN)
        self._sections.append(self._molecular_system_section())
        self._sections.append(self._method_section())
        self._sections.append(self._analysis_section())
        self._document = ReportDocument(
            title=self.experiment.name,
            author=self.author,
            creator=CREATOR,
            created=self.created,
            sections=tuple(self._sections),
        )

    def finalize(self) -> Path:
        """Write the PDF, then sweep the temp location whatever the outcome."""
        self._advance(BuildState.SECTIONS_WRITTEN, BuildState.FINALIZED)
        try:
            return write_pdf(self.document, self.output_path, self.theme)
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Delete temporary artifacts of this build."""
        deleted = sweep_temp_dir(self.temp_dir)
        logger.debug("Removed %d temporary files from %s", deleted, self.temp_dir)
        if self._owns_temp:
            shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _molecular_system_section(self) -> Section:
        metadata = self.experiment.metadata
        blocks = []
        for spec in methods.TOPOLOGY_ATTRIBUTES:
            values = metadata.get_values(spec.code)
            if not values:
                continue
            descriptor = self.resolver.resolve(spec.code)
            if spec.composition:
                block = format_composition(descriptor, values)
            else:
                block = format_attribute(descriptor, values, spec.unit)
            blocks.append(block)
        return Section(MOLECULAR_SYSTEM_SECTION, tuple(blocks))

    def _method_section(self) -> Section:
        metadata = self.experiment.metadata
        header = methods.section_header(metadata.get_value(attr.COMPUTATIONAL_METHOD_NAME))
        blocks = []
        for code, values, unit in methods.method_attributes(metadata):
            if not values:
                continue
            blocks.append(format_attribute(self.resolver.resolve(code), values, unit))
        return Section(header, tuple(blocks))

    def _analysis_section(self) -> Section:
        files = self.experiment.files_by_format()
        images = collect_static_images(files)
        if images:
            self._say("Adding %d images to the document...", len(images))

        csv_files = files.get(FileFormat.CSV, [])
        if csv_files:
            self._say("Generating %d plots from CSV files...", len(csv_files))
            self.plot_results = generate_plots(
                csv_files,
                self.temp_dir,
                plotter=self.plotter,
                image_format=self.image_format,
                n_jobs=self.n_jobs,
                timeout=self.plot_timeout,
                progress=self._plot_progress,
            )
            images.extend(r.image_path for r in self.plot_results if r.ok)

        if not images and not csv_files:
            return Section(ANALYSIS_SECTION, (TextBlock(NO_ANALYSIS_DATA),))

        grid = layout_grid(images, GRID_COLUMNS)
        return Section(ANALYSIS_SECTION, (grid,) if grid is not None else ())


def build_report(
    experiment: ExperimentRecord,
    resolver: AttributeResolver,
    output_path: str | Path,
    temp_dir: str | Path,
    **kwargs,
) -> ReportDocument:
    """Build and write a report in one call; see :class:`ReportBuilder`."""
    return ReportBuilder(experiment, resolver, output_path, temp_dir, **kwargs).build()
