import os
import re
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from simreport import __version__
from simreport.configs.logger import CONFIG_PATH, LoggerSingleton, load_config, logger
from simreport.configs.settings import ReportSettings
from simreport.errors import SimReportError
from simreport.experiment import load_experiment
from simreport.metadata.attributes import CATALOG_PATH, MetadataCatalog
from simreport.reporting.report_generator import build_report
from simreport.utils.parallel import resolve_n_jobs

PLAIN_OUTPUT_ENV = "SIMREPORT_PLAIN_OUTPUT"
REPORT_SUFFIX = "_report.pdf"


def _plain_output_enabled() -> bool:
    return os.environ.get(PLAIN_OUTPUT_ENV, "").strip() == "1"


def _display_banner() -> None:
    """Display the simreport banner."""
    if _plain_output_enabled():
        return
    banner_content = (
        "[bold]simreport[/bold]\n"
        "[dim]PDF summary reports for molecular simulation experiments[/dim]"
    )
    banner = Panel(banner_content, border_style="dim", padding=(0, 1), expand=False)
    console.print("")
    console.print(banner)
    console.print("")


def _default_output_path(manifest_path: Path) -> Path:
    return manifest_path.resolve().with_name(f"{manifest_path.stem}{REPORT_SUFFIX}")


def _log_stem(experiment_name: str) -> str:
    return re.sub(r"[^\w.-]+", "_", experiment_name).strip("_") or "report"


def _load_catalog(catalog_path: Path | None) -> MetadataCatalog:
    if catalog_path is not None:
        logger.info("Using attribute dictionary: %s", catalog_path)
        return MetadataCatalog.from_yaml(catalog_path)
    return MetadataCatalog.from_yaml(CATALOG_PATH)


app = typer.Typer(
    name="simreport",
    help="Compile molecular simulation experiment records into PDF reports.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console(no_color=_plain_output_enabled())


@app.command()
def build(
    manifest: str = typer.Argument(
        ...,
        help="Path to the experiment manifest (YAML)",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output PDF path (default: <manifest>_report.pdf next to the manifest)",
    ),
    config_path: str = typer.Option(
        str(CONFIG_PATH),
        "--config",
        "-c",
        help="Path to YAML config file",
    ),
    jobs: int | None = typer.Option(
        None,
        "--jobs",
        "-j",
        help="Worker processes for plot generation (-1 for all cores)",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Seconds allowed per plot (0 disables the limit)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print warnings and errors",
    ),
) -> None:
    """
    Build a PDF report from an experiment manifest.

    Examples
    --------
    \b
    simreport build experiment.yml

    \b
    simreport build experiment.yml -o reports/run_1.pdf --jobs 4 --timeout 60
    """
    manifest_path = Path(manifest)
    if not manifest_path.exists():
        console.print(f"[red]Error:[/red] Manifest does not exist: {manifest_path}")
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path)
    except (OSError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(code=1) from e

    if jobs is not None:
        config["n_jobs"] = jobs
    if timeout is not None:
        config["plot_timeout"] = timeout
    if quiet:
        config["output_to_console"] = False
    settings = ReportSettings.from_config(config)

    LoggerSingleton().set_console_verbose(settings.output_to_console)
    if settings.output_to_console:
        _display_banner()

    output_path = Path(output) if output else _default_output_path(manifest_path)
    try:
        experiment = load_experiment(manifest_path)
        if settings.log_dir is not None:
            log_file = LoggerSingleton().configure_log_directory(
                settings.log_dir, stem=_log_stem(experiment.name)
            )
            logger.info("Writing log to %s", log_file)
        catalog = _load_catalog(settings.attribute_catalog)
        build_report(
            experiment,
            catalog,
            output_path,
            settings.temp_dir,
            verbose=settings.output_to_console,
            isolate_temp=settings.isolate_temp,
            n_jobs=resolve_n_jobs({"n_jobs": settings.n_jobs}),
            plot_timeout=settings.plot_timeout,
            image_format=settings.image_format,
        )
    except (SimReportError, OSError, yaml.YAMLError) as e:
        console.print(f"[red]Error generating report:[/red] {e}")
        raise typer.Exit(code=1) from e
    finally:
        LoggerSingleton().close_log_file()

    console.print(f"\n[bold]Report saved to:[/bold] {output_path}\n")


@app.command()
def attributes(
    catalog_path: str | None = typer.Option(
        None,
        "--catalog",
        help="Attribute dictionary YAML (default: bundled dictionary)",
    ),
) -> None:
    """List the metadata attributes known to the attribute dictionary."""
    try:
        catalog = MetadataCatalog.from_yaml(catalog_path or CATALOG_PATH)
    except (OSError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading attribute dictionary:[/red] {e}")
        raise typer.Exit(code=1) from e

    table = Table(
        title="Metadata Attributes",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Code", style="bold", no_wrap=True)
    table.add_column("Label", style="white")
    table.add_column("Standard", justify="center")

    for code in catalog.codes():
        descriptor = catalog.resolve(code)
        table.add_row(code, descriptor.label, "yes" if descriptor.standard else "no")

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    if _plain_output_enabled():
        console.print(f"simreport version {__version__}")
    else:
        console.print(f"[bold]simreport[/bold] version [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
