"""Shared fixtures for pytest tests."""

from datetime import datetime
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from simreport.experiment import (  # noqa: E402
    DATA_LABELS,
    DATA_UNITS,
    AnalysisFile,
    ExperimentRecord,
    group_files,
)
from simreport.metadata import attributes as attr  # noqa: E402
from simreport.metadata.attributes import MetadataCatalog  # noqa: E402
from simreport.metadata.avu import AttributeValueSet  # noqa: E402

def _write_png(path: Path) -> Path:
    """Write a tiny real PNG image."""
    fig, ax = plt.subplots(figsize=(1, 1))
    ax.plot([0, 1], [0, 1])
    fig.savefig(path, dpi=20)
    plt.close(fig)
    return path


def _fake_plotter(source_path, axis_metadata, dest_without_extension, image_format):
    """Plotter that writes a placeholder image instead of reading the CSV."""
    _write_png(Path(f"{dest_without_extension}.{image_format}"))


def _failing_on(name: str):
    """Plotter failing for files called *name*, succeeding otherwise."""

    def plotter(source_path, axis_metadata, dest_without_extension, image_format):
        if Path(source_path).name == name:
            raise ValueError("malformed data")
        _fake_plotter(source_path, axis_metadata, dest_without_extension, image_format)

    return plotter


@pytest.fixture
def report_temp_dir(tmp_path):
    """Temp location swept by report builds."""
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def catalog():
    """Bundled attribute dictionary."""
    return MetadataCatalog.from_yaml()


@pytest.fixture
def energy_csv(tmp_path):
    """CSV file with a header row: time vs two energy terms."""
    csv_path = tmp_path / "energy.csv"
    pd.DataFrame(
        {
            "time": [0.0, 1.0, 2.0, 3.0],
            "potential": [-10.0, -11.5, -11.2, -12.0],
            "kinetic": [3.0, 3.2, 3.1, 3.3],
        }
    ).to_csv(csv_path, index=False)
    return csv_path


@pytest.fixture
def rmsd_csv(tmp_path):
    """Header-less CSV file with a comment line, described by per-file metadata."""
    csv_path = tmp_path / "rmsd.csv"
    csv_path.write_text("# frame, rmsd\n0,0.0\n1,0.8\n2,1.1\n3,1.3\n")
    return csv_path


@pytest.fixture
def rmsd_file(rmsd_csv):
    return AnalysisFile.from_path(
        rmsd_csv,
        metadata={DATA_LABELS: "Time, RMSD", DATA_UNITS: "ns, A"},
    )


@pytest.fixture
def png_files(tmp_path):
    """Two static PNG analysis images."""
    images = []
    for name in ("contacts.png", "hbonds.png"):
        images.append(AnalysisFile.from_path(_write_png(tmp_path / name)))
    return images


@pytest.fixture
def csv_files(tmp_path):
    """Three tabular analysis files; their content is never read by fake plotters."""
    files = []
    for name in ("a.csv", "b.csv", "c.csv"):
        path = tmp_path / name
        path.write_text("x,y\n0,1\n1,2\n")
        files.append(AnalysisFile.from_path(path))
    return files


@pytest.fixture
def md_metadata():
    """Metadata of a classical molecular dynamics run in explicit water."""
    return AttributeValueSet(
        {
            attr.MOLECULAR_SYSTEM_DESCRIPTION: "Ubiquitin in water",
            attr.MOLECULE_TYPE: ["protein", "ion"],
            attr.CHEMICAL_FORMULA: "C378H629N105O118S",
            attr.MOLECULE_ATOMIC_COMPOSITION: ["C:6 H:12 O:6", "Na:1 Cl:1"],
            attr.MOLECULE_ATOMIC_WEIGHT: "8564.8",
            attr.COUNT_ATOMS: 1231,
            attr.COMPUTATIONAL_METHOD_NAME: "Molecular dynamics",
            attr.BOUNDARY_CONDITIONS: "periodic",
            attr.SOLVENT_TYPE: "explicit",
            attr.FORCE_FIELD: ["AMBER ff14SB", "TIP3P"],
            attr.REFERENCE_TEMPERATURE: "300",
            attr.TIME_STEP_LENGTH: "0.002",
            attr.QM_BASIS_SET: "6-31G*",
        }
    )


@pytest.fixture
def make_experiment():
    """Factory for experiment records."""

    def _make(name="ubq_md", metadata=None, description=None, files=()):
        return ExperimentRecord(
            name=name,
            metadata=metadata if metadata is not None else AttributeValueSet(),
            description=description,
            analysis_files=group_files(list(files)),
        )

    return _make


@pytest.fixture
def md_experiment(make_experiment, md_metadata, png_files, csv_files):
    return make_experiment(
        metadata=md_metadata,
        description="  Ten nanoseconds of NPT dynamics.  ",
        files=[*png_files, *csv_files],
    )


@pytest.fixture
def fake_plotter():
    """Plotter writing a placeholder image without reading the CSV."""
    return _fake_plotter


@pytest.fixture
def plotter_failing_on():
    """Factory for plotters that raise for one file name."""
    return _failing_on


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 12, 30, 0)
