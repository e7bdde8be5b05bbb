"""Attribute codes, descriptors and the YAML-backed attribute dictionary."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import yaml

from simreport.errors import UnknownAttributeError

CATALOG_PATH = Path(__file__).resolve().parent.parent / "configs" / "attributes.yml"

# Molecular system (topology)
MOLECULAR_SYSTEM_DESCRIPTION = "MOLECULAR_SYSTEM_DESCRIPTION"
MOLECULE_TYPE = "MOLECULE_TYPE"
MOLECULE_DESCRIPTION = "MOLECULE_DESCRIPTION"
RESIDUE_CHAIN = "RESIDUE_CHAIN"
RESIDUE_CHAIN_NORM = "RESIDUE_CHAIN_NORM"
RESIDUE_NON_STD = "RESIDUE_NON_STD"
CHEMICAL_FORMULA = "CHEMICAL_FORMULA"
MOLECULE_ATOMIC_COMPOSITION = "MOLECULE_ATOMIC_COMPOSITION"
MOLECULE_ATOMIC_WEIGHT = "MOLECULE_ATOMIC_WEIGHT"
COUNT_ATOMS = "COUNT_ATOMS"
COUNT_IONS = "COUNT_IONS"
COUNT_SOLVENT = "COUNT_SOLVENT"
TOTAL_MOLECULE_CHARGE = "TOTAL_MOLECULE_CHARGE"

# Computational method
COMPUTATIONAL_METHOD_NAME = "COMPUTATIONAL_METHOD_NAME"
BOUNDARY_CONDITIONS = "BOUNDARY_CONDITIONS"
SOLVENT_TYPE = "SOLVENT_TYPE"
IMPLICIT_SOLVENT_MODEL = "IMPLICIT_SOLVENT_MODEL"

# Molecular mechanics / dynamics
FORCE_FIELD = "FORCE_FIELD"
MM_INTEGRATOR = "MM_INTEGRATOR"
ELECTROSTATICS_MODELING = "ELECTROSTATICS_MODELING"
UNIT_SHAPE = "UNIT_SHAPE"
ENSEMBLE_MODELING = "ENSEMBLE_MODELING"
BAROSTAT_ALGORITHM = "BAROSTAT_ALGORITHM"
THERMOSTAT_ALGORITHM = "THERMOSTAT_ALGORITHM"
REFERENCE_TEMPERATURE = "REFERENCE_TEMPERATURE"
REFERENCE_PRESSURE = "REFERENCE_PRESSURE"
CONSTRAINT_ALGORITHM = "CONSTRAINT_ALGORITHM"
RESTRAINT_TYPE = "RESTRAINT_TYPE"
LANGEVIN_COLLISION_FREQUENCY = "LANGEVIN_COLLISION_FREQUENCY"
STOCHASTICS_NOISE_TERM_AMPLITUDE = "STOCHASTICS_NOISE_TERM_AMPLITUDE"
SIMULATED_TIME = "SIMULATED_TIME"
TIME_STEP_LENGTH = "TIME_STEP_LENGTH"
ENHANCED_SAMPLING_METHOD_NAME = "ENHANCED_SAMPLING_METHOD_NAME"

# Quantum chemistry
QM_METHOD_NAME = "QM_METHOD_NAME"
QM_EXCHANGE_CORRELATION = "QM_EXCHANGE_CORRELATION"
QM_BASIS_SET = "QM_BASIS_SET"
QM_SPIN_MULTIPLICITY = "QM_SPIN_MULTIPLICITY"
CALCULATION = "CALCULATION"


@dataclass(frozen=True)
class AttributeDescriptor:
    code: str
    term: str
    standard: bool = True

    @property
    def label(self) -> str:
        """Display label: the canonical term for standard attributes, else the code."""
        return self.term if self.standard else self.code


class AttributeResolver(Protocol):
    def resolve(self, code: str) -> AttributeDescriptor: ...


class MetadataCatalog:
    """Attribute dictionary loaded from YAML.

    The file maps each code to ``{term: ..., standard: ...}``. A bare string
    is accepted as shorthand for a standard attribute with that term.
    """

    def __init__(self, entries: dict[str, AttributeDescriptor]):
        self._entries = dict(entries)

    @classmethod
    def from_yaml(cls, path: str | Path = CATALOG_PATH) -> MetadataCatalog:
        with Path(path).open(encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict) -> MetadataCatalog:
        entries = {}
        for code, spec in raw.items():
            code = str(code)
            if isinstance(spec, str):
                entries[code] = AttributeDescriptor(code=code, term=spec)
                continue
            spec = spec or {}
            entries[code] = AttributeDescriptor(
                code=code,
                term=str(spec.get("term") or code),
                standard=bool(spec.get("standard", True)),
            )
        return cls(entries)

    def resolve(self, code: str) -> AttributeDescriptor:
        try:
            return self._entries[code]
        except KeyError:
            raise UnknownAttributeError(code) from None

    def codes(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)
