"""Decide which metadata attributes belong to each report section."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from simreport.metadata import attributes as attr
from simreport.metadata.avu import AttributeValueSet

DEFAULT_METHOD_HEADER = "Computational method"
SOLVENT_IMPLICIT = "implicit"


class ComputationalMethod(str, Enum):
    MOLECULAR_MECHANICS = "Molecular mechanics"
    MOLECULAR_DYNAMICS = "Molecular dynamics"
    LANGEVIN_DYNAMICS = "Langevin dynamics"
    QM_MM = "QM/MM"
    QUANTUM_MECHANICS = "Quantum mechanics"
    SEMI_EMPIRICAL = "Semi-empirical"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, name: str | None) -> ComputationalMethod:
        """Map a free-text method name to a known method (case-insensitive)."""
        if not name or not name.strip():
            return cls.UNKNOWN
        return _METHOD_ALIASES.get(name.strip().casefold(), cls.UNKNOWN)


_METHOD_ALIASES = {m.value.casefold(): m for m in ComputationalMethod}
_METHOD_ALIASES.update(
    {
        "mm": ComputationalMethod.MOLECULAR_MECHANICS,
        "md": ComputationalMethod.MOLECULAR_DYNAMICS,
        "ld": ComputationalMethod.LANGEVIN_DYNAMICS,
        "qmmm": ComputationalMethod.QM_MM,
        "qm-mm": ComputationalMethod.QM_MM,
        "qm": ComputationalMethod.QUANTUM_MECHANICS,
        "semiempirical": ComputationalMethod.SEMI_EMPIRICAL,
    }
)
del _METHOD_ALIASES[ComputationalMethod.UNKNOWN.value.casefold()]


class AttributeGroup(str, Enum):
    CLASSICAL = "classical"
    QUANTUM = "quantum"


_CLASSICAL_METHODS = frozenset(
    {
        ComputationalMethod.MOLECULAR_MECHANICS,
        ComputationalMethod.MOLECULAR_DYNAMICS,
        ComputationalMethod.LANGEVIN_DYNAMICS,
        ComputationalMethod.QM_MM,
    }
)
_QUANTUM_METHODS = frozenset(
    {
        ComputationalMethod.QUANTUM_MECHANICS,
        ComputationalMethod.SEMI_EMPIRICAL,
        ComputationalMethod.QM_MM,
    }
)


def enabled_groups(method: ComputationalMethod) -> frozenset[AttributeGroup]:
    """Attribute groups eligible for a method. QM/MM enables both."""
    groups = set()
    if method in _CLASSICAL_METHODS:
        groups.add(AttributeGroup.CLASSICAL)
    if method in _QUANTUM_METHODS:
        groups.add(AttributeGroup.QUANTUM)
    return frozenset(groups)


@dataclass(frozen=True)
class AttributeSpec:
    code: str
    unit: str = ""
    composition: bool = False


TOPOLOGY_ATTRIBUTES = (
    AttributeSpec(attr.MOLECULAR_SYSTEM_DESCRIPTION),
    AttributeSpec(attr.MOLECULE_TYPE),
    AttributeSpec(attr.MOLECULE_DESCRIPTION),
    AttributeSpec(attr.RESIDUE_CHAIN),
    AttributeSpec(attr.RESIDUE_CHAIN_NORM),
    AttributeSpec(attr.RESIDUE_NON_STD),
    AttributeSpec(attr.CHEMICAL_FORMULA),
    AttributeSpec(attr.MOLECULE_ATOMIC_COMPOSITION, composition=True),
    AttributeSpec(attr.MOLECULE_ATOMIC_WEIGHT, "g/mol"),
    AttributeSpec(attr.COUNT_ATOMS),
    AttributeSpec(attr.COUNT_IONS),
    AttributeSpec(attr.COUNT_SOLVENT),
)

CLASSICAL_ATTRIBUTES = (
    AttributeSpec(attr.FORCE_FIELD),
    AttributeSpec(attr.MM_INTEGRATOR),
    AttributeSpec(attr.ELECTROSTATICS_MODELING),
    AttributeSpec(attr.UNIT_SHAPE),
    AttributeSpec(attr.ENSEMBLE_MODELING),
    AttributeSpec(attr.BAROSTAT_ALGORITHM),
    AttributeSpec(attr.THERMOSTAT_ALGORITHM),
    AttributeSpec(attr.REFERENCE_TEMPERATURE, "K"),
    AttributeSpec(attr.REFERENCE_PRESSURE, "bar"),
    AttributeSpec(attr.CONSTRAINT_ALGORITHM),
    AttributeSpec(attr.RESTRAINT_TYPE),
    AttributeSpec(attr.LANGEVIN_COLLISION_FREQUENCY, "ps-1"),
    AttributeSpec(attr.STOCHASTICS_NOISE_TERM_AMPLITUDE),
    AttributeSpec(attr.SIMULATED_TIME, "ns"),
    AttributeSpec(attr.TIME_STEP_LENGTH, "ps"),
    AttributeSpec(attr.ENHANCED_SAMPLING_METHOD_NAME),
)

QUANTUM_ATTRIBUTES = (
    AttributeSpec(attr.QM_METHOD_NAME),
    AttributeSpec(attr.QM_EXCHANGE_CORRELATION),
    AttributeSpec(attr.QM_BASIS_SET),
    AttributeSpec(attr.QM_SPIN_MULTIPLICITY),
    AttributeSpec(attr.TOTAL_MOLECULE_CHARGE),
    AttributeSpec(attr.CALCULATION),
)

GROUP_ATTRIBUTES = {
    AttributeGroup.CLASSICAL: CLASSICAL_ATTRIBUTES,
    AttributeGroup.QUANTUM: QUANTUM_ATTRIBUTES,
}


def section_header(method_name: str | None) -> str:
    if method_name is None or not method_name.strip():
        return DEFAULT_METHOD_HEADER
    return method_name.strip()


def solvent_value(metadata: AttributeValueSet) -> str | None:
    """Solvent type, with the implicit model in parentheses when applicable."""
    solvent = metadata.get_value(attr.SOLVENT_TYPE)
    if not solvent:
        return None
    model = metadata.get_value(attr.IMPLICIT_SOLVENT_MODEL)
    if solvent == SOLVENT_IMPLICIT and model:
        return f"{solvent} ({model})"
    return solvent


def method_attributes(
    metadata: AttributeValueSet,
) -> list[tuple[str, tuple[str, ...], str]]:
    """Rows for the computational method section as ``(code, values, unit)``.

    Boundary conditions and solvent are always attempted; the classical and
    quantum groups follow when the method enables them. Rows may still have
    no values, in which case the formatter drops them.
    """
    method = ComputationalMethod.parse(metadata.get_value(attr.COMPUTATIONAL_METHOD_NAME))
    solvent = solvent_value(metadata)

    rows = [
        (attr.BOUNDARY_CONDITIONS, metadata.get_values(attr.BOUNDARY_CONDITIONS), ""),
        (attr.SOLVENT_TYPE, (solvent,) if solvent else (), ""),
    ]
    groups = enabled_groups(method)
    for group in AttributeGroup:
        if group not in groups:
            continue
        for spec in GROUP_ATTRIBUTES[group]:
            rows.append((spec.code, metadata.get_values(spec.code), spec.unit))
    return rows
