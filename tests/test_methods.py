"""Tests for computational method gating."""

import pytest

from simreport.metadata import attributes as attr
from simreport.metadata.avu import AttributeValueSet
from simreport.reporting.methods import (
    CLASSICAL_ATTRIBUTES,
    DEFAULT_METHOD_HEADER,
    QUANTUM_ATTRIBUTES,
    AttributeGroup,
    ComputationalMethod,
    enabled_groups,
    method_attributes,
    section_header,
    solvent_value,
)

CLASSICAL_CODES = {spec.code for spec in CLASSICAL_ATTRIBUTES}
QUANTUM_CODES = {spec.code for spec in QUANTUM_ATTRIBUTES}


def _codes(metadata):
    return [code for code, _values, _unit in method_attributes(metadata)]


class TestComputationalMethod:
    """Tests for method name parsing."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Molecular dynamics", ComputationalMethod.MOLECULAR_DYNAMICS),
            ("  molecular DYNAMICS ", ComputationalMethod.MOLECULAR_DYNAMICS),
            ("QM/MM", ComputationalMethod.QM_MM),
            ("qmmm", ComputationalMethod.QM_MM),
            ("Quantum mechanics", ComputationalMethod.QUANTUM_MECHANICS),
            ("Semi-empirical", ComputationalMethod.SEMI_EMPIRICAL),
            ("LD", ComputationalMethod.LANGEVIN_DYNAMICS),
            ("Monte Carlo", ComputationalMethod.UNKNOWN),
            ("Unknown", ComputationalMethod.UNKNOWN),
            ("", ComputationalMethod.UNKNOWN),
            (None, ComputationalMethod.UNKNOWN),
        ],
    )
    def test_parse(self, name, expected):
        assert ComputationalMethod.parse(name) is expected


class TestEnabledGroups:
    """Tests for attribute group eligibility."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "method",
        [
            ComputationalMethod.MOLECULAR_MECHANICS,
            ComputationalMethod.MOLECULAR_DYNAMICS,
            ComputationalMethod.LANGEVIN_DYNAMICS,
        ],
    )
    def test_classical_methods(self, method):
        assert enabled_groups(method) == {AttributeGroup.CLASSICAL}

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "method",
        [ComputationalMethod.QUANTUM_MECHANICS, ComputationalMethod.SEMI_EMPIRICAL],
    )
    def test_quantum_methods(self, method):
        assert enabled_groups(method) == {AttributeGroup.QUANTUM}

    @pytest.mark.unit
    def test_hybrid_enables_both(self):
        assert enabled_groups(ComputationalMethod.QM_MM) == {
            AttributeGroup.CLASSICAL,
            AttributeGroup.QUANTUM,
        }

    @pytest.mark.unit
    def test_unknown_enables_none(self):
        assert enabled_groups(ComputationalMethod.UNKNOWN) == frozenset()


class TestMethodAttributes:
    """Tests for the rows of the computational method section."""

    @pytest.mark.unit
    def test_hybrid_lists_classical_then_quantum(self):
        codes = _codes(AttributeValueSet({attr.COMPUTATIONAL_METHOD_NAME: "QM/MM"}))
        assert codes[:2] == [attr.BOUNDARY_CONDITIONS, attr.SOLVENT_TYPE]
        assert set(codes[2:]) == CLASSICAL_CODES | QUANTUM_CODES
        assert codes[2] == CLASSICAL_ATTRIBUTES[0].code
        assert codes[-1] == QUANTUM_ATTRIBUTES[-1].code

    @pytest.mark.unit
    def test_quantum_only(self):
        codes = _codes(AttributeValueSet({attr.COMPUTATIONAL_METHOD_NAME: "Quantum mechanics"}))
        assert set(codes[2:]) == QUANTUM_CODES
        assert not CLASSICAL_CODES & set(codes)

    @pytest.mark.unit
    @pytest.mark.parametrize("name", [None, "", "Monte Carlo"])
    def test_unknown_still_attempts_boundary_and_solvent(self, name):
        metadata = AttributeValueSet(
            {
                attr.COMPUTATIONAL_METHOD_NAME: name,
                attr.BOUNDARY_CONDITIONS: "periodic",
                attr.SOLVENT_TYPE: "explicit",
                attr.FORCE_FIELD: "ff14SB",
            }
        )
        rows = method_attributes(metadata)
        assert rows == [
            (attr.BOUNDARY_CONDITIONS, ("periodic",), ""),
            (attr.SOLVENT_TYPE, ("explicit",), ""),
        ]

    @pytest.mark.unit
    def test_units_attached(self):
        metadata = AttributeValueSet(
            {
                attr.COMPUTATIONAL_METHOD_NAME: "Molecular dynamics",
                attr.REFERENCE_TEMPERATURE: "300",
            }
        )
        units = {code: unit for code, _values, unit in method_attributes(metadata)}
        assert units[attr.REFERENCE_TEMPERATURE] == "K"
        assert units[attr.REFERENCE_PRESSURE] == "bar"
        assert units[attr.LANGEVIN_COLLISION_FREQUENCY] == "ps-1"
        assert units[attr.SIMULATED_TIME] == "ns"
        assert units[attr.TIME_STEP_LENGTH] == "ps"
        assert units[attr.ENHANCED_SAMPLING_METHOD_NAME] == ""


class TestSolventAndHeader:
    """Tests for the solvent line and the dynamic section header."""

    @pytest.mark.unit
    def test_implicit_solvent_shows_model(self):
        metadata = AttributeValueSet(
            {attr.SOLVENT_TYPE: "implicit", attr.IMPLICIT_SOLVENT_MODEL: "GBSA"}
        )
        assert solvent_value(metadata) == "implicit (GBSA)"

    @pytest.mark.unit
    def test_explicit_solvent_ignores_model(self):
        metadata = AttributeValueSet(
            {attr.SOLVENT_TYPE: "explicit", attr.IMPLICIT_SOLVENT_MODEL: "GBSA"}
        )
        assert solvent_value(metadata) == "explicit"

    @pytest.mark.unit
    def test_implicit_without_model(self):
        assert solvent_value(AttributeValueSet({attr.SOLVENT_TYPE: "implicit"})) == "implicit"

    @pytest.mark.unit
    def test_no_solvent(self):
        assert solvent_value(AttributeValueSet()) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Molecular dynamics", "Molecular dynamics"),
            ("  custom scheme ", "custom scheme"),
            (None, DEFAULT_METHOD_HEADER),
            ("   ", DEFAULT_METHOD_HEADER),
        ],
    )
    def test_section_header(self, name, expected):
        assert section_header(name) == expected
