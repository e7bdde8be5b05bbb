"""Render attribute values as report blocks."""

from __future__ import annotations

from collections.abc import Sequence
from xml.sax.saxutils import escape

from simreport.errors import CompositionFormatError
from simreport.metadata.attributes import AttributeDescriptor
from simreport.reporting.document import AttributeLine, AttributeList, CompositionBlock

COMPOSITION_SEPARATOR = ":"


def with_unit(value: str, unit: str = "") -> str:
    """Append *unit* to *value*, separated by a space when there is one."""
    return f"{value} {unit}" if unit else value


def format_attribute(
    descriptor: AttributeDescriptor,
    values: Sequence[str],
    unit: str = "",
) -> AttributeLine | AttributeList | None:
    """Render one attribute.

    Returns ``None`` when there are no values so that the caller drops the
    line entirely. A single value renders inline, several values render as a
    list under the label, in input order.
    """
    if not values:
        return None
    if len(values) == 1:
        return AttributeLine(descriptor.label, with_unit(values[0], unit))
    return AttributeList(descriptor.label, tuple(with_unit(v, unit) for v in values))


def parse_composition(value: str) -> tuple[tuple[str, str], ...]:
    """Split ``"C:6 H:12 O:6"`` into ``(("C", "6"), ("H", "12"), ("O", "6"))``.

    Raises:
        CompositionFormatError: If a token is not ``element:count``.
    """
    tokens = []
    for token in value.split():
        element, sep, count = token.partition(COMPOSITION_SEPARATOR)
        if not sep or not element or not count:
            raise CompositionFormatError(token, value)
        tokens.append((element, count))
    return tuple(tokens)


def format_composition(
    descriptor: AttributeDescriptor,
    values: Sequence[str],
) -> CompositionBlock | None:
    if not values:
        return None
    return CompositionBlock(
        descriptor.label, tuple(parse_composition(v) for v in values)
    )


def to_markup(formula: Sequence[tuple[str, str]]) -> str:
    """Paragraph markup with element symbols followed by subscript counts."""
    return "".join(
        f"{escape(element)}<sub>{escape(count)}</sub>" for element, count in formula
    )
