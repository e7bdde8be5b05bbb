"""In-memory report document: ordered sections of renderable blocks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Union


class TextStyle(str, Enum):
    TITLE = "title"
    BYLINE = "byline"
    ABSTRACT = "abstract"
    BODY = "body"


@dataclass(frozen=True)
class TextBlock:
    text: str
    style: TextStyle = TextStyle.BODY


@dataclass(frozen=True)
class AttributeLine:
    """``<label>: <value>`` on a single line."""

    label: str
    value: str


@dataclass(frozen=True)
class AttributeList:
    """A label followed by an unordered list of values."""

    label: str
    items: tuple[str, ...]


@dataclass(frozen=True)
class CompositionBlock:
    """Atomic compositions; one formula per line, each a tuple of (element, count)."""

    label: str
    formulas: tuple[tuple[tuple[str, str], ...], ...]


@dataclass(frozen=True)
class ImageGrid:
    """Row-major image table; ``None`` cells are empty padding."""

    columns: int
    rows: tuple[tuple[Path | None, ...], ...]

    @property
    def images(self) -> list[Path]:
        return [cell for row in self.rows for cell in row if cell is not None]


Block = Union[TextBlock, AttributeLine, AttributeList, CompositionBlock, ImageGrid]


@dataclass(frozen=True)
class Section:
    title: str
    blocks: tuple[Block, ...] = ()
    # Title sections have no heading or rule of their own
    heading: bool = True


@dataclass(frozen=True)
class ReportDocument:
    title: str
    author: str
    creator: str
    created: datetime
    sections: tuple[Section, ...]

    def section(self, title: str) -> Section:
        for section in self.sections:
            if section.title == title:
                return section
        raise KeyError(title)
