"""Presentation constants for rendered reports."""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4

GREEN = colors.Color(0.0, 102.0 / 255.0, 0.0)


@dataclass(frozen=True)
class ReportTheme:
    page_size: tuple[float, float] = A4
    margin: float = 50.0

    font: str = "Times-Roman"
    bold_font: str = "Times-Bold"
    italic_font: str = "Times-Italic"

    title_size: float = 24.0
    subtitle_size: float = 16.0
    abstract_size: float = 16.0
    body_size: float = 12.0

    accent_color: colors.Color = GREEN
    abstract_color: colors.Color = colors.darkgrey
    byline_color: colors.Color = colors.lightgrey
    rule_color: colors.Color = colors.lightgrey
    rule_width: float = 0.5

    cell_padding: float = 10.0


DEFAULT_THEME = ReportTheme()
