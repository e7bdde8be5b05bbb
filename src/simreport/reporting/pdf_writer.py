"""Render a :class:`ReportDocument` to PDF with ReportLab."""

from __future__ import annotations

import io
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    HRFlowable,
    Image,
    ListFlowable,
    ListItem,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from simreport.reporting.document import (
    AttributeLine,
    AttributeList,
    CompositionBlock,
    ImageGrid,
    ReportDocument,
    Section,
    TextBlock,
    TextStyle,
)
from simreport.reporting.formatting import to_markup
from simreport.reporting.theme import DEFAULT_THEME, ReportTheme

# Padding SimpleDocTemplate puts inside its page frame on every side.
_FRAME_PADDING = 6.0


def _styles(theme: ReportTheme) -> dict[str, ParagraphStyle]:
    body = ParagraphStyle(
        "body",
        fontName=theme.font,
        fontSize=theme.body_size,
        leading=theme.body_size * 1.3,
    )
    return {
        TextStyle.BODY: body,
        TextStyle.TITLE: ParagraphStyle(
            "title",
            parent=body,
            fontName=theme.bold_font,
            fontSize=theme.title_size,
            leading=theme.title_size * 1.2,
            textColor=theme.accent_color,
        ),
        TextStyle.BYLINE: ParagraphStyle(
            "byline",
            parent=body,
            fontName=theme.bold_font,
            textColor=theme.byline_color,
        ),
        TextStyle.ABSTRACT: ParagraphStyle(
            "abstract",
            parent=body,
            fontName=theme.italic_font,
            fontSize=theme.abstract_size,
            leading=theme.abstract_size * 1.3,
            textColor=theme.abstract_color,
        ),
        "subtitle": ParagraphStyle(
            "subtitle",
            parent=body,
            fontName=theme.bold_font,
            fontSize=theme.subtitle_size,
            leading=theme.subtitle_size * 1.3,
            textColor=theme.accent_color,
            spaceAfter=2,
        ),
        "list_item": ParagraphStyle("list_item", parent=body, leftIndent=0),
    }


def _label(label: str) -> str:
    return f"<b>{escape(label)}: </b>"


def _image_cell(path: Path, max_width: float, max_height: float) -> Image:
    width, height = ImageReader(str(path)).getSize()
    scale = 1.0
    if width and height:
        scale = min(1.0, max_width / float(width), max_height / float(height))
    return Image(str(path), width=width * scale, height=height * scale)


def _grid_table(
    grid: ImageGrid, frame_width: float, frame_height: float, theme: ReportTheme
) -> Table:
    col_width = frame_width / grid.columns
    max_width = col_width - 2 * theme.cell_padding
    # A row taller than the frame cannot be placed on any page.
    max_height = frame_height - 2 * theme.cell_padding
    data = [
        [_image_cell(cell, max_width, max_height) if cell is not None else "" for cell in row]
        for row in grid.rows
    ]
    table = Table(data, colWidths=[col_width] * grid.columns)
    table.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), theme.cell_padding),
                ("RIGHTPADDING", (0, 0), (-1, -1), theme.cell_padding),
                ("TOPPADDING", (0, 0), (-1, -1), theme.cell_padding),
                ("BOTTOMPADDING", (0, 0), (-1, -1), theme.cell_padding),
            ]
        )
    )
    return table


def _block_flowables(block, styles, frame_size: tuple[float, float], theme: ReportTheme) -> list:
    body = styles[TextStyle.BODY]
    if isinstance(block, TextBlock):
        flowables = []
        if block.style == TextStyle.ABSTRACT:
            flowables.append(Spacer(1, theme.body_size))
        flowables.append(Paragraph(escape(block.text), styles[block.style]))
        return flowables
    if isinstance(block, AttributeLine):
        return [Paragraph(_label(block.label) + escape(block.value), body)]
    if isinstance(block, AttributeList):
        items = [
            ListItem(Paragraph(escape(item), styles["list_item"]), leftIndent=18)
            for item in block.items
        ]
        return [
            Paragraph(_label(block.label), body),
            ListFlowable(items, bulletType="bullet", start="-", leftIndent=18),
        ]
    if isinstance(block, CompositionBlock):
        formulas = "<br/>".join(to_markup(formula) for formula in block.formulas)
        return [Paragraph(_label(block.label) + formulas, body)]
    if isinstance(block, ImageGrid):
        return [_grid_table(block, *frame_size, theme)]
    raise TypeError(f"Unsupported report block: {type(block).__name__}")


def _section_flowables(
    section: Section, styles, frame_size: tuple[float, float], theme: ReportTheme
) -> list:
    flowables = []
    if section.heading:
        anchor = escape(section.title, {'"': "&quot;"})
        flowables.append(
            Paragraph(f'<a name="{anchor}"/>{escape(section.title)}', styles["subtitle"])
        )
        flowables.append(
            HRFlowable(
                width="100%",
                thickness=theme.rule_width,
                color=theme.rule_color,
                spaceBefore=1,
                spaceAfter=theme.body_size,
            )
        )
    for block in section.blocks:
        flowables.extend(_block_flowables(block, styles, frame_size, theme))
    flowables.append(Spacer(1, theme.body_size * 2))
    return flowables


def render_pdf(document: ReportDocument, theme: ReportTheme = DEFAULT_THEME) -> bytes:
    """Render *document* to PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=theme.page_size,
        leftMargin=theme.margin,
        rightMargin=theme.margin,
        topMargin=theme.margin,
        bottomMargin=theme.margin,
        title=document.title,
        author=document.author,
        creator=document.creator,
    )
    styles = _styles(theme)
    frame_size = (doc.width - 2 * _FRAME_PADDING, doc.height - 2 * _FRAME_PADDING)
    story = []
    for section in document.sections:
        story.extend(_section_flowables(section, styles, frame_size, theme))
    doc.build(story)
    return buffer.getvalue()


def write_pdf(
    document: ReportDocument,
    output_path: str | Path,
    theme: ReportTheme = DEFAULT_THEME,
) -> Path:
    """Render *document* and write it to *output_path* in one step.

    Rendering happens in memory first so a failed render never leaves a
    truncated file behind.
    """
    content = render_pdf(document, theme)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(content)
    return output_path
