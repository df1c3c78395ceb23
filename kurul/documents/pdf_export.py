"""
A4 PDF export for rendered documents.

The template HTML uses a small vocabulary (h2/h3, p, div, ol/li, table/tr/td,
b, br) and a handful of classes (center, right, indent, grid, plain, box,
signature). This module walks that HTML and rebuilds it as reportlab
flowables; anything outside the vocabulary is kept as text.
"""

from __future__ import annotations

import logging
import os
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from kurul import config
from kurul.documents.engine import Document

logger = logging.getLogger(__name__)

FONT_NAME = "KurulSerif"
PAGE_MARGIN = 20 * mm
_STRUCTURE_TAGS = ["p", "div", "h2", "h3", "ol", "table"]

_font_cache: dict[str, str] = {}


def _register_fonts() -> str:
    """Register the Turkish-capable TTF once; fall back to Helvetica when it is missing."""
    if "regular" in _font_cache:
        return _font_cache["regular"]

    regular, bold = config.PDF_FONT_PATH, config.PDF_FONT_BOLD_PATH
    if not os.path.exists(regular):
        logger.warning("PDF font %s not found, using Helvetica (Turkish glyphs may be missing)", regular)
        _font_cache["regular"] = "Helvetica"
        return "Helvetica"

    pdfmetrics.registerFont(TTFont(FONT_NAME, regular))
    bold_name = FONT_NAME
    if os.path.exists(bold):
        bold_name = f"{FONT_NAME}-Bold"
        pdfmetrics.registerFont(TTFont(bold_name, bold))
    pdfmetrics.registerFontFamily(FONT_NAME, normal=FONT_NAME, bold=bold_name)
    _font_cache["regular"] = FONT_NAME
    return FONT_NAME


def _styles(font: str) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    body = ParagraphStyle("DocBody", parent=base["Normal"], fontName=font, fontSize=10.5, leading=15, spaceAfter=6)
    return {
        "body": body,
        "indent": ParagraphStyle("DocIndent", parent=body, firstLineIndent=30, alignment=TA_JUSTIFY),
        "center": ParagraphStyle("DocCenter", parent=body, alignment=TA_CENTER),
        "right": ParagraphStyle("DocRight", parent=body, alignment=TA_RIGHT),
        "h2": ParagraphStyle(
            "DocTitle", parent=body, fontSize=12, leading=16, alignment=TA_CENTER,
            spaceBefore=10, spaceAfter=12,
        ),
        "h3": ParagraphStyle("DocHeading", parent=body, alignment=TA_CENTER, spaceBefore=8, spaceAfter=8),
        "letterhead": ParagraphStyle("DocLetterhead", parent=body, alignment=TA_CENTER, leading=14, spaceAfter=0),
        "cell": ParagraphStyle("DocCell", parent=body, fontSize=9, leading=12, spaceAfter=0, alignment=TA_LEFT),
        "cell_center": ParagraphStyle("DocCellCenter", parent=body, fontSize=9, leading=12, spaceAfter=0, alignment=TA_CENTER),
        "footnote": ParagraphStyle(
            "DocFootnote", parent=body, fontSize=8, alignment=TA_CENTER, textColor=colors.HexColor("#6b7280"),
        ),
    }


def _inline(nodes) -> str:
    parts = []
    for node in nodes:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            parts.append(escape(str(node)))
        elif node.name == "br":
            parts.append("<br/>")
        elif node.name == "b":
            parts.append(f"<b>{_inline(node.children)}</b>")
        else:
            parts.append(_inline(node.children))
    return "".join(parts)


def _markup(nodes) -> str:
    """Reportlab paragraph markup for inline HTML, whitespace collapsed."""
    return " ".join(_inline(nodes).split())


class _FlowableBuilder:
    def __init__(self, styles: dict[str, ParagraphStyle], width: float):
        self.styles = styles
        self.width = width
        self.story: list = []

    def build(self, html: str) -> list:
        self._walk(BeautifulSoup(html, "html.parser"))
        return self.story

    # -- tree walk -------------------------------------------------------

    def _walk(self, node: Tag) -> None:
        loose: list = []
        for child in node.children:
            if isinstance(child, Tag) and child.name in _STRUCTURE_TAGS:
                self._paragraph(_markup(loose))
                loose = []
                self._block(child)
            else:
                loose.append(child)
        self._paragraph(_markup(loose))

    def _block(self, tag: Tag) -> None:
        if tag.name == "table":
            self._table(tag)
        elif tag.name == "ol":
            for index, item in enumerate(tag.find_all("li", recursive=False), 1):
                self._paragraph(f"{index}. {_markup(item.children)}", item.get("class", []))
        elif tag.name == "div" and tag.find(_STRUCTURE_TAGS, recursive=False):
            self._walk(tag)
        else:
            self._paragraph(_markup(tag.children), tag.get("class", []), tag.name)

    def _table(self, tag: Tag) -> None:
        rows = [
            [(_markup(td.children), int(td.get("colspan") or 1)) for td in tr.find_all("td")]
            for tr in tag.find_all("tr")
        ]
        self._emit_table(rows, tag.get("class", []))

    # -- flowables -------------------------------------------------------

    def _style_for(self, classes: list[str], name: Optional[str]) -> ParagraphStyle:
        for style in ("footnote", "indent", "center", "right"):
            if style in classes:
                return self.styles[style]
        if name in ("h2", "h3"):
            return self.styles[name]
        if "signature" in classes:
            return self.styles["right"]
        return self.styles["body"]

    def _paragraph(self, markup: str, classes: list[str] = (), name: Optional[str] = None) -> None:
        if not markup:
            return
        if name in ("h2", "h3"):
            markup = f"<b>{markup}</b>"
        if "signature" in classes:
            self.story.append(Spacer(1, 8 * mm))
        self.story.append(Paragraph(markup, self._style_for(classes, name)))

    def _emit_table(self, rows: list[list[tuple[str, int]]], classes: list[str]) -> None:
        if not rows:
            return
        ncols = max(sum(span for _, span in row) for row in rows)
        cell_style = self.styles["cell_center" if "center" in classes else "cell"]
        data, commands = [], []
        for r, row in enumerate(rows):
            line, c = [], 0
            for markup, span in row:
                line.append(Paragraph(markup, cell_style) if markup else "")
                if span > 1:
                    commands.append(("SPAN", (c, r), (c + span - 1, r)))
                    line.extend([""] * (span - 1))
                c += span
            line.extend([""] * (ncols - len(line)))
            data.append(line)

        table = Table(data, colWidths=[self.width / ncols] * ncols)
        commands += [
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ]
        if "grid" in classes:
            commands.append(("GRID", (0, 0), (-1, -1), 0.5, colors.black))
        table.setStyle(TableStyle(commands))
        self.story.append(table)
        self.story.append(Spacer(1, 4 * mm))


def build_story(document: Document, styles: dict[str, ParagraphStyle], width: float) -> list:
    story: list = []
    for line in document.header_lines:
        story.append(Paragraph(f"<b>{escape(line)}</b>", styles["letterhead"]))
    if story:
        story.append(Spacer(1, 6 * mm))

    return story + _FlowableBuilder(styles, width).build(document.body)


def export_pdf(document: Document) -> bytes:
    """Lay the document out on A4 and return the PDF bytes."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=document.title,
    )
    styles = _styles(_register_fonts())
    doc.build(build_story(document, styles, doc.width))
    logger.info("Exported %s to PDF", document.type)
    return buffer.getvalue()
