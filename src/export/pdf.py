"""
PDF exporter for generated documents.

Uses fpdf2 to lay out the document model on A4 pages. Pagination is decided
here, block by block, rather than left to fpdf2's automatic page breaks:
a LayoutState owned by each render call tracks the vertical cursor and the
page bounds, so concurrent renders never share layout state.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from fpdf import FPDF

from src.export.models import ExportFormat, ExportOptions, ExportResult, StyleProfile
from src.markup.models import (
    DocumentModel,
    HeadingBlock,
    ListItemBlock,
    ParagraphBlock,
)


# Configure logging for the PDF module
logger = logging.getLogger(__name__)

FILENAME_STEM = "documento"

BULLET_GLYPH = "•"


def _pdf_text(text: str) -> str:
    """Coerce text to the Windows-1252 repertoire of the core fonts."""
    return text.encode("cp1252", errors="replace").decode("cp1252")


def _restore_line(line: str) -> str:
    """
    Undo the byte-level encoding fpdf2 applies to dry-run lines.

    Wrapped lines come back as latin-1 decoded Windows-1252 bytes, so a bullet
    reads as "\\x95". cell() would encode them a second time and fail.
    """
    try:
        return line.encode("latin-1").decode("cp1252")
    except UnicodeError:
        # Already plain text
        return line


class DocumentPDF(FPDF):
    """
    Custom FPDF class with page numbering footer.

    Adds "Pagina X di Y" footer to each page in the document font.
    """

    def __init__(self, font_family: str, **kwargs):
        super().__init__(**kwargs)
        self.font_family_name = font_family
        # Allows bullets, curly quotes and dashes with the core fonts
        self.core_fonts_encoding = "windows-1252"

    def footer(self):
        """Add page number footer."""
        self.set_y(-12)  # Position 12mm from bottom
        self.set_font(self.font_family_name, "I", 9)
        self.set_text_color(128, 128, 128)
        self.cell(0, 6, f"Pagina {self.page_no()} di {{nb}}", align="C")


@dataclass
class LayoutState:
    """Vertical cursor and page bounds for one render call."""

    y: float
    top: float
    bottom: float
    page: int = 1

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.top

    @property
    def usable_height(self) -> float:
        return self.bottom - self.top


class PDFExporter:
    """
    Exports a DocumentModel to PDF.

    Applies formatting from the export options:
    - Font family: Times for formal styles, Helvetica otherwise
    - Font size tier by block type, smaller in the compact layout
    - Margins: 40pt standard, 15pt compact
    - Title/heading colors from the style profile
    - Page numbers

    Every block is checked against the page bottom before placement and moved
    whole to a new page when it does not fit. Only a block taller than a
    full page is placed line by line.

    Example:
        exporter = PDFExporter()
        result = exporter.export(doc, ExportOptions(style="academic"))
        pdf_bytes = result.content_bytes
    """

    PAGE_WIDTH = 210.0
    PAGE_HEIGHT = 297.0

    # Conversion: 1pt = 0.352778mm
    PT_TO_MM = 0.352778

    MARGIN_STANDARD = 40 * PT_TO_MM
    MARGIN_COMPACT = 15 * PT_TO_MM
    # Room kept free above the bottom edge for the page number footer
    FOOTER_HEIGHT = 14.0

    # (standard, compact) sizes in points
    TITLE_SIZE = (18, 16)
    HEADING_SIZE = (14, 12)
    BODY_SIZE = (12, 10)

    LINE_SPACING = 1.4
    ITEM_INDENT = 5.0

    # Spacing in mm
    TITLE_SPACE_AFTER = 7.0
    HEADING_SPACE_BEFORE = 3.5
    HEADING_SPACE_AFTER = 1.8
    PARAGRAPH_SPACE_AFTER = 3.5
    ITEM_SPACE_AFTER = 1.5

    def __init__(self):
        """Initialize the PDF exporter."""
        pass

    def export(
        self,
        document: DocumentModel,
        options: Optional[ExportOptions] = None
    ) -> ExportResult:
        """
        Export a document model to PDF.

        Args:
            document: Extracted document model
            options: Style and layout options. If None, uses defaults.

        Returns:
            ExportResult with PDF bytes and metadata
        """
        if options is None:
            options = ExportOptions()

        profile = options.profile
        margin = self.MARGIN_COMPACT if options.compact else self.MARGIN_STANDARD

        pdf = DocumentPDF(profile.pdf_font, orientation="P", unit="mm", format="A4")
        pdf.alias_nb_pages()  # Enable total page count in footer
        pdf.set_margins(left=margin, top=margin, right=margin)
        pdf.set_auto_page_break(auto=False)
        pdf.set_title(_pdf_text(document.title))
        pdf.set_creator("document-export-engine")
        pdf.add_page()

        state = LayoutState(
            y=margin,
            top=margin,
            bottom=self.PAGE_HEIGHT - max(margin, self.FOOTER_HEIGHT),
        )

        handlers = {
            "heading": self._place_heading,
            "paragraph": self._place_paragraph,
            "list_item": self._place_list_item,
        }
        for block in document.blocks():
            handlers[block.kind](pdf, state, block, options)

        pdf_bytes = bytes(pdf.output())
        logger.debug(f"Rendered PDF: {pdf.page_no()} pages, {len(pdf_bytes)} bytes")

        return ExportResult(
            format=ExportFormat.PDF,
            content_bytes=pdf_bytes,
            filename=f"{FILENAME_STEM}.{ExportFormat.PDF.extension}",
            content_type=ExportFormat.PDF.content_type,
            page_count=pdf.page_no(),
        )

    def _size(self, tier: tuple, options: ExportOptions) -> int:
        return tier[1] if options.compact else tier[0]

    def _line_height(self, size: int) -> float:
        return size * self.PT_TO_MM * self.LINE_SPACING

    def _wrap(self, pdf: FPDF, text: str, width: float) -> List[str]:
        """
        Wrap text to the given width with the current font.

        Args:
            pdf: FPDF instance with the block's font already set
            text: Text to wrap
            width: Available width in mm

        Returns:
            Wrapped lines (at least one)
        """
        lines = pdf.multi_cell(width, 5, _pdf_text(text), dry_run=True, output="LINES")
        return [_restore_line(line) for line in lines] or [""]

    def _new_page(self, pdf: FPDF, state: LayoutState) -> None:
        pdf.add_page()
        state.page += 1
        state.y = state.top

    def _ensure_room(self, pdf: FPDF, state: LayoutState, height: float) -> None:
        """Start a new page unless the block fits below the cursor."""
        if state.y + height > state.bottom and not state.at_page_top:
            self._new_page(pdf, state)

    def _draw_lines(
        self,
        pdf: FPDF,
        state: LayoutState,
        lines: List[str],
        x: float,
        width: float,
        line_height: float
    ) -> None:
        for line in lines:
            pdf.set_xy(x, state.y)
            pdf.cell(width, line_height, line)
            state.y += line_height

    def _text_width(self, pdf: FPDF) -> float:
        return self.PAGE_WIDTH - pdf.l_margin - pdf.r_margin

    def _place_lines(
        self,
        pdf: FPDF,
        state: LayoutState,
        lines: List[str],
        x: float,
        width: float,
        line_height: float,
        space_before: float = 0.0
    ) -> None:
        """
        Place a wrapped block, moving it whole to a new page when it does not fit.

        A block taller than a full page cannot move whole, so it is placed line
        by line and breaks wherever the page ends.
        """
        height = len(lines) * line_height

        if space_before + height <= state.usable_height:
            self._ensure_room(pdf, state, space_before + height)
            if not state.at_page_top:
                state.y += space_before
            self._draw_lines(pdf, state, lines, x, width, line_height)
            return

        if not state.at_page_top:
            state.y += space_before
        for line in lines:
            self._ensure_room(pdf, state, line_height)
            self._draw_lines(pdf, state, [line], x, width, line_height)

    def _place_heading(
        self,
        pdf: FPDF,
        state: LayoutState,
        block: HeadingBlock,
        options: ExportOptions
    ) -> None:
        profile: StyleProfile = options.profile
        if block.level == 1:
            size = self._size(self.TITLE_SIZE, options)
            color = profile.title_color
            space_before, space_after = 0.0, self.TITLE_SPACE_AFTER
        else:
            size = self._size(self.HEADING_SIZE, options)
            color = profile.heading_color
            space_before, space_after = self.HEADING_SPACE_BEFORE, self.HEADING_SPACE_AFTER

        pdf.set_font(profile.pdf_font, "B", size)
        pdf.set_text_color(*color)

        width = self._text_width(pdf)
        lines = self._wrap(pdf, block.text, width)
        self._place_lines(
            pdf, state, lines, pdf.l_margin, width, self._line_height(size),
            space_before=space_before,
        )
        state.y += space_after

    def _place_paragraph(
        self,
        pdf: FPDF,
        state: LayoutState,
        block: ParagraphBlock,
        options: ExportOptions
    ) -> None:
        size = self._size(self.BODY_SIZE, options)
        pdf.set_font(options.profile.pdf_font, "", size)
        pdf.set_text_color(0, 0, 0)

        width = self._text_width(pdf)
        lines = self._wrap(pdf, block.text, width)
        self._place_lines(pdf, state, lines, pdf.l_margin, width, self._line_height(size))
        state.y += self.PARAGRAPH_SPACE_AFTER

    def _place_list_item(
        self,
        pdf: FPDF,
        state: LayoutState,
        block: ListItemBlock,
        options: ExportOptions
    ) -> None:
        size = self._size(self.BODY_SIZE, options)
        pdf.set_font(options.profile.pdf_font, "", size)
        pdf.set_text_color(0, 0, 0)

        prefix = f"{block.ordinal}. " if block.numbered else f"{BULLET_GLYPH} "
        x = pdf.l_margin + self.ITEM_INDENT
        width = self._text_width(pdf) - self.ITEM_INDENT
        lines = self._wrap(pdf, prefix + block.text, width)
        self._place_lines(pdf, state, lines, x, width, self._line_height(size))
        state.y += self.ITEM_SPACE_AFTER


def render_paged(document: DocumentModel, options: Optional[ExportOptions] = None) -> bytes:
    """Render a document model to PDF bytes."""
    return PDFExporter().export(document, options).content_bytes
