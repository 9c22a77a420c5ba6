"""
DOCX exporter for generated documents.

Uses python-docx to map every element of the document model onto a native
Word paragraph: headings use the built-in heading styles and list items are
real numbered/bulleted list paragraphs. Pagination is left to the word
processor.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls
from docx.shared import Cm, Pt, RGBColor, Twips

from src.export.models import ExportFormat, ExportOptions, ExportResult
from src.markup.models import (
    DocumentModel,
    HeadingBlock,
    ListItemBlock,
    ParagraphBlock,
)


# Configure logging for the DOCX module
logger = logging.getLogger(__name__)

FILENAME_STEM = "documento"

CLOSING_REMARK = "Il documento è stato generato automaticamente in base ai parametri richiesti."

# Single-level list definitions added to the numbering part
DECIMAL_LIST_XML = (
    '<w:abstractNum {nsdecls} w:abstractNumId="{abstract_id}">'
    '<w:multiLevelType w:val="singleLevel"/>'
    '<w:lvl w:ilvl="0">'
    '<w:start w:val="1"/>'
    '<w:numFmt w:val="decimal"/>'
    '<w:lvlText w:val="%1."/>'
    '<w:lvlJc w:val="left"/>'
    '<w:pPr><w:ind w:left="720" w:hanging="260"/></w:pPr>'
    '</w:lvl>'
    '</w:abstractNum>'
)
BULLET_LIST_XML = (
    '<w:abstractNum {nsdecls} w:abstractNumId="{abstract_id}">'
    '<w:multiLevelType w:val="singleLevel"/>'
    '<w:lvl w:ilvl="0">'
    '<w:start w:val="1"/>'
    '<w:numFmt w:val="bullet"/>'
    '<w:lvlText w:val="•"/>'
    '<w:lvlJc w:val="left"/>'
    '<w:pPr><w:ind w:left="720" w:hanging="360"/></w:pPr>'
    '</w:lvl>'
    '</w:abstractNum>'
)


@dataclass
class _ListState:
    """Numbering definitions for one render call."""

    decimal_abstract_id: int
    bullet_num_id: int
    numbered_num_id: Optional[int] = None


class DocxExporter:
    """
    Exports a DocumentModel to DOCX.

    Mapping:
    - Title -> Heading 1
    - Introduction and description paragraphs -> body paragraphs
    - Section heading -> Heading 2
    - Items -> List Number / List Bullet paragraphs; every numbered
      section gets its own numbering instance restarting at 1
    - A closing remark in grey italics is always appended

    The layout only changes page margins. The style picks the base font.

    Example:
        exporter = DocxExporter()
        result = exporter.export(doc, ExportOptions(layout="compact"))
        docx_bytes = result.content_bytes
    """

    # Page margins in twips
    MARGIN_STANDARD = 1000
    MARGIN_COMPACT = 600

    TITLE_COLOR = RGBColor(0x2B, 0x57, 0x9A)
    HEADING_COLOR = RGBColor(0x44, 0x72, 0xC4)
    CLOSING_COLOR = RGBColor(0x80, 0x80, 0x80)

    def __init__(self):
        """Initialize the DOCX exporter."""
        pass

    def export(
        self,
        document: DocumentModel,
        options: Optional[ExportOptions] = None
    ) -> ExportResult:
        """
        Export a document model to DOCX.

        Args:
            document: Extracted document model
            options: Style and layout options. If None, uses defaults.

        Returns:
            ExportResult with DOCX bytes and metadata
        """
        if options is None:
            options = ExportOptions()

        doc = Document()
        doc.core_properties.title = document.title

        # Configure page setup
        section = doc.sections[0]
        section.page_width = Cm(21)  # A4 width
        section.page_height = Cm(29.7)  # A4 height
        section.orientation = WD_ORIENT.PORTRAIT

        margin = Twips(self.MARGIN_COMPACT if options.compact else self.MARGIN_STANDARD)
        section.left_margin = margin
        section.right_margin = margin
        section.top_margin = margin
        section.bottom_margin = margin

        doc.styles["Normal"].font.name = options.profile.docx_font

        lists = self._add_list_definitions(doc)

        handlers = {
            "heading": self._add_heading,
            "paragraph": self._add_paragraph,
            "list_item": self._add_list_item,
        }
        for block in document.blocks():
            handlers[block.kind](doc, block, lists)

        self._add_closing_remark(doc)

        # Save to bytes
        docx_buffer = io.BytesIO()
        doc.save(docx_buffer)
        docx_bytes = docx_buffer.getvalue()
        logger.debug(f"Rendered DOCX: {len(doc.paragraphs)} paragraphs, {len(docx_bytes)} bytes")

        return ExportResult(
            format=ExportFormat.DOCX,
            content_bytes=docx_bytes,
            filename=f"{FILENAME_STEM}.{ExportFormat.DOCX.extension}",
            content_type=ExportFormat.DOCX.content_type,
            page_count=None  # DOCX doesn't have page count until rendered
        )

    def _add_list_definitions(self, doc: Document) -> _ListState:
        """
        Register the decimal and bullet list definitions.

        Args:
            doc: python-docx Document instance

        Returns:
            _ListState with the ids to reference from list paragraphs
        """
        numbering = doc.part.numbering_part.element

        existing = [int(v) for v in numbering.xpath("./w:abstractNum/@w:abstractNumId")]
        decimal_id = max(existing, default=-1) + 1
        bullet_id = decimal_id + 1

        # abstractNum elements must precede every num element
        first_num = numbering.find(
            "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}num"
        )
        for template, abstract_id in ((DECIMAL_LIST_XML, decimal_id), (BULLET_LIST_XML, bullet_id)):
            abstract = parse_xml(template.format(nsdecls=nsdecls("w"), abstract_id=abstract_id))
            if first_num is not None:
                first_num.addprevious(abstract)
            else:
                numbering.append(abstract)

        bullet_num = numbering.add_num(bullet_id)
        return _ListState(decimal_abstract_id=decimal_id, bullet_num_id=bullet_num.numId)

    def _restart_numbering(self, doc: Document, lists: _ListState) -> int:
        """Create a numbering instance of the decimal list starting at 1."""
        numbering = doc.part.numbering_part.element
        num = numbering.add_num(lists.decimal_abstract_id)
        num.add_lvlOverride(ilvl=0).add_startOverride(1)
        return num.numId

    def _add_heading(self, doc: Document, block: HeadingBlock, lists: _ListState) -> None:
        if block.level == 1:
            para = doc.add_paragraph(style="Heading 1")
            para.paragraph_format.space_after = Pt(15)
            size, color = Pt(16), self.TITLE_COLOR
        else:
            para = doc.add_paragraph(style="Heading 2")
            para.paragraph_format.space_before = Pt(10)
            para.paragraph_format.space_after = Pt(6)
            size, color = Pt(14), self.HEADING_COLOR

        run = para.add_run(block.text)
        run.bold = True
        run.font.size = size
        run.font.color.rgb = color

    def _add_paragraph(self, doc: Document, block: ParagraphBlock, lists: _ListState) -> None:
        para = doc.add_paragraph(block.text)
        para.paragraph_format.space_after = Pt(6)

    def _add_list_item(self, doc: Document, block: ListItemBlock, lists: _ListState) -> None:
        """
        Add a native list paragraph.

        The first item of a numbered section opens a new numbering instance,
        so sections never share a running count.
        """
        if block.numbered:
            if block.ordinal == 1 or lists.numbered_num_id is None:
                lists.numbered_num_id = self._restart_numbering(doc, lists)
            style, num_id = "List Number", lists.numbered_num_id
        else:
            style, num_id = "List Bullet", lists.bullet_num_id

        para = doc.add_paragraph(block.text, style=style)
        para.paragraph_format.space_after = Pt(6)

        num_pr = para._p.get_or_add_pPr().get_or_add_numPr()
        num_pr.get_or_add_ilvl().val = 0
        num_pr.get_or_add_numId().val = num_id

    def _add_closing_remark(self, doc: Document) -> None:
        para = doc.add_paragraph()
        para.paragraph_format.space_before = Pt(15)
        run = para.add_run(CLOSING_REMARK)
        run.italic = True
        run.font.color.rgb = self.CLOSING_COLOR


def render_flow(document: DocumentModel, options: Optional[ExportOptions] = None) -> bytes:
    """Render a document model to DOCX bytes."""
    return DocxExporter().export(document, options).content_bytes
