"""
Export models for document export functionality.

Provides data structures for:
- Export format enumeration (PDF, DOCX) with the accepted aliases
- Presentation styles and layouts, with lenient resolution of unknown values
- Style profiles (fonts and colors per style)
- Export result with bytes, filename, content type and metadata
"""

import base64
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExportFormat(str, Enum):
    """Supported document export formats."""
    PDF = "pdf"
    DOCX = "docx"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]


CONTENT_TYPES: Dict[ExportFormat, str] = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

# Names accepted for each format: paged/flow renderer names and the
# "word" name used by older clients
FORMAT_ALIASES: Dict[str, ExportFormat] = {
    "pdf": ExportFormat.PDF,
    "paged": ExportFormat.PDF,
    "docx": ExportFormat.DOCX,
    "flow": ExportFormat.DOCX,
    "word": ExportFormat.DOCX,
}


class DocumentStyle(str, Enum):
    """Named presentation styles."""
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"
    ACADEMIC = "academic"


STYLE_ALIASES: Dict[str, DocumentStyle] = {
    "modern": DocumentStyle.MODERN,
    "moderno": DocumentStyle.MODERN,
    "classic": DocumentStyle.CLASSIC,
    "classico": DocumentStyle.CLASSIC,
    "minimal": DocumentStyle.MINIMAL,
    "minimale": DocumentStyle.MINIMAL,
    "compact": DocumentStyle.MINIMAL,
    "academic": DocumentStyle.ACADEMIC,
    "accademico": DocumentStyle.ACADEMIC,
}

DEFAULT_STYLE = DocumentStyle.MODERN


class LayoutMode(str, Enum):
    """Page layouts: governs margins, and font sizes in PDF output."""
    STANDARD = "standard"
    COMPACT = "compact"


class StyleProfile(BaseModel):
    """Fonts and colors applied for a presentation style."""

    model_config = ConfigDict(frozen=True)

    pdf_font: str = Field(
        description="fpdf2 core font family"
    )
    docx_font: str = Field(
        description="Base font of the Word 'Normal' style"
    )
    title_color: Tuple[int, int, int] = Field(
        default=(0, 0, 0),
        description="RGB color of the document title (PDF)"
    )
    heading_color: Tuple[int, int, int] = Field(
        default=(68, 68, 68),
        description="RGB color of section headings (PDF)"
    )


FORMAL_PDF_FONT = "Times"
ALTERNATE_PDF_FONT = "Helvetica"

STYLE_PROFILES: Dict[DocumentStyle, StyleProfile] = {
    DocumentStyle.MODERN: StyleProfile(
        pdf_font=ALTERNATE_PDF_FONT,
        docx_font="Calibri",
        title_color=(37, 99, 235),      # #2563EB
        heading_color=(59, 130, 246),   # #3B82F6
    ),
    DocumentStyle.CLASSIC: StyleProfile(
        pdf_font=FORMAL_PDF_FONT,
        docx_font="Times New Roman",
    ),
    DocumentStyle.MINIMAL: StyleProfile(
        pdf_font=ALTERNATE_PDF_FONT,
        docx_font="Calibri",
    ),
    DocumentStyle.ACADEMIC: StyleProfile(
        pdf_font=FORMAL_PDF_FONT,
        docx_font="Times New Roman",
    ),
}


class ExportOptions(BaseModel):
    """
    Style and layout options supplied with an export request.

    Unknown or missing values fall back to the defaults instead of failing:
    the content producer is free to send style names this engine does not know.
    """

    model_config = ConfigDict(frozen=True)

    style: DocumentStyle = Field(
        default=DEFAULT_STYLE,
        description="Presentation style: modern, classic, minimal, academic"
    )
    layout: LayoutMode = Field(
        default=LayoutMode.STANDARD,
        description="Page layout: standard or compact"
    )

    @field_validator("style", mode="before")
    @classmethod
    def resolve_style(cls, v):
        """Map style names and aliases, falling back to the default style."""
        if isinstance(v, DocumentStyle):
            return v
        if isinstance(v, str):
            return STYLE_ALIASES.get(v.strip().lower(), DEFAULT_STYLE)
        return DEFAULT_STYLE

    @field_validator("layout", mode="before")
    @classmethod
    def resolve_layout(cls, v):
        """Map layout names, falling back to the standard layout."""
        if isinstance(v, LayoutMode):
            return v
        if isinstance(v, str) and v.strip().lower() == LayoutMode.COMPACT.value:
            return LayoutMode.COMPACT
        return LayoutMode.STANDARD

    @property
    def profile(self) -> StyleProfile:
        return STYLE_PROFILES[self.style]

    @property
    def compact(self) -> bool:
        return self.layout == LayoutMode.COMPACT


class ExportResult(BaseModel):
    """Result of a document export operation."""

    format: ExportFormat = Field(
        description="Export format used"
    )
    content_bytes: bytes = Field(
        description="Raw bytes of the exported document"
    )
    filename: str = Field(
        description="Suggested filename for the exported document"
    )
    content_type: str = Field(
        description="MIME type of the exported document"
    )
    page_count: Optional[int] = Field(
        default=None,
        description="Number of pages in the document (PDF only)"
    )

    def to_base64(self) -> str:
        """Convert content bytes to base64 string for API response."""
        return base64.b64encode(self.content_bytes).decode("utf-8")
