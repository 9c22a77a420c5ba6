"""
Export module for document export functionality.

Provides PDF and DOCX export of generated markup.

Classes:
    ExportDispatcher: Entry point selecting an exporter by format
    PDFExporter: Export to PDF with manual pagination and page numbers
    DocxExporter: Export to DOCX with native headings and lists
    ExportFormat: Enum of supported formats (PDF, DOCX)
    ExportOptions: Style and layout options
    ExportResult: Result model with bytes and metadata
"""

from src.export.models import (
    DocumentStyle,
    ExportFormat,
    ExportOptions,
    ExportResult,
    LayoutMode,
    StyleProfile,
)
from src.export.errors import ExportError, RenderError, UnsupportedFormatError
from src.export.pdf import PDFExporter, render_paged
from src.export.docx import DocxExporter, render_flow
from src.export.dispatcher import ExportDispatcher, export, resolve_format
from src.export.audit import configure_export_logging

__all__ = [
    # Models
    "DocumentStyle",
    "ExportFormat",
    "ExportOptions",
    "ExportResult",
    "LayoutMode",
    "StyleProfile",
    # Errors
    "ExportError",
    "RenderError",
    "UnsupportedFormatError",
    # Exporters
    "PDFExporter",
    "DocxExporter",
    "render_paged",
    "render_flow",
    # Dispatcher
    "ExportDispatcher",
    "export",
    "resolve_format",
    # Logging
    "configure_export_logging",
]
