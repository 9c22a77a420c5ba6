"""
Export dispatcher: the entry point of the export engine.

Pipeline:
1. Validate the requested format (before any work is done)
2. Extract the document model from the markup, once
3. Render it with the exporter for that format
4. Return bytes, suggested filename and content type

Each call builds its own document model and renderer state; nothing is
shared or cached between calls, so concurrent exports need no coordination.
"""

import time
from typing import Dict, Optional, Union

from src.export.audit import ExportEvent, get_export_logger, log_export_attempt
from src.export.docx import DocxExporter
from src.export.errors import RenderError, UnsupportedFormatError
from src.export.models import (
    FORMAT_ALIASES,
    ExportFormat,
    ExportOptions,
    ExportResult,
)
from src.export.pdf import PDFExporter
from src.markup.extractor import extract


def resolve_format(requested: Union[str, ExportFormat, None]) -> ExportFormat:
    """
    Resolve a requested format name to an ExportFormat.

    Args:
        requested: Format name or alias (pdf, paged, docx, flow, word)

    Returns:
        ExportFormat

    Raises:
        UnsupportedFormatError: If the name is not a known format
    """
    if isinstance(requested, ExportFormat):
        return requested
    if isinstance(requested, str):
        export_format = FORMAT_ALIASES.get(requested.strip().lower())
        if export_format is not None:
            return export_format
    raise UnsupportedFormatError(requested, sorted(FORMAT_ALIASES))


class ExportDispatcher:
    """
    Selects an exporter by format and runs the export pipeline.

    Exporters hold no per-call state and may be shared across threads.

    Example:
        dispatcher = ExportDispatcher()
        result = dispatcher.export(markup, "pdf", ExportOptions(style="academic"))
        pdf_bytes = result.content_bytes
    """

    def __init__(
        self,
        pdf_exporter: Optional[PDFExporter] = None,
        docx_exporter: Optional[DocxExporter] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            pdf_exporter: Exporter for the page-oriented format. Defaults to PDFExporter().
            docx_exporter: Exporter for the word-processor format. Defaults to DocxExporter().
        """
        self.exporters: Dict[ExportFormat, Union[PDFExporter, DocxExporter]] = {
            ExportFormat.PDF: pdf_exporter or PDFExporter(),
            ExportFormat.DOCX: docx_exporter or DocxExporter(),
        }
        self.logger = get_export_logger("dispatcher")

    def export(
        self,
        markup: str,
        format: Union[str, ExportFormat],
        options: Optional[Union[ExportOptions, dict]] = None
    ) -> ExportResult:
        """
        Export markup to the requested binary format.

        Args:
            markup: Markup string from the content generator
            format: Requested format (pdf/paged or docx/flow/word)
            options: ExportOptions or a dict with "style" and "layout"

        Returns:
            ExportResult with bytes, filename and content type

        Raises:
            UnsupportedFormatError: Unknown format; no exporter is invoked
            RenderError: The exporter failed to produce the document
        """
        start_time = time.time()
        requested = format.value if isinstance(format, ExportFormat) else str(format)

        if options is None:
            options = ExportOptions()
        elif isinstance(options, dict):
            options = ExportOptions(**options)

        try:
            export_format = resolve_format(format)
        except UnsupportedFormatError as e:
            log_export_attempt(self.logger, ExportEvent(
                format=requested,
                style=options.style.value,
                layout=options.layout.value,
                result="REJECTED",
                duration_ms=self._elapsed_ms(start_time),
                reason=str(e),
            ))
            raise

        document = extract(markup)

        try:
            result = self.exporters[export_format].export(document, options)
        except Exception as e:
            log_export_attempt(self.logger, ExportEvent(
                format=requested,
                style=options.style.value,
                layout=options.layout.value,
                result="FAILED",
                duration_ms=self._elapsed_ms(start_time),
                section_count=len(document.sections),
                reason=f"{type(e).__name__}: {e}",
            ))
            raise RenderError(export_format.value, str(e)) from e

        log_export_attempt(self.logger, ExportEvent(
            format=requested,
            style=options.style.value,
            layout=options.layout.value,
            result="EXPORTED",
            duration_ms=self._elapsed_ms(start_time),
            size_bytes=len(result.content_bytes),
            page_count=result.page_count,
            section_count=len(document.sections),
        ))
        return result

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return max(0, int((time.time() - start_time) * 1000))


_default_dispatcher: Optional[ExportDispatcher] = None


def export(
    markup: str,
    format: Union[str, ExportFormat],
    options: Optional[Union[ExportOptions, dict]] = None
) -> ExportResult:
    """
    Export markup with a shared default dispatcher.

    Args:
        markup: Markup string from the content generator
        format: Requested format (pdf/paged or docx/flow/word)
        options: ExportOptions or a dict with "style" and "layout"

    Returns:
        ExportResult with bytes, filename and content type
    """
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = ExportDispatcher()
    return _default_dispatcher.export(markup, format, options)
