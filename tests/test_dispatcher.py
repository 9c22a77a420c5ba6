from unittest.mock import MagicMock

import pytest

from src.export import dispatcher as dispatcher_module
from src.export.dispatcher import ExportDispatcher, export, resolve_format
from src.export.errors import ExportError, RenderError, UnsupportedFormatError
from src.export.models import (
    DocumentStyle,
    ExportFormat,
    ExportOptions,
    ExportResult,
    LayoutMode,
)


@pytest.fixture
def mock_exporters():
    pdf = MagicMock()
    pdf.export.return_value = ExportResult(
        format=ExportFormat.PDF,
        content_bytes=b"%PDF-1.4",
        filename="documento.pdf",
        content_type=ExportFormat.PDF.content_type,
        page_count=1,
    )
    docx = MagicMock()
    docx.export.return_value = ExportResult(
        format=ExportFormat.DOCX,
        content_bytes=b"PK",
        filename="documento.docx",
        content_type=ExportFormat.DOCX.content_type,
    )
    return pdf, docx


@pytest.mark.parametrize("name,expected", [
    ("pdf", ExportFormat.PDF),
    ("PDF", ExportFormat.PDF),
    ("paged", ExportFormat.PDF),
    ("docx", ExportFormat.DOCX),
    (" flow ", ExportFormat.DOCX),
    ("word", ExportFormat.DOCX),
    (ExportFormat.DOCX, ExportFormat.DOCX),
])
def test_resolve_format(name, expected):
    assert resolve_format(name) == expected


@pytest.mark.parametrize("name", ["odt", "", None, "pdfx"])
def test_resolve_format_rejects_unknown(name):
    with pytest.raises(UnsupportedFormatError) as exc_info:
        resolve_format(name)

    assert exc_info.value.requested == name
    assert "pdf" in exc_info.value.valid_options
    assert "docx" in exc_info.value.valid_options


def test_unsupported_format_is_a_value_error():
    error = UnsupportedFormatError("odt", ["docx", "pdf"])

    assert isinstance(error, ValueError)
    assert isinstance(error, ExportError)
    assert "odt" in str(error)


def test_unknown_format_invokes_no_exporter(mock_exporters, monkeypatch):
    pdf, docx = mock_exporters
    extract = MagicMock()
    monkeypatch.setattr(dispatcher_module, "extract", extract)

    with pytest.raises(UnsupportedFormatError):
        ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx).export("<h1>x</h1>", "odt")

    pdf.export.assert_not_called()
    docx.export.assert_not_called()
    extract.assert_not_called()


def test_dispatches_to_exporter_for_format(mock_exporters, sample_markup):
    pdf, docx = mock_exporters
    dispatcher = ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx)

    dispatcher.export(sample_markup, "word")

    docx.export.assert_called_once()
    pdf.export.assert_not_called()
    document, options = docx.export.call_args.args
    assert document.title == "Piano di progetto"
    assert options == ExportOptions()


def test_dict_options_are_resolved(mock_exporters, sample_markup):
    pdf, docx = mock_exporters
    dispatcher = ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx)

    dispatcher.export(sample_markup, "pdf", {"style": "accademico", "layout": "compact"})

    _, options = pdf.export.call_args.args
    assert options.style == DocumentStyle.ACADEMIC
    assert options.layout == LayoutMode.COMPACT


def test_renderer_failure_is_wrapped(mock_exporters, sample_markup):
    pdf, docx = mock_exporters
    pdf.export.side_effect = RuntimeError("font missing")
    dispatcher = ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx)

    with pytest.raises(RenderError) as exc_info:
        dispatcher.export(sample_markup, "pdf")

    assert exc_info.value.format == "pdf"
    assert "font missing" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_exporter_result_is_returned_unchanged(mock_exporters):
    pdf, docx = mock_exporters
    expected = ExportResult(
        format=ExportFormat.PDF,
        content_bytes=b"%PDF-1.4",
        filename="documento.pdf",
        content_type="application/pdf",
        page_count=1,
    )
    pdf.export.return_value = expected

    result = ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx).export("<p>x</p>", "paged")

    assert result is expected


@pytest.mark.parametrize("format,filename,content_type", [
    ("pdf", "documento.pdf", "application/pdf"),
    ("docx", "documento.docx",
     "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
])
def test_end_to_end_export(sample_markup, format, filename, content_type):
    result = export(sample_markup, format, ExportOptions(style="classic"))

    assert result.filename == filename
    assert result.content_type == content_type
    assert len(result.content_bytes) > 0


def test_malformed_markup_still_exports():
    result = ExportDispatcher().export("<h1>Titolo<h2>Sezione<li>voce", "docx")

    assert result.content_bytes.startswith(b"PK")


@pytest.mark.parametrize("format,fails,level,outcome", [
    ("docx", False, "info", "EXPORTED"),
    ("odt", False, "warning", "REJECTED"),
    ("pdf", True, "warning", "FAILED"),
])
def test_one_audit_event_per_call(mock_exporters, format, fails, level, outcome):
    pdf, docx = mock_exporters
    if fails:
        pdf.export.side_effect = RuntimeError("boom")
    dispatcher = ExportDispatcher(pdf_exporter=pdf, docx_exporter=docx)
    dispatcher.logger = MagicMock()

    try:
        dispatcher.export("<h2>S</h2><p>x</p>", format, {"style": "minimale"})
    except (UnsupportedFormatError, RenderError):
        pass

    logged = getattr(dispatcher.logger, level)
    logged.assert_called_once()
    event = logged.call_args.kwargs
    assert event["result"] == outcome
    assert event["format"] == format
    assert event["style"] == "minimal"
    assert event["event_type"] == "document_export"


@pytest.mark.parametrize("markup", [
    "<h1>T</h1><h2>A</h2>" + "<div>" * 600 + "testo",
    "<h2>A</h2>" + "<ul><li>x" * 400,
])
def test_deeply_nested_markup_exports(markup):
    result = ExportDispatcher().export(markup, "pdf")

    assert result.content_bytes.startswith(b"%PDF")
