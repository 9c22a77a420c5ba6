# api.py
# Document export service: thin HTTP delivery layer over the export engine.
# Authentication is handled upstream; this app holds no state.

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
import time
import uuid

import structlog

from src.export import (
    ExportDispatcher,
    ExportOptions,
    RenderError,
    UnsupportedFormatError,
    configure_export_logging,
)

# 1. SETUP
app = FastAPI(title="Document Export Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure structured logging for export events
configure_export_logging()
logger = structlog.get_logger("export_api")

dispatcher = ExportDispatcher()


# 2. REQUEST MODELS
class ExportRequestOptions(BaseModel):
    """Options sent with an export request."""
    format: Optional[str] = Field(
        default=None,
        description="Export format: 'pdf' or 'docx'"
    )
    style: Optional[str] = Field(
        default=None,
        description="Presentation style: modern, classic, minimal, academic"
    )
    layout: Optional[str] = Field(
        default=None,
        description="Page layout: standard or compact"
    )


class ExportRequest(BaseModel):
    """Request model for document export."""
    content: str = Field(
        description="Generated markup to export"
    )
    options: ExportRequestOptions = Field(
        default_factory=ExportRequestOptions,
        description="Format, style and layout options"
    )


# 3. ROUTES
@app.get("/")
def home():
    return {"status": "Document Export Engine Online"}


def _export_response(content: str, export_format: Optional[str], options: ExportRequestOptions) -> Response:
    """
    Run an export and wrap the bytes as a file download.

    Raises:
        400: Unsupported export format
        500: Rendering failed
    """
    request_id = date.today().strftime("%Y%m%d") + uuid.uuid4().hex[:8]
    start_time = time.time()

    try:
        result = dispatcher.export(
            content,
            export_format or "",
            ExportOptions(style=options.style, layout=options.layout),
        )
    except UnsupportedFormatError as e:
        logger.warning(
            "Invalid export format",
            request_id=request_id,
            export_format=export_format,
        )
        raise HTTPException(
            400,
            {"error": "validation_error", "message": str(e), "field": "format", "valid_options": e.valid_options}
        )
    except RenderError as e:
        logger.error(
            "Export failed",
            request_id=request_id,
            export_format=e.format,
            error=str(e),
            exc_info=True
        )
        raise HTTPException(500, {"error": "export_error", "message": f"Export to {e.format.upper()} failed"})

    logger.info(
        "Export successful",
        request_id=request_id,
        format=result.format.value,
        filename=result.filename,
        size_bytes=len(result.content_bytes),
        duration_ms=int((time.time() - start_time) * 1000),
    )

    return Response(
        content=result.content_bytes,
        media_type=result.content_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@app.post("/api/document/export")
def export_document(req: ExportRequest):
    """
    Export markup to PDF or DOCX, with the format given in the options.

    Returns:
        The document as a file download
    """
    return _export_response(req.content, req.options.format, req.options)


@app.post("/api/document/export/{export_format}")
def export_document_as(export_format: str, req: ExportRequest):
    """
    Export markup to the format given in the URL.

    Returns:
        The document as a file download
    """
    return _export_response(req.content, export_format, req.options)
