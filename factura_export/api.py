"""
FastAPI application for the Factura Export service.

Provides REST API endpoints for:
- Health check
- Extraction from uploaded XML files or base64url mail attachments
- CSV export of uploaded files or of already extracted records
"""

from typing import List

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .batch import process_batch, status_message
from .config import (
    API_HOST,
    API_PORT,
    EXPORT_FILENAME,
    MAX_UPLOAD_SIZE_MB,
    MSG_NOTHING_TO_EXPORT,
    FailureKind,
    logger,
)
from .schemas import (
    BatchResult,
    ExtractAttachmentsRequest,
    ExtractionFailure,
    ExtractResponse,
    InvoiceRecord,
    RawDocument,
)
from .serializer import serialize_records
from .sources import document_from_bytes, documents_from_attachments


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="Factura Export API",
    description="""
    Paraguayan electronic invoice extraction and export API.

    This API reads SIFEN electronic-invoice XML documents, extracts the
    invoice number, date, issuer and VAT subtotals of each one and exports
    the results as CSV.

    ## Features

    - **Extract**: Upload XML files and get normalized invoice records
    - **Mail attachments**: Submit base64url-encoded attachment bodies
    - **CSV export**: Download the records as `facturas.csv`
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# ============================================================================
# Helpers
# ============================================================================

async def _read_uploads(files: List[UploadFile]) -> tuple[list[RawDocument], list[ExtractionFailure]]:
    """Read uploaded files into documents; oversized files become parse failures."""
    max_size = MAX_UPLOAD_SIZE_MB * 1024 * 1024
    documents: list[RawDocument] = []
    rejected: list[ExtractionFailure] = []

    for file in files:
        filename = file.filename or "upload.xml"
        content = await file.read()

        if len(content) > max_size:
            logger.warning(f"Rejected {filename}: larger than {MAX_UPLOAD_SIZE_MB}MB")
            rejected.append(ExtractionFailure(
                file_name=filename,
                kind=FailureKind.PARSE,
                reason=f"File too large (max {MAX_UPLOAD_SIZE_MB}MB)",
            ))
            continue

        documents.append(document_from_bytes(content, filename))

    return documents, rejected


def _with_rejected(result: BatchResult, rejected: list[ExtractionFailure]) -> BatchResult:
    if not rejected:
        return result
    summary = result.summary.model_copy(update={
        "total_documents": result.summary.total_documents + len(rejected),
        "failed": result.summary.failed + len(rejected),
    })
    return BatchResult(
        records=result.records,
        failures=rejected + result.failures,
        summary=summary,
    )


def _response(result: BatchResult) -> ExtractResponse:
    return ExtractResponse(
        records=result.records,
        summary=result.summary,
        failures=result.failures,
        message=status_message(result),
    )


def _csv_response(records: list[InvoiceRecord]) -> Response:
    return Response(
        content=serialize_records(records).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status and version information.
    """
    from . import __version__
    return HealthResponse(status="ok", version=__version__)


@app.post(
    "/extract",
    response_model=ExtractResponse,
    tags=["Extraction"],
    summary="Extract invoices from XML files",
)
async def extract_files(
    files: List[UploadFile] = File(..., description="Electronic invoice XML files")
) -> ExtractResponse:
    """
    Extract invoice records from uploaded XML files.

    Documents that are not valid invoices or cannot be parsed are reported
    in `failures` and do not affect the others.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    documents, rejected = await _read_uploads(files)
    logger.info(f"Received {len(files)} files for extraction")

    return _response(_with_rejected(process_batch(documents), rejected))


@app.post(
    "/extract-attachments",
    response_model=ExtractResponse,
    tags=["Extraction"],
    summary="Extract invoices from mail attachments",
)
async def extract_attachments(request: ExtractAttachmentsRequest) -> ExtractResponse:
    """
    Extract invoice records from base64url-encoded mail attachment bodies.

    Non-XML attachments are ignored and undecodable bodies are skipped.
    """
    documents = documents_from_attachments(request.attachments)
    logger.info(f"Received {len(request.attachments)} attachments, {len(documents)} XML documents decoded")

    return _response(process_batch(documents))


@app.post(
    "/export-csv",
    tags=["Export"],
    summary="Extract XML files and download CSV",
    response_class=Response,
)
async def export_csv(
    files: List[UploadFile] = File(..., description="Electronic invoice XML files")
) -> Response:
    """
    Extract invoice records from uploaded XML files and return them as CSV.

    Responds with 422 when no file produced a record.
    """
    documents, _ = await _read_uploads(files)
    result = process_batch(documents)

    if not result.succeeded:
        raise HTTPException(status_code=422, detail=MSG_NOTHING_TO_EXPORT)

    return _csv_response(result.records)


@app.post(
    "/records/csv",
    tags=["Export"],
    summary="Export records as CSV",
    response_class=Response,
)
async def records_csv(records: List[InvoiceRecord]) -> Response:
    """
    Serialize already extracted records as CSV, in the order given.
    """
    if not records:
        raise HTTPException(status_code=422, detail=MSG_NOTHING_TO_EXPORT)

    return _csv_response(records)


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    logger.info(f"Factura Export API starting on {API_HOST}:{API_PORT}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Factura Export API shutting down")


# ============================================================================
# Main Entry Point
# ============================================================================

def run_server():
    """Run the API server using uvicorn."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run_server()
