"""
Pydantic models for invoice records and batch outcomes.

This module defines the core data structures used throughout the service:
- RawDocument for an XML document handed in by a file read or mail attachment
- InvoiceRecord for the normalized data extracted from one document
- ExtractionFailure for documents that did not yield a record
- BatchSummary and BatchResult for batch-level outcomes
"""

from pydantic import BaseModel, Field

from .config import FailureKind


class RawDocument(BaseModel):
    """
    An XML document as delivered by an input source.

    Attributes:
        file_name: Original file or attachment name
        content: XML text, already decoded from any transport encoding
    """
    file_name: str = Field(..., description="Original file or attachment name")
    content: str = Field(..., description="UTF-8 XML text")


class InvoiceRecord(BaseModel):
    """
    Normalized data of one Paraguayan electronic invoice.

    Monetary fields are fixed two-decimal strings so they can be written to
    the export without any further formatting. Records are immutable.
    """

    id: str = Field(
        ...,
        description="Unique per extraction: file name plus a random suffix"
    )
    invoice_number: str = Field(
        ...,
        description="Establishment, expedition point and document number joined by '-'"
    )
    date: str = Field(
        ...,
        description="Operation date (calendar-date part of the emission timestamp)"
    )

    # ========================================================================
    # Amounts
    # ========================================================================
    amount: str = Field(..., description="Invoice total")
    vat10: str = Field(..., description="VAT subtotal at the 10% rate")
    vat5: str = Field(..., description="VAT subtotal at the 5% rate")
    vat_total: str = Field(..., description="vat10 + vat5")

    # ========================================================================
    # Issuer
    # ========================================================================
    tax_id: str = Field("", description="Issuer RUC")
    issuer_name: str = Field("", description="Issuer legal name")
    stamp_number: str = Field("", description="Timbrado (tax-authority stamp) number")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "factura-0001.xml-3f2a9c0e5b7d4e61a1c2b3d4e5f60718",
                    "invoice_number": "001-002-0000123",
                    "date": "2024-05-10",
                    "amount": "1100000.00",
                    "vat10": "100000.00",
                    "vat5": "0.00",
                    "vat_total": "100000.00",
                    "tax_id": "80012345",
                    "issuer_name": "ACME SA",
                    "stamp_number": "12345678",
                }
            ]
        },
    }


class ExtractionFailure(BaseModel):
    """A document that did not produce an invoice record."""
    file_name: str
    kind: FailureKind = Field(
        ...,
        description="'validity' when a required block is missing, 'parse' when the XML could not be read"
    )
    reason: str = ""


class BatchSummary(BaseModel):
    """
    Aggregated outcome of a batch.

    Validity and parse failures are counted together.
    """
    total_documents: int = Field(..., ge=0)
    extracted: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)


class BatchResult(BaseModel):
    """Records produced by a batch, in input order, plus per-document failures."""
    records: list[InvoiceRecord] = Field(default_factory=list)
    failures: list[ExtractionFailure] = Field(default_factory=list)
    summary: BatchSummary

    @property
    def succeeded(self) -> bool:
        return self.summary.extracted > 0


# ============================================================================
# API Request/Response Models
# ============================================================================

class Attachment(BaseModel):
    """A mail attachment with its body still base64url-encoded."""
    filename: str
    data: str = Field(..., description="base64url-encoded attachment body")


class ExtractAttachmentsRequest(BaseModel):
    """Request body for the /extract-attachments endpoint."""
    attachments: list[Attachment] = Field(..., min_length=1)


class ExtractResponse(BaseModel):
    """Response for the extraction endpoints."""
    records: list[InvoiceRecord]
    summary: BatchSummary
    failures: list[ExtractionFailure]
    message: str
