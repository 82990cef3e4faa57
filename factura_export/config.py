"""
Configuration constants and enums for the Factura Export service.
"""

import logging
import os
from enum import Enum
from typing import Final

# ============================================================================
# Electronic Invoice Schema (SIFEN)
# ============================================================================

# Element names are matched on their local name, case-sensitive
ENVELOPE_TAG: Final[str] = "rDE"
DOCUMENT_TAG: Final[str] = "DE"
STAMP_BLOCK: Final[str] = "gTimb"
OPERATION_BLOCK: Final[str] = "gDatGralOpe"
ISSUER_BLOCK: Final[str] = "gEmis"
SUBTOTALS_BLOCK: Final[str] = "gTotSub"

# Keys used by the generic XML tree
ATTRIBUTE_PREFIX: Final[str] = "@_"
TEXT_KEY: Final[str] = "#text"

# ============================================================================
# Invoice Number Composition
# ============================================================================

# Rendered in place of a missing establishment / expedition point / document
# number. "undefined" keeps exports identical to the ones already produced.
MISSING_COMPONENT_TEXT: Final[str] = os.getenv("MISSING_COMPONENT_TEXT", "undefined")

# ============================================================================
# Tabular Export
# ============================================================================

CSV_DELIMITER: Final[str] = os.getenv("CSV_DELIMITER", ",")
EXPORT_FILENAME: Final[str] = os.getenv("EXPORT_FILENAME", "facturas.csv")

# (header label, InvoiceRecord field) in export order
CSV_COLUMNS: Final[list[tuple[str, str]]] = [
    ("Fecha", "date"),
    ("Nº de Boleta", "invoice_number"),
    ("Ruc", "tax_id"),
    ("Nombre", "issuer_name"),
    ("Monto", "amount"),
    ("Iva 10 %", "vat10"),
    ("Iva 5%", "vat5"),
    ("Total Iva", "vat_total"),
    ("Timbrado", "stamp_number"),
]

# ============================================================================
# Mail Attachments
# ============================================================================

XML_EXTENSION: Final[str] = ".xml"
MAIL_SEARCH_BASE: Final[str] = "has:attachment filename:xml"

# ============================================================================
# Status Messages
# ============================================================================

MSG_BATCH_OK: Final[str] = "Se procesaron {count} facturas."
MSG_BATCH_EMPTY: Final[str] = (
    "No se pudieron procesar los archivos o no contenían datos de factura válidos."
)
MSG_NOTHING_TO_EXPORT: Final[str] = "No hay datos para exportar."

# ============================================================================
# Failure Kinds
# ============================================================================

class FailureKind(str, Enum):
    """Why a document did not produce an invoice record."""
    VALIDITY = "validity"
    PARSE = "parse"


# ============================================================================
# API Configuration
# ============================================================================

API_HOST: Final[str] = os.getenv("API_HOST", "0.0.0.0")
API_PORT: Final[int] = int(os.getenv("API_PORT", "8000"))
MAX_UPLOAD_SIZE_MB: Final[int] = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("factura_export")


logger = setup_logging()
