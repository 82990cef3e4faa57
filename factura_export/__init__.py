"""
Factura Export

Extracts structured data from Paraguayan electronic invoices (SIFEN XML)
and exports the results as CSV.
"""

__version__ = "0.1.0"
__author__ = "Factura Export Team"

from .schemas import InvoiceRecord, RawDocument, ExtractionFailure, BatchResult, BatchSummary
from .extractor import extract, extract_invoice_from_file, extract_invoices_from_dir
from .batch import process_batch
from .serializer import serialize_records, write_csv

__all__ = [
    "InvoiceRecord",
    "RawDocument",
    "ExtractionFailure",
    "BatchResult",
    "BatchSummary",
    "extract",
    "extract_invoice_from_file",
    "extract_invoices_from_dir",
    "process_batch",
    "serialize_records",
    "write_csv",
]
