"""
XML extraction module for converting electronic invoices to structured data.

This module provides functionality to:
- Parse SIFEN electronic-invoice XML into a generic tree
- Check that the stamp, operation-data and subtotals blocks are present
- Map the source fields onto a normalized InvoiceRecord
- Report per-document validity and parse failures without raising
"""

import math
import re
import uuid
from decimal import ROUND_HALF_UP, Decimal, localcontext
from pathlib import Path
from typing import Any, Optional, Union

from .config import (
    DOCUMENT_TAG,
    ENVELOPE_TAG,
    ISSUER_BLOCK,
    MISSING_COMPONENT_TEXT,
    OPERATION_BLOCK,
    STAMP_BLOCK,
    SUBTOTALS_BLOCK,
    TEXT_KEY,
    FailureKind,
    logger,
)
from .schemas import ExtractionFailure, InvoiceRecord
from .sources import load_documents_from_dir, read_xml_file
from .xml_tree import XmlNode, parse_xml_tree

ExtractionOutcome = Union[InvoiceRecord, ExtractionFailure]

# Longest leading decimal literal, as read by a prefix number parser
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_TWO_PLACES = Decimal("0.01")


# ============================================================================
# Tree Navigation
# ============================================================================

def child(node: Optional[XmlNode], name: str) -> Optional[XmlNode]:
    """Return the named child of a node, or None when the node has no children."""
    if isinstance(node, dict):
        return node.get(name)
    return None


def leaf_text(node: Optional[XmlNode]) -> Optional[str]:
    """Text of a leaf node. Elements carrying attributes contribute their #text."""
    if isinstance(node, str):
        return node
    if isinstance(node, dict):
        text = node.get(TEXT_KEY)
        return text if isinstance(text, str) else None
    return None


# ============================================================================
# Field Helpers
# ============================================================================

def parse_amount(value: Any) -> float:
    """
    Parse a monetary amount using locale-invariant decimal notation.

    Leading whitespace is skipped and the longest numeric prefix is used, so
    "150.5abc" reads as 150.5. Missing, empty or unparsable text reads as 0.
    """
    text = leaf_text(value)
    if not text:
        return 0.0

    match = _NUMBER_PREFIX.match(text.lstrip())
    if match is None:
        return 0.0

    number = float(match.group(0))
    if not math.isfinite(number):
        return 0.0
    return number


def format_amount(value: float) -> str:
    """
    Format an amount with exactly two decimal places.

    Halves round away from zero on the exact binary value of the float.
    Negative zero renders as "0.00"; small negatives that round to zero keep
    their sign ("-0.00").
    """
    if value == 0:
        value = 0.0
    exact = Decimal(value)
    with localcontext() as ctx:
        # integer digits plus the two decimals and a guard digit
        ctx.prec = len(str(int(abs(exact)))) + 3
        rounded = exact.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded:f}"


def compose_invoice_number(
    establishment: Optional[str],
    expedition_point: Optional[str],
    document_number: Optional[str],
) -> str:
    """
    Join establishment, expedition point and document number with '-'.

    Components are taken verbatim. A missing component is rendered as
    MISSING_COMPONENT_TEXT.
    """
    parts = [establishment, expedition_point, document_number]
    return "-".join(MISSING_COMPONENT_TEXT if p is None else p for p in parts)


def operation_date(timestamp: str) -> str:
    """Calendar-date part of an ISO-8601-like timestamp (text before the first 'T')."""
    return timestamp.split("T", 1)[0]


def make_record_id(file_name: str) -> str:
    """Identifier unique within a batch, even for repeated file names."""
    return f"{file_name}-{uuid.uuid4().hex}"


# ============================================================================
# Main Extraction Functions
# ============================================================================

def _build_record(stamp: XmlNode, operation: XmlNode, subtotals: XmlNode, file_name: str) -> InvoiceRecord:
    issuer = child(operation, ISSUER_BLOCK)

    emitted_at = leaf_text(child(operation, "dFeEmiDE"))
    if emitted_at is None:
        raise ValueError(f"{OPERATION_BLOCK}/dFeEmiDE is missing or not a text element")

    vat10 = parse_amount(child(subtotals, "dIVA10"))
    vat5 = parse_amount(child(subtotals, "dIVA5"))

    return InvoiceRecord(
        id=make_record_id(file_name),
        invoice_number=compose_invoice_number(
            leaf_text(child(stamp, "dEst")),
            leaf_text(child(stamp, "dPunExp")),
            leaf_text(child(stamp, "dNumDoc")),
        ),
        date=operation_date(emitted_at),
        amount=format_amount(parse_amount(child(subtotals, "dTotGralOpe"))),
        vat10=format_amount(vat10),
        vat5=format_amount(vat5),
        vat_total=format_amount(vat10 + vat5),
        tax_id=leaf_text(child(issuer, "dRucEm")) or "",
        issuer_name=leaf_text(child(issuer, "dNomEmi")) or "",
        stamp_number=leaf_text(child(stamp, "dNumTim")) or "",
    )


def extract(content: str, file_name: str) -> ExtractionOutcome:
    """
    Extract an InvoiceRecord from one electronic-invoice XML document.

    Args:
        content: XML text of the document
        file_name: Name of the file or attachment, used for the record id and logging

    Returns:
        InvoiceRecord on success. ExtractionFailure of kind VALIDITY when the
        stamp, operation-data or subtotals block is missing, or of kind PARSE
        when the document could not be read. Never raises for document content.
    """
    try:
        tree = parse_xml_tree(content)
        document = child(child(tree, ENVELOPE_TAG), DOCUMENT_TAG)
        stamp = child(document, STAMP_BLOCK)
        operation = child(document, OPERATION_BLOCK)
        subtotals = child(document, SUBTOTALS_BLOCK)

        missing = [
            name
            for name, block in (
                (STAMP_BLOCK, stamp),
                (OPERATION_BLOCK, operation),
                (SUBTOTALS_BLOCK, subtotals),
            )
            if not block
        ]
        if missing:
            reason = f"missing block(s): {', '.join(missing)}"
            logger.warning(f"File {file_name} does not look like a valid invoice ({reason})")
            return ExtractionFailure(file_name=file_name, kind=FailureKind.VALIDITY, reason=reason)

        record = _build_record(stamp, operation, subtotals, file_name)
    except Exception as e:
        logger.error(f"Error parsing {file_name}: {e}")
        return ExtractionFailure(file_name=file_name, kind=FailureKind.PARSE, reason=str(e))

    logger.debug(f"Extracted invoice {record.invoice_number} from {file_name}")
    return record


def extract_invoice_from_file(xml_path: Path) -> ExtractionOutcome:
    """
    Extract an invoice from an XML file on disk.

    Raises:
        OSError: If the file cannot be read
    """
    document = read_xml_file(xml_path)
    return extract(document.content, document.file_name)


def extract_invoices_from_dir(xml_dir: Path) -> list[InvoiceRecord]:
    """
    Extract invoices from all XML files in a directory.

    Args:
        xml_dir: Path to directory containing XML files

    Returns:
        Extracted records in file-name order; failed documents are skipped
    """
    documents = load_documents_from_dir(xml_dir)

    records = []
    for document in documents:
        outcome = extract(document.content, document.file_name)
        if isinstance(outcome, InvoiceRecord):
            records.append(outcome)

    logger.info(f"Successfully extracted {len(records)} of {len(documents)} invoices")
    return records
