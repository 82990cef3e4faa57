"""
Input sources for XML documents.

Documents reach the extractor as (file name, text) pairs. This module turns
local files, HTTP uploads and base64url-encoded mail attachments into
RawDocument instances, and builds the mail search expression for a month.
"""

import base64
import binascii
import re
from pathlib import Path
from typing import Iterable, Optional

from .config import MAIL_SEARCH_BASE, XML_EXTENSION, logger
from .schemas import Attachment, RawDocument

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


class AttachmentDecodeError(ValueError):
    """Raised when an attachment body is not valid base64url-encoded UTF-8."""


# ============================================================================
# Local Files and Uploads
# ============================================================================

def document_from_bytes(data: bytes, file_name: str) -> RawDocument:
    """Decode raw bytes as UTF-8 text (BOM dropped, invalid bytes replaced)."""
    return RawDocument(file_name=file_name, content=data.decode("utf-8-sig", errors="replace"))


def read_xml_file(xml_path: Path) -> RawDocument:
    """Read an XML file from disk into a RawDocument."""
    return document_from_bytes(xml_path.read_bytes(), xml_path.name)


def load_documents_from_dir(xml_dir: Path) -> list[RawDocument]:
    """
    Read every XML file in a directory, sorted by file name.

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    if not xml_dir.exists():
        raise FileNotFoundError(f"Directory not found: {xml_dir}")

    xml_files = sorted(
        (p for p in xml_dir.iterdir() if p.is_file() and p.suffix.lower() == XML_EXTENSION),
        key=lambda p: p.name,
    )

    if not xml_files:
        logger.warning(f"No XML files found in: {xml_dir}")
        return []

    logger.info(f"Found {len(xml_files)} XML files to process")
    return [read_xml_file(p) for p in xml_files]


# ============================================================================
# Mail Attachments
# ============================================================================

def decode_attachment(data: str) -> str:
    """
    Decode a base64url attachment body into UTF-8 text.

    Raises:
        AttachmentDecodeError: If the body is not valid base64 or not UTF-8
    """
    standard = data.strip().replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(standard, validate=True)
        return raw.decode("utf-8-sig")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise AttachmentDecodeError(f"Invalid attachment body: {e}") from e


def is_xml_attachment(filename: Optional[str]) -> bool:
    return bool(filename) and filename.lower().endswith(XML_EXTENSION)


def documents_from_attachments(attachments: Iterable[Attachment]) -> list[RawDocument]:
    """
    Decode XML mail attachments into RawDocuments.

    Attachments that are not .xml files are ignored; undecodable ones are
    logged and skipped.
    """
    documents = []
    for attachment in attachments:
        if not is_xml_attachment(attachment.filename):
            logger.debug(f"Skipping non-XML attachment: {attachment.filename}")
            continue
        try:
            content = decode_attachment(attachment.data)
        except AttachmentDecodeError as e:
            logger.error(f"Could not decode attachment {attachment.filename}: {e}")
            continue
        documents.append(RawDocument(file_name=attachment.filename, content=content))
    return documents


def monthly_search_query(month: str, company: Optional[str] = None) -> str:
    """
    Build the mail search expression for XML attachments received in a month.

    Args:
        month: Month in YYYY-MM form
        company: Optional sender filter

    Returns:
        Search expression such as
        "has:attachment filename:xml after:2024-05-01 before:2024-06-01"

    Raises:
        ValueError: If month is not a valid YYYY-MM value
    """
    match = _MONTH_PATTERN.match(month.strip())
    if match is None:
        raise ValueError(f"Month must be in YYYY-MM form, got: {month!r}")

    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValueError(f"Invalid month number: {month_number}")

    # "before:" is exclusive, so the range ends on the first day of next month
    next_year, next_month = (year + 1, 1) if month_number == 12 else (year, month_number + 1)

    query = (
        f"{MAIL_SEARCH_BASE} after:{year:04d}-{month_number:02d}-01 "
        f"before:{next_year:04d}-{next_month:02d}-01"
    )
    if company and company.strip():
        query += f" from:{company.strip()}"
    return query
