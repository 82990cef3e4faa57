"""
Tabular export of invoice records.

Records are written with a fixed column order and Spanish header labels.
Monetary fields are emitted exactly as formatted by the extractor.
"""

import csv
import io
import json
from pathlib import Path
from typing import Iterable

from .config import CSV_COLUMNS, CSV_DELIMITER, logger
from .schemas import InvoiceRecord


def header_labels() -> list[str]:
    return [label for label, _ in CSV_COLUMNS]


def record_row(record: InvoiceRecord) -> list[str]:
    """Values of one record in export column order."""
    return [getattr(record, field) for _, field in CSV_COLUMNS]


def serialize_records(records: Iterable[InvoiceRecord], delimiter: str = CSV_DELIMITER) -> str:
    """
    Render records as delimited text.

    Fields containing the delimiter, a quote or a line break are quoted and
    embedded quotes are doubled. Every row, including the last, ends with
    CRLF. An empty sequence yields only the header row.

    Args:
        records: Records to export, in the order they should appear
        delimiter: Field delimiter

    Returns:
        The export as a string
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\r\n",
    )
    writer.writerow(header_labels())
    for record in records:
        writer.writerow(record_row(record))
    return buffer.getvalue()


def write_csv(records: list[InvoiceRecord], output_path: Path, delimiter: str = CSV_DELIMITER) -> Path:
    """
    Write records to a UTF-8 CSV file.

    Args:
        records: List of InvoiceRecord objects
        output_path: Path to output CSV file

    Returns:
        The path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(serialize_records(records, delimiter))

    logger.info(f"Wrote {len(records)} invoices to: {output_path}")
    return output_path


def write_records_json(records: list[InvoiceRecord], output_path: Path) -> None:
    """
    Write records to a JSON file.

    Args:
        records: List of InvoiceRecord objects
        output_path: Path to output JSON file
    """
    output_data = [record.model_dump(mode="json") for record in records]

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(output_data, f, indent=2, ensure_ascii=False)

    logger.info(f"Wrote {len(records)} invoices to: {output_path}")
