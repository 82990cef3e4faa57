"""
Batch processing of electronic-invoice documents.

This module runs the extractor over a sequence of documents, keeps the
successful records in input order and produces an aggregated summary.
"""

from typing import Iterable

from .config import MSG_BATCH_EMPTY, MSG_BATCH_OK, FailureKind, logger
from .extractor import extract
from .schemas import BatchResult, BatchSummary, ExtractionFailure, InvoiceRecord, RawDocument


def process_batch(documents: Iterable[RawDocument]) -> BatchResult:
    """
    Extract invoice records from a batch of documents.

    Every document is extracted independently; a failure only affects its
    own document and is never retried.

    Args:
        documents: Documents to process, in the order they were received

    Returns:
        BatchResult with records in input order, per-document failures and
        the aggregated summary
    """
    records: list[InvoiceRecord] = []
    failures: list[ExtractionFailure] = []
    total = 0

    for document in documents:
        total += 1
        outcome = extract(document.content, document.file_name)
        if isinstance(outcome, InvoiceRecord):
            records.append(outcome)
        else:
            failures.append(outcome)

    summary = BatchSummary(
        total_documents=total,
        extracted=len(records),
        failed=len(failures),
    )

    logger.info(f"Batch complete: {summary.extracted} extracted, {summary.failed} failed")

    return BatchResult(records=records, failures=failures, summary=summary)


def status_message(result: BatchResult) -> str:
    """User-facing status line for a batch."""
    if result.succeeded:
        return MSG_BATCH_OK.format(count=result.summary.extracted)
    return MSG_BATCH_EMPTY


def format_summary_text(result: BatchResult) -> str:
    """
    Format a BatchResult as human-readable text for CLI output.

    Args:
        result: BatchResult to format

    Returns:
        Formatted string for display
    """
    summary = result.summary
    lines = [
        "=" * 50,
        "EXTRACTION SUMMARY",
        "=" * 50,
        f"Documents processed: {summary.total_documents}",
        f"Invoices extracted:  {summary.extracted}",
        f"Failed documents:    {summary.failed}",
        "",
    ]

    if result.failures:
        lines.append("Failures:")
        lines.append("-" * 40)
        for failure in result.failures:
            label = "invalid" if failure.kind == FailureKind.VALIDITY else "unreadable"
            lines.append(f"  {failure.file_name} [{label}]: {failure.reason}")
        lines.append("")

    lines.append(status_message(result))
    lines.append("=" * 50)

    return "\n".join(lines)
