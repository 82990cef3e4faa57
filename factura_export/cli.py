"""
Command-line interface for the Factura Export service.

Provides the main commands:
- extract: Extract invoices from XML files and export them to CSV
- decode: Decode a base64url mail attachment body into XML
- search-query: Print the mail search expression for a month
"""

from pathlib import Path
from typing import Optional

import typer

from .batch import format_summary_text, process_batch
from .config import EXPORT_FILENAME, MSG_NOTHING_TO_EXPORT, logger
from .serializer import write_csv, write_records_json
from .sources import AttachmentDecodeError, decode_attachment, load_documents_from_dir, monthly_search_query


# Create Typer app
app = typer.Typer(
    name="factura-export",
    help="Paraguayan electronic invoice (XML) extractor and CSV exporter",
    add_completion=False,
)


@app.command()
def extract(
    xml_dir: Path = typer.Option(
        ...,
        "--xml-dir",
        "-x",
        help="Directory containing invoice XML files",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    output: Path = typer.Option(
        EXPORT_FILENAME,
        "--output",
        "-o",
        help="Output CSV file path",
    ),
    save_json: Optional[Path] = typer.Option(
        None,
        "--save-json",
        "-s",
        help="Also save extracted records to this JSON file",
    ),
    fail_on_error: bool = typer.Option(
        False,
        "--fail-on-error",
        help="Exit with non-zero status if any document could not be extracted",
    ),
) -> None:
    """
    Extract invoices from XML files and export them to CSV.

    Reads all XML files from the specified directory, extracts the invoice
    data of each one and writes the successful records to a CSV file.
    """
    typer.echo(f"Extracting invoices from: {xml_dir}")

    try:
        documents = load_documents_from_dir(xml_dir)
        result = process_batch(documents)
    except OSError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo("\n" + format_summary_text(result))

    if not result.succeeded:
        typer.echo(MSG_NOTHING_TO_EXPORT, err=True)
        raise typer.Exit(code=1)

    write_csv(result.records, output)
    if save_json:
        write_records_json(result.records, save_json)
        typer.echo(f"Saved extracted records to: {save_json}")

    typer.echo(f"\n[OK] Exported {result.summary.extracted} invoice(s) to: {output}")
    typer.echo("\nExtracted invoices:")
    for record in result.records[:10]:  # Show first 10
        typer.echo(f"  - {record.invoice_number} | {record.date} | {record.issuer_name} | {record.amount}")
    if len(result.records) > 10:
        typer.echo(f"  ... and {len(result.records) - 10} more")

    if fail_on_error and result.summary.failed > 0:
        raise typer.Exit(code=1)


@app.command()
def decode(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="File holding a base64url-encoded attachment body",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the decoded XML here instead of standard output",
    ),
) -> None:
    """
    Decode a base64url mail attachment body into XML text.
    """
    try:
        xml_text = decode_attachment(input_file.read_text(encoding="utf-8"))
    except AttachmentDecodeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(xml_text)
        return

    output.write_text(xml_text, encoding="utf-8")
    logger.info(f"Decoded attachment written to: {output}")
    typer.echo(f"[OK] Decoded XML saved to: {output}")


@app.command("search-query")
def search_query(
    month: str = typer.Option(
        ...,
        "--month",
        "-m",
        help="Month to search, in YYYY-MM form",
    ),
    company: Optional[str] = typer.Option(
        None,
        "--company",
        "-c",
        help="Only messages from this sender",
    ),
) -> None:
    """
    Print the mail search expression for invoice attachments of a month.
    """
    try:
        typer.echo(monthly_search_query(month, company))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"Factura Export v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
