"""
Tests for the command-line interface.
"""

import base64
import csv

import pytest
from typer.testing import CliRunner

from factura_export.cli import app

from .conftest import DEFAULT_STAMP

runner = CliRunner()


@pytest.fixture
def xml_dir(tmp_path, make_invoice_xml):
    directory = tmp_path / "xml"
    directory.mkdir()
    (directory / "01.xml").write_text(
        make_invoice_xml(stamp=dict(DEFAULT_STAMP, dNumDoc="0000001")), encoding="utf-8"
    )
    (directory / "02.xml").write_text(make_invoice_xml(operation=None), encoding="utf-8")
    (directory / "03.xml").write_text(
        make_invoice_xml(stamp=dict(DEFAULT_STAMP, dNumDoc="0000003")), encoding="utf-8"
    )
    return directory


class TestExtractCommand:

    def test_writes_csv(self, tmp_path, xml_dir):
        output = tmp_path / "facturas.csv"
        result = runner.invoke(app, ["extract", "--xml-dir", str(xml_dir), "--output", str(output)])

        assert result.exit_code == 0
        assert "Exported 2 invoice(s)" in result.output

        with open(output, encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "Fecha"
        assert [row[1] for row in rows[1:]] == ["001-002-0000001", "001-002-0000003"]

    def test_saves_json(self, tmp_path, xml_dir):
        output = tmp_path / "facturas.csv"
        json_path = tmp_path / "records.json"
        result = runner.invoke(app, [
            "extract", "--xml-dir", str(xml_dir), "--output", str(output), "--save-json", str(json_path),
        ])

        assert result.exit_code == 0
        assert json_path.exists()

    def test_fail_on_error(self, tmp_path, xml_dir):
        output = tmp_path / "facturas.csv"
        result = runner.invoke(app, [
            "extract", "--xml-dir", str(xml_dir), "--output", str(output), "--fail-on-error",
        ])

        assert result.exit_code == 1
        assert output.exists()

    def test_no_valid_invoices(self, tmp_path):
        directory = tmp_path / "empty"
        directory.mkdir()
        (directory / "bad.xml").write_text("<nope>", encoding="utf-8")
        output = tmp_path / "facturas.csv"

        result = runner.invoke(app, ["extract", "--xml-dir", str(directory), "--output", str(output)])

        assert result.exit_code == 1
        assert not output.exists()

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["extract", "--xml-dir", str(tmp_path / "missing")])
        assert result.exit_code != 0


class TestDecodeCommand:

    def test_decode_to_file(self, tmp_path, invoice_xml):
        payload = tmp_path / "attachment.txt"
        payload.write_text(
            base64.urlsafe_b64encode(invoice_xml.encode("utf-8")).decode("ascii"), encoding="utf-8"
        )
        output = tmp_path / "factura.xml"

        result = runner.invoke(app, ["decode", "--input", str(payload), "--output", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == invoice_xml

    def test_decode_to_stdout(self, tmp_path):
        payload = tmp_path / "attachment.txt"
        payload.write_text("PHIvPg", encoding="utf-8")  # "<r/>"

        result = runner.invoke(app, ["decode", "--input", str(payload)])

        assert result.exit_code == 0
        assert "<r/>" in result.output

    def test_decode_invalid(self, tmp_path):
        payload = tmp_path / "attachment.txt"
        payload.write_text("@@@@", encoding="utf-8")

        result = runner.invoke(app, ["decode", "--input", str(payload)])
        assert result.exit_code == 1


class TestSearchQueryCommand:

    def test_prints_query(self):
        result = runner.invoke(app, ["search-query", "--month", "2024-05", "--company", "acme"])

        assert result.exit_code == 0
        assert "after:2024-05-01 before:2024-06-01 from:acme" in result.output

    def test_invalid_month(self):
        result = runner.invoke(app, ["search-query", "--month", "2024-13"])
        assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "Factura Export v" in result.output
