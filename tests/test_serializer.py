"""
Tests for the CSV serializer.
"""

import csv
import io
import json

from factura_export.serializer import (
    header_labels,
    serialize_records,
    write_csv,
    write_records_json,
)

HEADER = "Fecha,Nº de Boleta,Ruc,Nombre,Monto,Iva 10 %,Iva 5%,Total Iva,Timbrado\r\n"


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


class TestSerializeRecords:

    def test_header_only_for_empty_input(self):
        assert serialize_records([]) == HEADER

    def test_single_record(self, make_record):
        output = serialize_records([make_record()])
        assert output == (
            HEADER
            + "2024-05-10,001-002-0000123,80012345-6,ACME SA,1100000.00,100000.00,0.00,100000.00,12345678\r\n"
        )

    def test_header_labels_order(self):
        assert header_labels() == [
            "Fecha", "Nº de Boleta", "Ruc", "Nombre", "Monto",
            "Iva 10 %", "Iva 5%", "Total Iva", "Timbrado",
        ]

    def test_rows_follow_input_order(self, make_record):
        records = [
            make_record(id="a", invoice_number="001-001-0000001"),
            make_record(id="b", invoice_number="001-001-0000002"),
            make_record(id="c", invoice_number="001-001-0000003"),
        ]
        rows = _rows(serialize_records(records))
        assert [row[1] for row in rows[1:]] == [
            "001-001-0000001",
            "001-001-0000002",
            "001-001-0000003",
        ]

    def test_quotes_delimiter_and_quote_characters(self, make_record):
        output = serialize_records([make_record(issuer_name='ACME, "La Casa" SA')])
        assert '"ACME, ""La Casa"" SA"' in output
        assert _rows(output)[1][3] == 'ACME, "La Casa" SA'

    def test_quotes_line_breaks(self, make_record):
        output = serialize_records([make_record(issuer_name="ACME\nSA")])
        assert '"ACME\nSA"' in output
        assert _rows(output)[1][3] == "ACME\nSA"

    def test_plain_fields_unquoted(self, make_record):
        output = serialize_records([make_record()])
        assert '"' not in output

    def test_custom_delimiter(self, make_record):
        output = serialize_records([make_record(issuer_name="ACME; SA")], delimiter=";")
        assert output.startswith("Fecha;Nº de Boleta;")
        assert '"ACME; SA"' in output

    def test_amounts_round_trip(self, make_record):
        record = make_record(amount="1234.50", vat10="112.23", vat5="0.00", vat_total="112.23")
        row = _rows(serialize_records([record]))[1]
        assert float(row[4]) == 1234.5
        assert float(row[5]) == 112.23
        assert float(row[7]) == float(record.vat_total)

    def test_missing_text_is_empty_cell(self, make_record):
        row = _rows(serialize_records([make_record(tax_id="", issuer_name="")]))[1]
        assert row[2] == ""
        assert row[3] == ""


class TestWriteFiles:

    def test_write_csv(self, tmp_path, make_record):
        path = write_csv([make_record(issuer_name="Ñandutí SA")], tmp_path / "out" / "facturas.csv")

        assert path.exists()
        content = path.read_bytes().decode("utf-8")
        assert content.startswith(HEADER)
        assert "Ñandutí SA" in content
        assert content.endswith("\r\n")
        assert "\r\r\n" not in content

    def test_write_records_json(self, tmp_path, make_record):
        path = tmp_path / "records.json"
        write_records_json([make_record()], path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["invoice_number"] == "001-002-0000123"
        assert data[0]["vat_total"] == "100000.00"
