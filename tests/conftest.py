"""
Shared fixtures: builders for SIFEN invoice XML documents and records.
"""

from typing import Optional

import pytest

from factura_export.schemas import InvoiceRecord

SIFEN_NS = "http://ekuatia.set.gov.py/sifen/xsd"

DEFAULT_STAMP = {
    "iTiDE": "1",
    "dNumTim": "12345678",
    "dEst": "001",
    "dPunExp": "002",
    "dNumDoc": "0000123",
    "dFeIniT": "2023-01-01",
}

DEFAULT_OPERATION = {
    "dFeEmiDE": "2024-05-10T10:00:00",
    "gEmis": {
        "dRucEm": "80012345-6",
        "dNomEmi": "ACME SA",
    },
}

DEFAULT_SUBTOTALS = {
    "dTotGralOpe": "1100000",
    "dIVA10": "100000",
    "dIVA5": "0",
}


def _elements(fields: dict) -> str:
    parts = []
    for tag, value in fields.items():
        if value is None:
            continue
        if isinstance(value, dict):
            parts.append(f"<{tag}>{_elements(value)}</{tag}>")
        else:
            parts.append(f"<{tag}>{value}</{tag}>")
    return "".join(parts)


def build_invoice_xml(
    stamp: Optional[dict] = DEFAULT_STAMP,
    operation: Optional[dict] = DEFAULT_OPERATION,
    subtotals: Optional[dict] = DEFAULT_SUBTOTALS,
) -> str:
    """Build a SIFEN document; pass None to leave a block out."""
    blocks = {"gTimb": stamp, "gDatGralOpe": operation, "gTotSub": subtotals}
    body = "".join(
        f"<{tag}>{_elements(fields)}</{tag}>"
        for tag, fields in blocks.items()
        if fields is not None
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<rDE xmlns="{SIFEN_NS}">'
        "<dVerFor>150</dVerFor>"
        f'<DE Id="01800123456001002000012322024051011234567891">{body}</DE>'
        "</rDE>"
    )


@pytest.fixture
def make_invoice_xml():
    return build_invoice_xml


@pytest.fixture
def invoice_xml() -> str:
    return build_invoice_xml()


@pytest.fixture
def make_record():
    def _make(**overrides) -> InvoiceRecord:
        fields = {
            "id": "factura.xml-1",
            "invoice_number": "001-002-0000123",
            "date": "2024-05-10",
            "amount": "1100000.00",
            "vat10": "100000.00",
            "vat5": "0.00",
            "vat_total": "100000.00",
            "tax_id": "80012345-6",
            "issuer_name": "ACME SA",
            "stamp_number": "12345678",
        }
        fields.update(overrides)
        return InvoiceRecord(**fields)
    return _make
