"""Shared fixtures for the converter test suite."""

import copy
import json
from types import SimpleNamespace

import pytest
from lxml import etree

from config import CONFIG_ENV_VAR, ConfigurationManager
from invoice_voucher.voucher import CompilerOptions, VoucherCompiler


INV_42 = {
    "type": "Purchase",
    "invoice_number": "INV-42",
    "invoice_date": "2024-03-15",
    "supplier": {"name": "Acme Traders", "gstin": "29ABCDE1234F1Z5"},
    "customer": {"name": "My Shop"},
    "line_items": [
        {
            "description": "Widget",
            "quantity": 10,
            "unit": "Pcs",
            "rate": 5,
            "amount": 50,
            "tally_ledger": "Purchase @ 18%",
        }
    ],
    "tax_details": {"cgst": 4.5, "sgst": 4.5, "igst": 0},
    "total_amount": 59,
}


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from the bundled settings.yaml."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def inv42():
    """The INV-42 purchase invoice as returned by the extraction prompt."""
    return copy.deepcopy(INV_42)


@pytest.fixture
def sale_record(inv42):
    record = copy.deepcopy(inv42)
    record["type"] = "Sales"
    record["line_items"][0].pop("tally_ledger")
    return record


@pytest.fixture
def options():
    return CompilerOptions()


@pytest.fixture
def compiler(options):
    return VoucherCompiler(options)


@pytest.fixture
def record_file(tmp_path, inv42):
    path = tmp_path / "extracted.json"
    path.write_text(json.dumps(inv42), encoding="utf-8")
    return path


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4\n1 0 obj << >> endobj\ntrailer << >>\n%%EOF\n")
    return path


class StubModels:
    """Stands in for genai.Client().models."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


@pytest.fixture
def stub_client():
    def make(reply=None, error=None):
        return SimpleNamespace(models=StubModels(reply, error))
    return make


def parse_xml(xml):
    """Parse serialized voucher XML back into an lxml tree."""
    return etree.fromstring(xml.encode("utf-8"))


def voucher_node(xml):
    return parse_xml(xml).find("BODY/IMPORTDATA/REQUESTDATA/TALLYMESSAGE/VOUCHER")
