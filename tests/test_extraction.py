"""
Unit Tests for Extraction

Response parsing, the Gemini adapter (with a stub client) and the JSON
record adapter.
"""

import json

import pytest

from invoice_voucher.extraction import (
    GeminiExtractionAdapter,
    InvoiceRecord,
    JSONRecordAdapter,
    TransactionType,
    parse_model_response,
)
from invoice_voucher.extraction.prompts import EXTRACTION_PROMPT
from invoice_voucher.extraction.response_parser import clean_model_text
from invoice_voucher.input_handler import InputDocument
from invoice_voucher.utils.exceptions import (
    ConfigurationError,
    DocumentNotFoundError,
    ExtractionError,
    ExtractionParseError,
    ExtractionServiceError,
)


@pytest.fixture
def document():
    return InputDocument(
        filepath="invoice.png",
        filename="invoice.png",
        media_type="image/png",
        data=b"\x89PNG fake bytes",
    )


class TestResponseParser:
    """Tests for parse_model_response."""

    def test_plain_json(self):
        assert parse_model_response('{"invoice_number": "INV-42"}') == {"invoice_number": "INV-42"}

    def test_fenced_json(self):
        text = '```json\n{"total_amount": 59}\n```'
        assert parse_model_response(text) == {"total_amount": 59}

    def test_chatter_around_json(self):
        text = 'Here is the data:\n{"type": "Sales", "line_items": [{"amount": 1}]}\nHope this helps!'
        assert parse_model_response(text)["type"] == "Sales"

    def test_clean_model_text(self):
        assert clean_model_text('Sure! ```json\n{"a": 1}\n``` Done') == '{"a": 1}'

    @pytest.mark.parametrize("text", ["", "   ", "no json here", "{broken", "[1, 2, 3]"])
    def test_unparseable(self, text):
        with pytest.raises(ExtractionParseError):
            parse_model_response(text)

    def test_raw_response_kept_for_diagnosis(self):
        with pytest.raises(ExtractionParseError) as exc_info:
            parse_model_response("{not json}")
        assert exc_info.value.details["raw_response"] == "{not json}"


class TestGeminiExtractionAdapter:
    """Tests for GeminiExtractionAdapter with a stub client."""

    def test_extract(self, stub_client, document, inv42):
        client = stub_client(reply="```json\n" + json.dumps(inv42) + "\n```")
        adapter = GeminiExtractionAdapter(client=client, model_name="gemini-test")

        assert adapter.extract(document) == inv42

        (call,) = client.models.calls
        assert call["model"] == "gemini-test"
        part, prompt = call["contents"]
        assert prompt == EXTRACTION_PROMPT
        assert part.inline_data.mime_type == "image/png"
        assert part.inline_data.data == document.data
        assert call["config"].temperature == 0.0

    def test_default_model(self, stub_client):
        adapter = GeminiExtractionAdapter(client=stub_client(reply="{}"))
        assert adapter.model_name == "gemini-flash-latest"

    def test_service_failure(self, stub_client, document):
        adapter = GeminiExtractionAdapter(client=stub_client(error=RuntimeError("quota exceeded")))

        with pytest.raises(ExtractionServiceError) as exc_info:
            adapter.extract(document)
        assert exc_info.value.details["reason"] == "quota exceeded"

    @pytest.mark.parametrize("reply", [None, "", "I could not read this invoice."])
    def test_unparseable_reply(self, stub_client, document, reply):
        adapter = GeminiExtractionAdapter(client=stub_client(reply=reply))
        with pytest.raises(ExtractionError):
            adapter.extract(document)

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError):
            GeminiExtractionAdapter(api_key=None)

    def test_from_config_reads_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        adapter = GeminiExtractionAdapter.from_config()

        assert adapter.model_name == "gemini-flash-latest"
        assert adapter.temperature == 0.0

    def test_from_config_without_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            GeminiExtractionAdapter.from_config()


class TestJSONRecordAdapter:
    """Tests for JSONRecordAdapter."""

    def test_load(self, record_file, inv42):
        assert JSONRecordAdapter().load(record_file) == inv42

    def test_record_path_used_for_every_document(self, record_file, document, inv42):
        assert JSONRecordAdapter(record_file).extract(document) == inv42

    def test_document_decoded_as_json(self, inv42):
        document = InputDocument(
            filepath="record.json",
            filename="record.json",
            media_type="application/json",
            data=json.dumps(inv42).encode("utf-8"),
        )
        assert JSONRecordAdapter().extract(document) == inv42

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            JSONRecordAdapter().load(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ExtractionParseError):
            JSONRecordAdapter().load(path)

    def test_binary_document(self, document):
        with pytest.raises(ExtractionParseError):
            JSONRecordAdapter().extract(document)


class TestInvoiceRecord:
    """Tests for the record model."""

    @pytest.mark.parametrize("value, expected", [
        ("Sale", TransactionType.SALE),
        ("Purchases", TransactionType.PURCHASE),
        ("Credit Note", TransactionType.CREDIT_NOTE),
        ("debit_note", TransactionType.DEBIT_NOTE),
        ("Receipt", None),
        (None, None),
        (7, None),
    ])
    def test_transaction_type_parse(self, value, expected):
        assert TransactionType.parse(value) is expected

    def test_to_dict(self):
        record = InvoiceRecord(transaction_type=TransactionType.SALE, document_number="S-1")
        data = record.to_dict()

        assert data["transaction_type"] == "Sale"
        assert data["document_number"] == "S-1"
        assert json.loads(record.to_json())["supplier"] == {"name": None, "tax_id": None}
