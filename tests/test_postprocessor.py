"""
Unit Tests for Post-Processing

Record coercion, normalizers, malformed field paths and validation.
"""

import pytest

from invoice_voucher.extraction.invoice_record import InvoiceRecord, TransactionType
from invoice_voucher.postprocessor import (
    AmountNormalizer,
    DateNormalizer,
    InvoiceValidator,
    PostProcessor,
    ValidationResult,
)
from invoice_voucher.utils.exceptions import MalformedInvoiceError


@pytest.fixture
def processor():
    return PostProcessor(default_unit="Nos", date_normalizer=DateNormalizer(dayfirst=True))


def _item(**overrides):
    item = {"description": "Widget", "quantity": 1, "rate": 10, "amount": 10}
    item.update(overrides)
    return item


class TestPostProcessor:
    """Tests for PostProcessor.process."""

    def test_prompt_style_keys(self, processor, inv42):
        record = processor.process(inv42)

        assert record.transaction_type is TransactionType.PURCHASE
        assert record.document_number == "INV-42"
        assert record.document_date == "2024-03-15"
        assert record.supplier.name == "Acme Traders"
        assert record.supplier.tax_id == "29ABCDE1234F1Z5"
        assert record.customer.name == "My Shop"
        assert record.line_items[0].ledger_hint == "Purchase @ 18%"
        assert record.line_items[0].unit == "Pcs"
        assert record.tax_breakdown.cgst == 4.5
        assert record.tax_breakdown.igst == 0.0
        assert record.grand_total == 59.0
        assert record.warnings == []

    def test_camel_case_keys(self, processor):
        record = processor.process({
            "transactionType": "Sale",
            "documentNumber": "S-1",
            "documentDate": "15/03/2024",
            "counterparty": {"supplier": {"name": "Acme", "taxId": "X1"}},
            "lineItems": [_item(ledgerHint="Sales @ 5%")],
            "taxBreakdown": {"igst": 0.5, "totalTax": 0.5},
            "grandTotal": 10.5,
        })

        assert record.transaction_type is TransactionType.SALE
        assert record.document_number == "S-1"
        assert record.document_date == "2024-03-15"
        assert record.supplier.tax_id == "X1"
        assert record.line_items[0].ledger_hint == "Sales @ 5%"
        assert record.tax_breakdown.total_tax == 0.5
        assert record.grand_total == 10.5

    def test_numeric_strings_are_normalized(self, processor):
        record = processor.process({
            "line_items": [_item(quantity="2", rate="₹ 617.25", amount="1,234.50")],
            "total_amount": "Rs. 1,234.50",
        })

        item = record.line_items[0]
        assert (item.quantity, item.rate, item.amount) == (2.0, 617.25, 1234.5)
        assert record.grand_total == 1234.5

    def test_defaults_left_to_builder(self, processor):
        record = processor.process({})

        assert record.transaction_type is None
        assert record.document_number is None
        assert record.supplier.name is None
        assert record.line_items is None
        assert record.grand_total is None
        assert any("Transaction type missing" in w for w in record.warnings)

    def test_unit_default(self, processor):
        record = processor.process({"line_items": [_item(unit="  ")]})
        assert record.line_items[0].unit == "Nos"

    def test_party_given_as_text(self, processor):
        record = processor.process({"supplier": "  Acme   Traders "})
        assert record.supplier.name == "Acme Traders"

    @pytest.mark.parametrize("value", ["Sales", "sale", "SALES_INVOICE", "sales-invoice"])
    def test_sale_spellings(self, processor, value):
        assert processor.process({"type": value}).transaction_type is TransactionType.SALE

    def test_unknown_type_warns(self, processor):
        record = processor.process({"type": "Journal"})

        assert record.transaction_type is None
        assert record.raw_transaction_type == "Journal"
        assert any("Unrecognized transaction type 'Journal'" in w for w in record.warnings)


class TestMalformedRecords:
    """Unusable shapes fail fast with the offending field path."""

    @pytest.mark.parametrize("data, path", [
        (["not", "an", "object"], "$"),
        ({"lineItems": "three widgets"}, "lineItems"),
        ({"lineItems": [_item(), _item(), _item(amount="abc")]}, "lineItems[2].amount"),
        ({"line_items": [_item(quantity=None)]}, "line_items[0].quantity"),
        ({"line_items": [{"quantity": 1, "rate": 1, "amount": 1}]}, "line_items[0].description"),
        ({"line_items": [_item(rate=True)]}, "line_items[0].rate"),
        ({"line_items": ["Widget"]}, "line_items[0]"),
        ({"tax_details": {"cgst": -1}}, "tax_details.cgst"),
        ({"tax_details": [4.5, 4.5]}, "tax_details"),
        ({"total_amount": "fifty-nine"}, "total_amount"),
        ({"total_amount": {"value": 59}}, "total_amount"),
        ({"supplier": ["Acme"]}, "supplier"),
        ({"counterparty": "Acme"}, "counterparty"),
        ({"invoice_number": {"id": 42}}, "invoice_number"),
    ])
    def test_field_path(self, processor, data, path):
        with pytest.raises(MalformedInvoiceError) as exc_info:
            processor.process(data)

        assert exc_info.value.field_path == path
        assert path in str(exc_info.value)


class TestDateNormalizer:
    """Tests for DateNormalizer."""

    @pytest.mark.parametrize("value, expected", [
        ("2024-03-15", "2024-03-15"),
        ("15/03/2024", "2024-03-15"),
        ("15-Mar-2024", "2024-03-15"),
        ("March 15, 2024", "2024-03-15"),
        ("Invoice Date: 15th March 2024", "2024-03-15"),
        ("03/04/2024", "2024-04-03"),
    ])
    def test_normalize(self, value, expected):
        assert DateNormalizer(dayfirst=True).normalize(value) == expected

    def test_month_first(self):
        assert DateNormalizer(dayfirst=False, input_formats=["%Y-%m-%d"]).normalize("03/04/2024") == "2024-03-04"

    def test_unparseable(self):
        assert DateNormalizer(dayfirst=True).normalize("next tuesday-ish") is None

    @pytest.mark.parametrize("value", ["March 2024", "15 March", "2024", "15"])
    def test_partial_dates_rejected(self, value):
        assert DateNormalizer(dayfirst=True).normalize(value) is None

    def test_complete_date_via_dateutil(self):
        normalizer = DateNormalizer(dayfirst=True, input_formats=["%Y-%m-%d"])
        assert normalizer.normalize("Friday, 15 March 2024") == "2024-03-15"


class TestAmountNormalizer:
    """Tests for AmountNormalizer."""

    @pytest.mark.parametrize("value, expected", [
        (59, 59.0),
        (4.5, 4.5),
        ("1,180.00", 1180.0),
        ("₹ 1,234.50", 1234.5),
        ("INR 99", 99.0),
        ("-4.5", -4.5),
    ])
    def test_valid(self, value, expected):
        assert AmountNormalizer().to_float(value) == expected

    @pytest.mark.parametrize("value", [True, "abc", "", "1.2.3", float("nan"), float("inf"), [1], None])
    def test_invalid(self, value):
        assert AmountNormalizer().to_float(value) is None


class TestInvoiceValidator:
    """Tests for InvoiceValidator."""

    @pytest.fixture
    def validator(self):
        return InvoiceValidator(
            required_fields=["invoice_number", "total_amount"],
            total_tolerance=1.0,
            balance_tolerance=1e-6,
        )

    def test_required_fields(self, validator):
        problems = dict(validator.check_required_fields({"invoice_number": None, "grandTotal": "59"}))

        assert problems["invoice_number"] == "Required field missing: invoice_number"
        assert "Expected int or float" in problems["total_amount"]

    def test_required_fields_present(self, validator, inv42):
        assert validator.check_required_fields(inv42) == []

    def test_required_field_from_later_alias(self, validator):
        raw = {"invoice_number": None, "documentNumber": "INV-42", "grandTotal": 59}
        assert validator.check_required_fields(raw) == []

    def test_required_fields_on_record(self, validator):
        record = InvoiceRecord(transaction_type=TransactionType.PURCHASE, line_items=[])
        result = validator.validate(record)

        assert not result.is_valid
        assert [issue["field"] for issue in result.issues if issue["severity"] == "error"] == [
            "invoice_number",
            "total_amount",
        ]

    @pytest.mark.parametrize("value, valid", [
        ("2024-03-15", True),
        (None, False),
        ("1999-12-31", False),
        ("2101-01-01", False),
        ("15/03/2024", False),
    ])
    def test_check_date(self, validator, value, valid):
        assert validator.check_date(value)[0] is valid

    def test_total_tax_mismatch(self, validator, processor, inv42):
        inv42["tax_details"]["total_tax"] = 20
        result = validator.validate(processor.process(inv42))

        assert result.is_valid
        assert any(issue["field"] == "tax_details.total_tax" for issue in result.issues)

    def test_validation_result(self):
        result = ValidationResult()
        result.add_warning("careful", "invoice_date")
        assert result.is_valid

        result.add_error("broken", "total_amount")
        assert not result.is_valid
        assert result.to_dict()["issues"] == [
            {"field": "invoice_date", "message": "careful", "severity": "warning"},
            {"field": "total_amount", "message": "broken", "severity": "error"},
        ]
