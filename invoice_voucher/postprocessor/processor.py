"""
Main Post-Processor Module.

The PostProcessor turns the JSON-shaped record an extraction adapter
returns into a typed InvoiceRecord.

Operations:
    - Resolve field aliases (camelCase record keys and prompt-style snake_case)
    - Normalize dates and amounts
    - Clean text fields
    - Fail fast with the offending field path when a value cannot be used

Nothing here invents data: absent optional values stay None so that the
voucher builder applies its documented defaults, while present values of
an unusable shape raise MalformedInvoiceError.
"""

from typing import Any, List, Mapping, Optional, Sequence, Tuple

from config import get_config
from invoice_voucher.extraction.invoice_record import (
    InvoiceRecord,
    LineItem,
    Party,
    TaxBreakdown,
    TransactionType
)
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import MalformedInvoiceError
from .normalizers import AmountNormalizer, DateNormalizer

logger = get_logger(__name__)


# Logical field -> accepted keys, first match wins
FIELD_ALIASES = {
    'transaction_type': ('transactionType', 'type'),
    'document_number': ('documentNumber', 'invoice_number', 'invoiceNumber'),
    'document_date': ('documentDate', 'invoice_date', 'invoiceDate'),
    'supplier': ('supplier',),
    'customer': ('customer',),
    'line_items': ('lineItems', 'line_items'),
    'tax_breakdown': ('taxBreakdown', 'tax_details'),
    'grand_total': ('grandTotal', 'total_amount'),
}

PARTY_ALIASES = {
    'name': ('name',),
    'tax_id': ('taxId', 'gstin'),
}

LINE_ITEM_ALIASES = {
    'description': ('description',),
    'quantity': ('quantity',),
    'unit': ('unit',),
    'rate': ('rate',),
    'amount': ('amount',),
    'ledger_hint': ('ledgerHint', 'tally_ledger', 'ledger'),
}

TAX_ALIASES = {
    'cgst': ('cgst',),
    'sgst': ('sgst',),
    'igst': ('igst',),
    'total_tax': ('totalTax', 'total_tax'),
}


def pick_field(data: Mapping[str, Any], keys: Sequence[str]) -> Tuple[str, Any]:
    """
    Return (key, value) for the first alias present with a non-null value.

    When none is present the first alias is returned with None, so error
    messages still name a sensible field.
    """
    for key in keys:
        if data.get(key) is not None:
            return key, data[key]
    return keys[0], None


class PostProcessor:
    """
    Converts extracted invoice mappings into InvoiceRecords.

    Attributes:
        date_normalizer: DateNormalizer instance
        amount_normalizer: AmountNormalizer instance
        default_unit: Unit recorded for lines that show none

    Example:
        >>> processor = PostProcessor()
        >>> record = processor.process({"type": "Purchase", "total_amount": "1,180.00"})
        >>> record.grand_total
        1180.0
    """

    def __init__(
        self,
        default_unit: Optional[str] = None,
        date_normalizer: Optional[DateNormalizer] = None
    ) -> None:
        self.default_unit = default_unit or get_config("voucher.default_unit", "Nos")
        self.date_normalizer = date_normalizer or DateNormalizer()
        self.amount_normalizer = AmountNormalizer()

        logger.debug("PostProcessor initialized")

    def process(self, data: Any) -> InvoiceRecord:
        """
        Build an InvoiceRecord from an extracted mapping.

        Args:
            data: The decoded JSON record.

        Returns:
            Normalized InvoiceRecord.

        Raises:
            MalformedInvoiceError: If a present value has an unusable shape.
        """
        if not isinstance(data, Mapping):
            raise MalformedInvoiceError("$", data, "invoice record must be a JSON object")

        record = InvoiceRecord()

        self._process_transaction_type(data, record)
        record.document_number = self._text(data, FIELD_ALIASES['document_number'])
        record.document_date = self._date(data)

        counterparty = data.get('counterparty')
        if counterparty is not None and not isinstance(counterparty, Mapping):
            raise MalformedInvoiceError("counterparty", counterparty, "expected an object")
        counterparty = counterparty or {}

        record.supplier = self._party(data, counterparty, 'supplier')
        record.customer = self._party(data, counterparty, 'customer')
        record.line_items = self._line_items(data)
        record.tax_breakdown = self._tax_breakdown(data)
        record.grand_total = self._amount(data, FIELD_ALIASES['grand_total'])

        logger.info(f"Post-processing complete: {record!r}, {len(record.warnings)} warnings")
        return record

    def _process_transaction_type(self, data: Mapping[str, Any], record: InvoiceRecord) -> None:
        key, value = pick_field(data, FIELD_ALIASES['transaction_type'])
        record.raw_transaction_type = None if value is None else str(value)
        record.transaction_type = TransactionType.parse(value)

        if value is None:
            record.add_warning("Transaction type missing; Purchase voucher rules applied")
        elif record.transaction_type is None:
            record.add_warning(
                f"Unrecognized transaction type '{value}'; Purchase voucher rules applied"
            )

    def _text(self, data: Mapping[str, Any], keys: Sequence[str], path: str = "") -> Optional[str]:
        """Read a text field. Scalars are stringified; containers are malformed."""
        key, value = pick_field(data, keys)
        if value is None:
            return None

        if isinstance(value, (Mapping, list)):
            raise MalformedInvoiceError(f"{path}{key}", value, "expected text")

        text = ' '.join(str(value).split())
        return text or None

    def _date(self, data: Mapping[str, Any]) -> Optional[str]:
        raw = self._text(data, FIELD_ALIASES['document_date'])
        if raw is None:
            return None

        normalized = self.date_normalizer.normalize(raw)
        if normalized and normalized != raw:
            logger.debug(f"Normalized invoice date: '{raw}' -> '{normalized}'")

        # Unparseable dates are kept verbatim and reported by the validator
        return normalized or raw

    def _amount(
        self,
        data: Mapping[str, Any],
        keys: Sequence[str],
        path: str = "",
        required: bool = False
    ) -> Optional[float]:
        """Read a numeric field, failing fast on values that are not numbers."""
        key, value = pick_field(data, keys)
        if value is None:
            if required:
                raise MalformedInvoiceError(f"{path}{key}", None, "required number is missing")
            return None

        number = self.amount_normalizer.to_float(value)
        if number is None:
            raise MalformedInvoiceError(f"{path}{key}", value, "not a number")

        if isinstance(value, str):
            logger.debug(f"Normalized amount {path}{key}: '{value}' -> {number}")
        return number

    def _party(
        self,
        data: Mapping[str, Any],
        counterparty: Mapping[str, Any],
        role: str
    ) -> Party:
        if counterparty.get(role) is not None:
            value, path = counterparty[role], f"counterparty.{role}"
        else:
            value, path = data.get(role), role

        if value is None:
            return Party()

        # A bare name instead of an object
        if isinstance(value, str):
            return Party(name=' '.join(value.split()) or None)

        if not isinstance(value, Mapping):
            raise MalformedInvoiceError(path, value, "expected an object")

        return Party(
            name=self._text(value, PARTY_ALIASES['name'], f"{path}."),
            tax_id=self._text(value, PARTY_ALIASES['tax_id'], f"{path}.")
        )

    def _line_items(self, data: Mapping[str, Any]) -> Optional[List[LineItem]]:
        key, value = pick_field(data, FIELD_ALIASES['line_items'])
        if value is None:
            return None

        if not isinstance(value, list):
            raise MalformedInvoiceError(key, value, "expected a list of line items")

        return [self._line_item(item, f"{key}[{index}]") for index, item in enumerate(value)]

    def _line_item(self, item: Any, path: str) -> LineItem:
        if not isinstance(item, Mapping):
            raise MalformedInvoiceError(path, item, "expected an object")

        prefix = f"{path}."
        description = self._text(item, LINE_ITEM_ALIASES['description'], prefix)
        if description is None:
            raise MalformedInvoiceError(f"{prefix}description", None, "stock item name is missing")

        return LineItem(
            description=description,
            quantity=self._amount(item, LINE_ITEM_ALIASES['quantity'], prefix, required=True),
            unit=self._text(item, LINE_ITEM_ALIASES['unit'], prefix) or self.default_unit,
            rate=self._amount(item, LINE_ITEM_ALIASES['rate'], prefix, required=True),
            amount=self._amount(item, LINE_ITEM_ALIASES['amount'], prefix, required=True),
            ledger_hint=self._text(item, LINE_ITEM_ALIASES['ledger_hint'], prefix)
        )

    def _tax_breakdown(self, data: Mapping[str, Any]) -> TaxBreakdown:
        key, value = pick_field(data, FIELD_ALIASES['tax_breakdown'])
        if value is None:
            return TaxBreakdown()

        if not isinstance(value, Mapping):
            raise MalformedInvoiceError(key, value, "expected an object")

        prefix = f"{key}."
        components = {}
        for name, aliases in TAX_ALIASES.items():
            amount = self._amount(value, aliases, prefix)
            if amount is not None and amount < 0:
                raise MalformedInvoiceError(f"{prefix}{aliases[0]}", amount, "tax cannot be negative")
            components[name] = amount or 0.0

        return TaxBreakdown(**components)
