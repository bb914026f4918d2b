"""
Voucher Builder Module.

Builds the double-entry Voucher for an InvoiceRecord:

    1. Resolve polarity from the transaction type
    2. Fill header fields, substituting configured defaults
    3. Party entry for the invoice total
    4. One inventory entry per line, with its accounting allocation
    5. One tax entry per non-zero GST component

The builder is pure: the same record and options always give the same
Voucher.
"""

from typing import Iterator, Optional

from invoice_voucher.extraction.invoice_record import InvoiceRecord, LineItem, TaxBreakdown
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import MalformedInvoiceError
from .ledger_mapping import format_quantity, format_rate, format_tally_date, ledger_for_line
from .models import AccountingAllocation, InventoryEntry, LedgerEntry, Voucher
from .options import CompilerOptions
from .polarity import Polarity, resolve_polarity

logger = get_logger(__name__)


class VoucherBuilder:
    """
    Builds Voucher values from invoice records.

    Attributes:
        options: CompilerOptions with defaults and ledger names

    Example:
        >>> builder = VoucherBuilder(CompilerOptions())
        >>> voucher = builder.build(record)
        >>> voucher.party_entry.amount
        59.0
    """

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()

    def build(self, record: InvoiceRecord, require_line_items: bool = True) -> Voucher:
        """
        Build the voucher for a record.

        Args:
            record: Normalized invoice record.
            require_line_items: Fail when the record has no line list. The
                minimal output mode does not need lines.

        Returns:
            Voucher with signed entries.

        Raises:
            MalformedInvoiceError: If line items are required but absent.
        """
        options = self.options
        polarity = resolve_polarity(record.transaction_type, options.extended_type_mapping)

        line_items = record.line_items
        if line_items is None:
            if require_line_items:
                raise MalformedInvoiceError(
                    "lineItems", None, "line items are required to build inventory entries"
                )
            line_items = []

        voucher_number = record.document_number or options.default_voucher_number
        party_ledger = record.party_name or options.default_party_ledger
        grand_total = record.grand_total
        if grand_total is None:
            grand_total = self.derive_grand_total(record)
            logger.debug(f"Grand total missing; derived {grand_total}")

        party_entry = LedgerEntry(
            ledger_name=party_ledger,
            is_deemed_positive=polarity.party_deemed_positive,
            amount=polarity.party_amount(grand_total),
            is_party_ledger=True
        )

        voucher = Voucher(
            voucher_type=polarity.voucher_type,
            date=format_tally_date(record.document_date) or options.default_date,
            voucher_number=voucher_number,
            reference=voucher_number,
            party_ledger_name=party_ledger,
            company_name=record.customer.name or options.default_company,
            party_entry=party_entry,
            inventory_entries=tuple(
                self._inventory_entry(item, record, polarity) for item in line_items
            ),
            tax_entries=tuple(self._tax_entries(record.tax_breakdown, polarity)),
            narration=options.narration
        )

        logger.debug(f"Built {voucher!r}")
        return voucher

    @staticmethod
    def derive_grand_total(record: InvoiceRecord) -> float:
        """Line amounts plus GST components."""
        return record.line_total + record.tax_breakdown.component_sum

    def _inventory_entry(
        self,
        item: LineItem,
        record: InvoiceRecord,
        polarity: Polarity
    ) -> InventoryEntry:
        amount = polarity.counter_amount(item.amount)
        unit = item.unit or self.options.default_unit
        quantity = format_quantity(item.quantity, unit)

        allocation = AccountingAllocation(
            ledger_name=ledger_for_line(
                item,
                record.transaction_type,
                self.options.sales_ledger,
                self.options.purchase_ledger
            ),
            is_deemed_positive=polarity.counter_deemed_positive,
            amount=amount
        )

        return InventoryEntry(
            stock_item_name=item.description,
            is_deemed_positive=polarity.counter_deemed_positive,
            rate=format_rate(item.rate, unit),
            actual_qty=quantity,
            billed_qty=quantity,
            amount=amount,
            accounting_allocation=allocation
        )

    def _tax_entries(self, taxes: TaxBreakdown, polarity: Polarity) -> Iterator[LedgerEntry]:
        for component, value in taxes.components():
            if value > 0:
                yield LedgerEntry(
                    ledger_name=self.options.tax_ledger(component),
                    is_deemed_positive=polarity.counter_deemed_positive,
                    amount=polarity.counter_amount(value)
                )
            else:
                logger.debug(f"Omitting {component} entry (value {value})")
