"""
Invoice Record Data Classes.

This module defines the structured invoice record the compiler consumes.
Records are produced by the PostProcessor from the loosely-typed JSON an
extraction adapter returns; every field may be missing, so every field is
Optional and the compiler applies explicit defaults.
"""

import json
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class TransactionType(Enum):
    """Kinds of invoice the extractor may report."""

    SALE = "Sale"
    PURCHASE = "Purchase"
    CREDIT_NOTE = "CreditNote"
    DEBIT_NOTE = "DebitNote"

    @classmethod
    def parse(cls, value: Any) -> Optional['TransactionType']:
        """
        Parse a transaction type leniently.

        Accepts the canonical names and the spellings the extraction prompt
        produces ("Sales", "Credit Note", "debit_note", ...).

        Returns:
            The matching TransactionType, or None when missing/unrecognized.

        Example:
            >>> TransactionType.parse("Sales")
            <TransactionType.SALE: 'Sale'>
            >>> TransactionType.parse("Journal") is None
            True
        """
        if not isinstance(value, str):
            return None
        key = re.sub(r'[\s_\-]+', '', value).lower()
        return _TRANSACTION_TYPE_ALIASES.get(key)


_TRANSACTION_TYPE_ALIASES = {
    'sale': TransactionType.SALE,
    'sales': TransactionType.SALE,
    'salesinvoice': TransactionType.SALE,
    'purchase': TransactionType.PURCHASE,
    'purchases': TransactionType.PURCHASE,
    'purchaseinvoice': TransactionType.PURCHASE,
    'creditnote': TransactionType.CREDIT_NOTE,
    'debitnote': TransactionType.DEBIT_NOTE,
}


@dataclass
class Party:
    """A counterparty (supplier or customer) as printed on the invoice."""
    name: Optional[str] = None
    tax_id: Optional[str] = None


@dataclass
class LineItem:
    """
    One invoice line.

    Attributes:
        description: Item description, used as the stock item name
        quantity: Billed quantity
        unit: Unit of measure ("Nos" when the invoice shows none)
        rate: Price per unit
        amount: Line value before tax
        ledger_hint: Suggested accounting ledger, e.g. "Purchase @ 18%"
    """
    description: str
    quantity: float
    rate: float
    amount: float
    unit: str = "Nos"
    ledger_hint: Optional[str] = None


@dataclass
class TaxBreakdown:
    """GST components; absent components are zero."""
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    total_tax: float = 0.0

    def components(self) -> Iterator[Tuple[str, float]]:
        """Yield (component, value) in the fixed CGST, SGST, IGST order."""
        yield "CGST", self.cgst
        yield "SGST", self.sgst
        yield "IGST", self.igst

    @property
    def component_sum(self) -> float:
        return self.cgst + self.sgst + self.igst


@dataclass
class InvoiceRecord:
    """
    Structured invoice record produced from an extraction.

    Attributes:
        transaction_type: Parsed transaction type (None if missing/unknown)
        raw_transaction_type: The value as extracted, for reporting
        document_number: Invoice number
        document_date: ISO date (YYYY-MM-DD) when parseable, else the raw text
        supplier: Supplier party
        customer: Customer party
        line_items: Invoice lines; None when the record has no line list
        tax_breakdown: GST components
        grand_total: Invoice total; None when absent
        warnings: Non-fatal notes recorded while normalizing

    Example:
        >>> record = InvoiceRecord(
        ...     transaction_type=TransactionType.PURCHASE,
        ...     document_number="INV-42",
        ...     grand_total=59.0
        ... )
        >>> record.party_name is None
        True
    """
    transaction_type: Optional[TransactionType] = None
    raw_transaction_type: Optional[str] = None
    document_number: Optional[str] = None
    document_date: Optional[str] = None
    supplier: Party = field(default_factory=Party)
    customer: Party = field(default_factory=Party)
    line_items: Optional[List[LineItem]] = None
    tax_breakdown: TaxBreakdown = field(default_factory=TaxBreakdown)
    grand_total: Optional[float] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def party_name(self) -> Optional[str]:
        """Name of the ledger the voucher's party entry posts to."""
        return self.supplier.name

    @property
    def line_total(self) -> float:
        return sum(item.amount for item in self.line_items or [])

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-friendly dictionary using the record's own
        field names.
        """
        data = asdict(self)
        data['transaction_type'] = (
            self.transaction_type.value if self.transaction_type else None
        )
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        kind = self.transaction_type.value if self.transaction_type else self.raw_transaction_type
        lines = len(self.line_items) if self.line_items is not None else None
        return (
            f"InvoiceRecord("
            f"type={kind}, "
            f"number={self.document_number}, "
            f"lines={lines}, "
            f"total={self.grand_total})"
        )
