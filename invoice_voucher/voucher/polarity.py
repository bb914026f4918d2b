"""
Polarity resolution.

Tally marks every ledger entry "deemed positive" (debit-like) or not. In
an invoice voucher the party ledger always sits on the opposite side from
the inventory and tax ledgers, and the sign of each AMOUNT follows from
that side. Both are derived here, once, from the transaction type; entry
constructors never decide a sign on their own.

    Sale:      party Yes, posts -total;  inventory/tax No,  post +amount
    Purchase:  party No,  posts +total;  inventory/tax Yes, post -amount

Every other transaction type (CreditNote, DebitNote, missing, unknown)
uses the Purchase rule.
"""

from dataclasses import dataclass
from typing import Optional

from invoice_voucher.extraction.invoice_record import TransactionType


SALES_VOUCHER = "Sales"
PURCHASE_VOUCHER = "Purchase"

# Voucher type names used when extended type mapping is enabled
EXTENDED_VOUCHER_TYPES = {
    TransactionType.CREDIT_NOTE: "Credit Note",
    TransactionType.DEBIT_NOTE: "Debit Note",
}


@dataclass(frozen=True)
class Polarity:
    """
    Sign convention for one voucher.

    Attributes:
        voucher_type: Tally voucher type name
        party_deemed_positive: ISDEEMEDPOSITIVE of the party ledger entry
    """
    voucher_type: str
    party_deemed_positive: bool

    @property
    def counter_deemed_positive(self) -> bool:
        """ISDEEMEDPOSITIVE of every inventory, allocation and tax entry."""
        return not self.party_deemed_positive

    @property
    def party_sign(self) -> int:
        return -1 if self.party_deemed_positive else 1

    @property
    def counter_sign(self) -> int:
        return -self.party_sign

    def party_amount(self, nominal: float) -> float:
        """Signed AMOUNT for the party entry given the invoice total."""
        return self.party_sign * nominal

    def counter_amount(self, nominal: float) -> float:
        """Signed AMOUNT for an inventory or tax entry given its value."""
        return self.counter_sign * nominal


def resolve_polarity(
    transaction_type: Optional[TransactionType],
    extended_types: bool = False
) -> Polarity:
    """
    Determine the sign convention for a transaction type.

    Args:
        transaction_type: Parsed transaction type, or None.
        extended_types: Name Credit/Debit Note vouchers after their type
                        instead of "Purchase". Polarity is unaffected.

    Returns:
        Polarity for the voucher.

    Example:
        >>> resolve_polarity(TransactionType.SALE).party_amount(59)
        -59
        >>> resolve_polarity(TransactionType.PURCHASE).counter_amount(50)
        -50
    """
    is_sale = transaction_type is TransactionType.SALE
    voucher_type = SALES_VOUCHER if is_sale else PURCHASE_VOUCHER

    if extended_types and transaction_type in EXTENDED_VOUCHER_TYPES:
        voucher_type = EXTENDED_VOUCHER_TYPES[transaction_type]

    # TODO: confirm Credit/Debit Note polarity with accounting; both follow Purchase today
    return Polarity(voucher_type=voucher_type, party_deemed_positive=is_sale)
