"""
Voucher Data Classes.

The Voucher is the compiler's intermediate value: a double-entry view of
one invoice, built fresh for each compilation and never mutated. Amounts
are already signed (see polarity.py), so the zero-sum invariant can be
checked here before any XML is produced.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


def yes_no(flag: bool) -> str:
    """Tally's boolean literal."""
    return "Yes" if flag else "No"


@dataclass(frozen=True)
class LedgerEntry:
    """A LEDGERENTRIES.LIST block: the party entry or one tax entry."""
    ledger_name: str
    is_deemed_positive: bool
    amount: float
    is_party_ledger: bool = False


@dataclass(frozen=True)
class AccountingAllocation:
    """The ledger an inventory line's value posts to."""
    ledger_name: str
    is_deemed_positive: bool
    amount: float


@dataclass(frozen=True)
class InventoryEntry:
    """
    An ALLINVENTORYENTRIES.LIST block.

    Attributes:
        stock_item_name: Item description
        is_deemed_positive: Same side as the tax entries
        rate: Rendered rate, e.g. "5/Pcs"
        actual_qty: Rendered quantity, e.g. "10 Pcs"
        billed_qty: Rendered quantity, e.g. "10 Pcs"
        amount: Signed line value
        accounting_allocation: Nested general-ledger allocation
    """
    stock_item_name: str
    is_deemed_positive: bool
    rate: str
    actual_qty: str
    billed_qty: str
    amount: float
    accounting_allocation: AccountingAllocation


@dataclass(frozen=True)
class Voucher:
    """
    One Tally invoice voucher.

    Example:
        >>> voucher = compiler.build_voucher(record)
        >>> voucher.is_balanced()
        True
    """
    voucher_type: str
    date: str
    voucher_number: str
    reference: str
    party_ledger_name: str
    company_name: str
    party_entry: LedgerEntry
    inventory_entries: Tuple[InventoryEntry, ...] = ()
    tax_entries: Tuple[LedgerEntry, ...] = ()
    narration: Optional[str] = None

    def signed_amounts(self) -> List[float]:
        """
        Signed amounts of the party, inventory and tax entries.

        Accounting allocations mirror their inventory entry and are not
        counted again.
        """
        amounts = [self.party_entry.amount]
        amounts.extend(entry.amount for entry in self.inventory_entries)
        amounts.extend(entry.amount for entry in self.tax_entries)
        return amounts

    @property
    def balance(self) -> float:
        """Sum of all signed amounts; zero for a balanced voucher."""
        return sum(self.signed_amounts())

    def is_balanced(self, tolerance: float = 1e-6) -> bool:
        return abs(self.balance) <= tolerance

    def __repr__(self) -> str:
        return (
            f"Voucher(type={self.voucher_type}, "
            f"number={self.voucher_number}, "
            f"party={self.party_ledger_name}, "
            f"lines={len(self.inventory_entries)}, "
            f"taxes={len(self.tax_entries)}, "
            f"balance={self.balance:.2f})"
        )
