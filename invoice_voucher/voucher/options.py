"""
Compiler options.

Every default the voucher compiler substitutes for a missing invoice
value, and every ledger name it posts to, lives here. Options are plain
immutable values so that compiling a voucher reads no configuration.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from config import get_config


class OutputMode(Enum):
    """Alternative XML output schemas."""

    FULL = "full"        # party, inventory and tax blocks
    MINIMAL = "minimal"  # header fields and a narration marker only

    @classmethod
    def parse(cls, value) -> 'OutputMode':
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


DEFAULT_TAX_LEDGERS = {
    'cgst': 'CGST',
    'sgst': 'SGST',
    'igst': 'IGST',
}


@dataclass(frozen=True)
class CompilerOptions:
    """
    Defaults and ledger names used by the voucher compiler.

    Attributes:
        default_party_ledger: Party ledger when the supplier name is missing
        default_company: SVCURRENTCOMPANY when the customer name is missing
        default_date: Tally date used when the invoice date is missing
        default_voucher_number: Voucher and reference number fallback
        default_unit: Unit of measure for lines without one
        sales_ledger: Allocation ledger for sales lines without a hint
        purchase_ledger: Allocation ledger for all other lines without a hint
        tax_ledgers: Ledger names for the cgst, sgst and igst components
        include_company: Emit the STATICVARIABLES company context
        output_mode: FULL or MINIMAL XML
        extended_type_mapping: Name Credit/Debit Note vouchers after their type
        balance_tolerance: Largest imbalance still reported as balanced
        narration: Marker written in MINIMAL mode
        date_dayfirst: Read ambiguous invoice dates day-first
        required_fields: Fields whose absence is reported as a finding
        total_tolerance: Allowed drift between total tax and its components
    """
    default_party_ledger: str = "Cash"
    default_company: str = "My Company"
    default_date: str = "20240101"
    default_voucher_number: str = "1"
    default_unit: str = "Nos"
    sales_ledger: str = "Sales Account"
    purchase_ledger: str = "Purchase Account"
    tax_ledgers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TAX_LEDGERS))
    include_company: bool = True
    output_mode: OutputMode = OutputMode.FULL
    extended_type_mapping: bool = False
    balance_tolerance: float = 1e-6
    narration: str = "Imported from scanned invoice"
    date_dayfirst: bool = True
    required_fields: List[str] = field(default_factory=lambda: ['invoice_number', 'total_amount'])
    total_tolerance: float = 1.0

    def tax_ledger(self, component: str) -> str:
        """Ledger name for a tax component ("CGST", "SGST", "IGST")."""
        return self.tax_ledgers.get(component.lower(), component.upper())

    @classmethod
    def from_config(cls, output_mode: Optional[str] = None) -> 'CompilerOptions':
        """
        Build options from the voucher.* and postprocessing.* configuration keys.

        Args:
            output_mode: Override for voucher.output_mode.
        """
        defaults = cls()
        tax_ledgers = dict(DEFAULT_TAX_LEDGERS)
        tax_ledgers.update(get_config("voucher.tax_ledgers", {}) or {})

        return cls(
            default_party_ledger=get_config("voucher.default_party_ledger", defaults.default_party_ledger),
            default_company=get_config("voucher.default_company", defaults.default_company),
            default_date=str(get_config("voucher.default_date", defaults.default_date)),
            default_voucher_number=str(get_config("voucher.default_voucher_number", defaults.default_voucher_number)),
            default_unit=get_config("voucher.default_unit", defaults.default_unit),
            sales_ledger=get_config("voucher.sales_ledger", defaults.sales_ledger),
            purchase_ledger=get_config("voucher.purchase_ledger", defaults.purchase_ledger),
            tax_ledgers=tax_ledgers,
            include_company=get_config("voucher.include_company", defaults.include_company),
            output_mode=OutputMode.parse(output_mode or get_config("voucher.output_mode", "full")),
            extended_type_mapping=get_config("voucher.extended_type_mapping", defaults.extended_type_mapping),
            balance_tolerance=float(get_config("voucher.balance_tolerance", defaults.balance_tolerance)),
            narration=get_config("voucher.narration", defaults.narration),
            date_dayfirst=get_config("postprocessing.date.dayfirst", defaults.date_dayfirst),
            required_fields=list(get_config("postprocessing.validation.required_fields", defaults.required_fields)),
            total_tolerance=float(get_config("postprocessing.validation.total_tolerance", defaults.total_tolerance)),
        )
