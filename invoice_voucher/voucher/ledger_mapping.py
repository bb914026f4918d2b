"""
Ledger mapping and Tally text formats.

Decides which ledger each invoice line posts to and renders quantities,
rates, amounts and dates the way Tally's importer expects them. Tally is
strict about these strings:

    ACTUALQTY / BILLEDQTY   "<quantity> <unit>"     e.g. "10 Pcs"
    RATE                    "<rate>/<unit>"         e.g. "5/Pcs"
    AMOUNT                  plain decimal text      e.g. "-4.5"
    DATE                    YYYYMMDD                e.g. "20240315"
"""

import re
from decimal import Decimal
from typing import Optional

from invoice_voucher.extraction.invoice_record import LineItem, TransactionType

DEFAULT_UNIT = "Nos"

_DATE_SEPARATORS = re.compile(r'[-/.\s]')


def ledger_for_line(
    item: LineItem,
    transaction_type: Optional[TransactionType],
    sales_ledger: str = "Sales Account",
    purchase_ledger: str = "Purchase Account"
) -> str:
    """
    Ledger an invoice line's value posts to.

    The line's own ledger hint wins; otherwise sales lines post to the
    sales ledger and everything else to the purchase ledger.
    """
    if item.ledger_hint and item.ledger_hint.strip():
        return item.ledger_hint.strip()
    if transaction_type is TransactionType.SALE:
        return sales_ledger
    return purchase_ledger


def format_number(value: float) -> str:
    """
    Render a number as plain decimal text without trailing zeros.

    The shortest text that reads back as the same float is used, so no
    digits are lost and signed amounts that balance still balance once
    written.

    Example:
        >>> format_number(10.0)
        '10'
        >>> format_number(2.50)
        '2.5'
        >>> format_number(1e-7)
        '0.0000001'
    """
    text = format(Decimal(repr(float(value))), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text


def format_amount(value: float) -> str:
    """
    Render a signed AMOUNT: no currency symbol, no thousands separator.

    Example:
        >>> format_amount(59)
        '59'
        >>> format_amount(-4.5)
        '-4.5'
        >>> format_amount(1234567.891)
        '1234567.891'
    """
    return format_number(value)


def format_quantity(quantity: float, unit: Optional[str] = None) -> str:
    """
    Example:
        >>> format_quantity(10, "Pcs")
        '10 Pcs'
        >>> format_quantity(3, None)
        '3 Nos'
    """
    return f"{format_number(quantity)} {unit or DEFAULT_UNIT}"


def format_rate(rate: float, unit: Optional[str] = None) -> str:
    """
    Example:
        >>> format_rate(5, "Pcs")
        '5/Pcs'
    """
    return f"{format_number(rate)}/{unit or DEFAULT_UNIT}"


def format_tally_date(date_str: Optional[str]) -> Optional[str]:
    """
    Convert a date to Tally's YYYYMMDD by stripping separators.

    Returns None for a missing date so the caller can apply its placeholder.

    Example:
        >>> format_tally_date("2024-03-15")
        '20240315'
    """
    if not date_str:
        return None
    return _DATE_SEPARATORS.sub('', date_str) or None
