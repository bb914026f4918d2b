"""
Data Normalizers Module.

This module provides normalization for the loosely-typed values an
extraction service returns:
    - Date strings in assorted formats -> ISO (YYYY-MM-DD)
    - Amounts given as numbers or text ("₹ 1,234.50") -> float
"""

import math
import re
from datetime import datetime
from typing import Any, List, Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_voucher.utils.logger import get_logger

logger = get_logger(__name__)


class DateNormalizer:
    """
    Normalizes date strings to a standard format.

    Explicit formats are tried first, then dateutil's parser. Indian
    invoices print day-first dates, so ambiguous dates such as 03/04/2024
    are read day-first unless configured otherwise.

    Attributes:
        output_format: Target date format string
        input_formats: List of recognized input format strings
        dayfirst: Whether ambiguous dates are read day-first

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("15/03/2024")
        '2024-03-15'
        >>> normalizer.normalize("March 15, 2024")
        '2024-03-15'
    """

    DEFAULT_INPUT_FORMATS = [
        "%Y-%m-%d",
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%d.%m.%Y",
        "%d %b %Y",
        "%d %B %Y",
        "%d-%b-%Y",
        "%b %d, %Y",
        "%B %d, %Y",
        "%Y%m%d",
    ]

    FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

    def __init__(
        self,
        dayfirst: Optional[bool] = None,
        output_format: Optional[str] = None,
        input_formats: Optional[List[str]] = None
    ) -> None:
        self.dayfirst = dayfirst if dayfirst is not None else \
            get_config("postprocessing.date.dayfirst", True)
        self.output_format = output_format or get_config(
            "postprocessing.date.output_format",
            "%Y-%m-%d"
        )
        self.input_formats = input_formats or get_config(
            "postprocessing.date.input_formats",
            self.DEFAULT_INPUT_FORMATS
        )

        logger.debug(f"DateNormalizer initialized (output: {self.output_format}, dayfirst: {self.dayfirst})")

    def normalize(self, date_str: str) -> Optional[str]:
        """
        Normalize a date string to the configured output format.

        Args:
            date_str: Input date string in any recognized format.

        Returns:
            Normalized date string, or None if parsing fails.
        """
        parsed = self.parse(date_str)
        if parsed is None:
            logger.debug(f"Could not parse date: {date_str!r}")
            return None
        return parsed.strftime(self.output_format)

    def parse(self, date_str: str) -> Optional[datetime]:
        """Parse a date string into a datetime, or None."""
        if not date_str:
            return None

        date_str = self._clean_date_string(date_str)

        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        # dateutil fills missing parts from its default; two different
        # defaults agree only when day, month and year were all given.
        try:
            first = date_parser.parse(date_str, dayfirst=self.dayfirst, default=self.FILL_DEFAULTS[0])
            second = date_parser.parse(date_str, dayfirst=self.dayfirst, default=self.FILL_DEFAULTS[1])
        except (ValueError, OverflowError):
            return None

        if first.date() != second.date():
            logger.debug(f"Incomplete date: {date_str!r}")
            return None
        return first

    def _clean_date_string(self, date_str: str) -> str:
        """
        Clean and prepare date string for parsing.
        """
        date_str = ' '.join(date_str.split())

        prefixes = ['invoice date:', 'dated:', 'date:']
        for prefix in prefixes:
            if date_str.lower().startswith(prefix):
                date_str = date_str[len(prefix):].strip()
                break

        # 1st, 2nd, 3rd, 4th
        date_str = re.sub(r'(\d+)(st|nd|rd|th)\b', r'\1', date_str, flags=re.IGNORECASE)

        return date_str.strip()


class AmountNormalizer:
    """
    Normalizes amounts to floats.

    JSON numbers pass through; strings are cleaned of currency symbols,
    codes and thousands separators before parsing. Values that cannot be
    read as a finite number yield None; the caller decides whether that is
    an error.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_float("₹ 1,234.50")
        1234.5
        >>> normalizer.to_float(59)
        59.0
        >>> normalizer.to_float("abc") is None
        True
    """

    CURRENCY_SYMBOLS = ['$', '€', '£', '¥', '₹']
    CURRENCY_CODES = ['INR', 'RS', 'USD', 'EUR', 'GBP']

    def to_float(self, value: Any) -> Optional[float]:
        """
        Convert an amount to float.

        Args:
            value: Number or amount string.

        Returns:
            Float value, or None when the value is not a finite number.
        """
        # bool is an int subclass but never an amount
        if isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            cleaned = self._clean_amount_string(value)
            if not cleaned:
                return None
            try:
                number = float(cleaned)
            except ValueError:
                return None
        else:
            return None

        if math.isnan(number) or math.isinf(number):
            return None
        return number

    def _clean_amount_string(self, amount_str: str) -> str:
        """
        Strip currency markers and thousands separators.
        """
        amount_str = amount_str.strip()

        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES:
            amount_str = re.sub(rf'\b{code}\b\.?', '', amount_str, flags=re.IGNORECASE)

        amount_str = amount_str.replace(',', '').replace(' ', '')

        # Anything left besides digits, one dot and a leading minus is not an amount
        if not re.fullmatch(r'-?\d+(\.\d+)?|-?\.\d+', amount_str):
            return ''

        return amount_str
