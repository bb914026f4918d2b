"""
Post-Processing Module.

This module provides functionality for:
    - Date and amount normalization
    - Conversion of extracted mappings into InvoiceRecords
    - Non-fatal validation findings
"""

from .processor import PostProcessor
from .validators import InvoiceValidator, ValidationResult
from .normalizers import DateNormalizer, AmountNormalizer

__all__ = [
    'PostProcessor',
    'InvoiceValidator',
    'ValidationResult',
    'DateNormalizer',
    'AmountNormalizer'
]
