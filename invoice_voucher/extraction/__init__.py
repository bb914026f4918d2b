"""
Extraction Module.

Adapters that turn an invoice document into a JSON-shaped record, the
response parser they share, and the structured InvoiceRecord model.
"""

from .invoice_record import InvoiceRecord, LineItem, Party, TaxBreakdown, TransactionType
from .adapter import ExtractionAdapter, GeminiExtractionAdapter, JSONRecordAdapter
from .response_parser import parse_model_response

__all__ = [
    'InvoiceRecord',
    'LineItem',
    'Party',
    'TaxBreakdown',
    'TransactionType',
    'ExtractionAdapter',
    'GeminiExtractionAdapter',
    'JSONRecordAdapter',
    'parse_model_response'
]
