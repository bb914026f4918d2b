"""
Invoice to Tally Voucher Converter.

Turns scanned invoices into double-entry Tally ERP vouchers in Tally's
XML import format.

Modules:
    - input_handler: PDF and image loading and integrity checks
    - extraction: Invoice record model and extraction adapters (Gemini)
    - postprocessor: Normalization, record coercion and validation
    - voucher: Polarity, ledger mapping, voucher model and XML rendering
    - output_handler: XML and JSON response files
    - pipeline: End-to-end orchestration

Architecture:
    Input → Extraction → Post-Processing → Voucher Compiler → Output
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'extraction',
    'postprocessor',
    'voucher',
    'output_handler',
    'pipeline',
    'utils'
]
