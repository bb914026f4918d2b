"""
Voucher Module.

The invoice-to-voucher core: polarity resolution, ledger mapping, the
double-entry Voucher model, the immutable XML document and its serializer.
"""

from .options import CompilerOptions, OutputMode
from .polarity import Polarity, resolve_polarity
from .models import AccountingAllocation, InventoryEntry, LedgerEntry, Voucher
from .builder import VoucherBuilder
from .document import Element, build_document, element
from .serializer import XMLSerializer
from .compiler import CompilationResult, VoucherCompiler

__all__ = [
    'CompilerOptions',
    'OutputMode',
    'Polarity',
    'resolve_polarity',
    'AccountingAllocation',
    'InventoryEntry',
    'LedgerEntry',
    'Voucher',
    'VoucherBuilder',
    'Element',
    'build_document',
    'element',
    'XMLSerializer',
    'CompilationResult',
    'VoucherCompiler',
]
