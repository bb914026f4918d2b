"""
Voucher Compiler Module.

Entry point of the invoice-to-voucher core:

    mapping --PostProcessor--> InvoiceRecord --VoucherBuilder--> Voucher
            --build_document--> Element tree --XMLSerializer--> XML text

Configuration is read once, when options are built; compile() itself does
no file, network or configuration I/O, keeps no state between calls and
is safe to call from several threads.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from invoice_voucher.extraction.invoice_record import InvoiceRecord
from invoice_voucher.postprocessor.normalizers import DateNormalizer
from invoice_voucher.postprocessor.processor import PostProcessor
from invoice_voucher.postprocessor.validators import InvoiceValidator, ValidationResult
from invoice_voucher.utils.logger import get_logger
from .builder import VoucherBuilder
from .document import build_document
from .models import Voucher
from .options import CompilerOptions, OutputMode
from .serializer import XMLSerializer

logger = get_logger(__name__)


@dataclass
class CompilationResult:
    """
    Result of compiling one invoice.

    Attributes:
        record: Normalized invoice record
        voucher: Double-entry voucher built from the record
        xml: Serialized Tally import XML
        validation: Non-fatal findings
        mode: Output mode the XML was rendered in
        raw: Extracted mapping the record came from, if any
    """
    record: InvoiceRecord
    voucher: Voucher
    xml: str
    validation: ValidationResult
    mode: OutputMode = OutputMode.FULL
    raw: Optional[Mapping[str, Any]] = None

    @property
    def is_balanced(self) -> bool:
        return self.voucher.is_balanced()

    def to_dict(self) -> Dict[str, Any]:
        """
        Response document: {success, data, tally_xml, validation_errors}.

        validation_errors is None when there are no findings.
        """
        return {
            'success': True,
            'data': dict(self.raw) if self.raw is not None else self.record.to_dict(),
            'tally_xml': self.xml,
            'validation_errors': self.validation.issues or None,
        }


class VoucherCompiler:
    """
    Compiles invoice records into Tally voucher XML.

    Attributes:
        options: CompilerOptions
        postprocessor: Coerces extracted mappings into InvoiceRecords
        builder: VoucherBuilder
        validator: InvoiceValidator
        serializer: XMLSerializer

    Example:
        >>> compiler = VoucherCompiler()
        >>> result = compiler.compile({"type": "Purchase", "invoice_number": "INV-42", ...})
        >>> result.voucher.is_balanced()
        True
        >>> print(result.xml)
    """

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()
        self.postprocessor = PostProcessor(
            default_unit=self.options.default_unit,
            date_normalizer=DateNormalizer(dayfirst=self.options.date_dayfirst)
        )
        self.builder = VoucherBuilder(self.options)
        self.validator = InvoiceValidator(
            required_fields=self.options.required_fields,
            total_tolerance=self.options.total_tolerance,
            balance_tolerance=self.options.balance_tolerance
        )
        self.serializer = XMLSerializer()

        logger.debug(
            f"VoucherCompiler initialized "
            f"(mode={self.options.output_mode.value}, company={self.options.include_company})"
        )

    @classmethod
    def from_config(cls, output_mode: Optional[str] = None) -> 'VoucherCompiler':
        """Create a compiler from the loaded configuration."""
        return cls(CompilerOptions.from_config(output_mode=output_mode))

    def prepare(self, data: Union[InvoiceRecord, Mapping[str, Any]]) -> InvoiceRecord:
        """Coerce an extracted mapping into an InvoiceRecord; records pass through."""
        if isinstance(data, InvoiceRecord):
            return data
        return self.postprocessor.process(data)

    def build_voucher(self, data: Union[InvoiceRecord, Mapping[str, Any]]) -> Voucher:
        """
        Build the double-entry voucher without rendering XML.

        Raises:
            MalformedInvoiceError: If the record cannot be turned into a voucher.
        """
        return self.builder.build(self.prepare(data))

    def render(self, voucher: Voucher, mode: Optional[OutputMode] = None) -> str:
        """Serialize a voucher to Tally import XML."""
        document = build_document(
            voucher,
            mode=mode or self.options.output_mode,
            include_company=self.options.include_company
        )
        return self.serializer.serialize(document)

    def compile(
        self,
        data: Union[InvoiceRecord, Mapping[str, Any]],
        mode: Optional[Union[OutputMode, str]] = None
    ) -> CompilationResult:
        """
        Compile one invoice.

        Args:
            data: InvoiceRecord, or the mapping an extraction adapter returned.
            mode: Output mode override ("full" or "minimal").

        Returns:
            CompilationResult with the voucher, XML and validation findings.

        Raises:
            MalformedInvoiceError: If a value in the record has an unusable shape.
            SerializationError: If the voucher cannot be written as XML.
        """
        output_mode = OutputMode.parse(mode) if mode else self.options.output_mode
        raw = None if isinstance(data, InvoiceRecord) else data

        record = self.prepare(data)
        voucher = self.builder.build(
            record,
            require_line_items=output_mode is OutputMode.FULL
        )
        validation = self.validator.validate(record, voucher, raw=raw)
        xml = self.render(voucher, output_mode)

        if record.line_items is not None and not voucher.is_balanced(self.options.balance_tolerance):
            logger.warning(f"Compiled unbalanced voucher: {voucher!r}")
        else:
            logger.info(f"Compiled {voucher!r}")

        return CompilationResult(
            record=record,
            voucher=voucher,
            xml=xml,
            validation=validation,
            mode=output_mode,
            raw=raw
        )
