"""
Conversion Pipeline.

Wires the stages together:

    InputHandler -> ExtractionAdapter -> VoucherCompiler -> OutputHandler

The extraction adapter is passed in explicitly; the pipeline owns no
client of its own. Extraction failures are terminal: the compiler is
never invoked on a failed extraction.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from invoice_voucher.extraction.adapter import ExtractionAdapter
from invoice_voucher.input_handler.handler import InputHandler
from invoice_voucher.output_handler.handler import OutputHandler
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import ExtractionServiceError, InvoiceVoucherError
from invoice_voucher.voucher.compiler import CompilationResult, VoucherCompiler
from invoice_voucher.voucher.options import OutputMode

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """
    Outcome of converting one invoice.

    Attributes:
        source: Input file (or record file) name
        compilation: Compiled voucher, XML and findings
        processing_time: Seconds spent in the pipeline
        output_paths: Files written, if any
    """
    source: str
    compilation: CompilationResult
    processing_time: float = 0.0
    output_paths: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def xml(self) -> str:
        return self.compilation.xml

    def to_dict(self) -> Dict[str, Any]:
        return self.compilation.to_dict()


class InvoicePipeline:
    """
    Converts invoice documents into Tally vouchers.

    Example:
        >>> pipeline = InvoicePipeline(GeminiExtractionAdapter.from_config())
        >>> result = pipeline.run("invoice.pdf")
        >>> print(result.xml)
    """

    def __init__(
        self,
        adapter: ExtractionAdapter,
        compiler: Optional[VoucherCompiler] = None,
        input_handler: Optional[InputHandler] = None,
        output_handler: Optional[OutputHandler] = None
    ) -> None:
        self.adapter = adapter
        self.compiler = compiler or VoucherCompiler.from_config()
        self.input_handler = input_handler or InputHandler()
        self.output_handler = output_handler

        logger.info(f"InvoicePipeline initialized (adapter={adapter.name})")

    def extract(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a document and run the extraction adapter on it.

        Raises:
            InputError: If the document cannot be loaded.
            ExtractionError: If the adapter fails.
        """
        document = self.input_handler.load(filepath)

        try:
            return self.adapter.extract(document)
        except InvoiceVoucherError:
            raise
        except Exception as e:
            logger.error(f"Extraction adapter '{self.adapter.name}' failed: {e}")
            raise ExtractionServiceError(self.adapter.name, str(e)) from e

    def convert(
        self,
        record: Mapping[str, Any],
        source: str = "<record>",
        mode: Optional[Union[OutputMode, str]] = None,
        xml_path: Optional[Union[str, Path]] = None,
        json_path: Optional[Union[str, Path]] = None,
        start_time: Optional[float] = None
    ) -> PipelineResult:
        """
        Compile an extracted record and write outputs when an output
        handler is configured.
        """
        start_time = start_time or time.time()

        compilation = self.compiler.compile(record, mode=mode)
        result = PipelineResult(source=source, compilation=compilation)

        if self.output_handler is not None:
            result.output_paths = self.output_handler.save(compilation, xml_path, json_path)

        result.processing_time = time.time() - start_time
        logger.info(
            f"Converted {source} in {result.processing_time:.2f}s "
            f"({len(compilation.validation.errors)} errors, "
            f"{len(compilation.validation.warnings)} warnings)"
        )
        return result

    def run(
        self,
        filepath: Union[str, Path],
        mode: Optional[Union[OutputMode, str]] = None,
        xml_path: Optional[Union[str, Path]] = None,
        json_path: Optional[Union[str, Path]] = None
    ) -> PipelineResult:
        """
        Convert one invoice document end to end.

        Args:
            filepath: Invoice PDF or image.
            mode: Output mode override.
            xml_path: Where to write the XML (output handler default otherwise).
            json_path: Where to write the JSON response.

        Returns:
            PipelineResult.

        Raises:
            InputError, ExtractionError, CompilationError, OutputError
        """
        start_time = time.time()
        logger.info(f"Processing: {Path(filepath).name}")

        record = self.extract(filepath)
        return self.convert(
            record,
            source=Path(filepath).name,
            mode=mode,
            xml_path=xml_path,
            json_path=json_path,
            start_time=start_time
        )
