"""
Main Output Handler Module.

Writes compiled vouchers to disk: the Tally import XML and, optionally, a
JSON response document of the form

    {"success": ..., "data": ..., "tally_xml": ..., "validation_errors": ...}
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.helpers import ensure_directory, generate_timestamp, safe_filename
from invoice_voucher.utils.exceptions import OutputWriteError
from invoice_voucher.voucher.compiler import CompilationResult

logger = get_logger(__name__)


class OutputHandler:
    """
    Writes compilation results to files.

    Attributes:
        output_dir: Directory for files written without an explicit path
        write_json: Whether save() also writes the JSON response

    Example:
        >>> handler = OutputHandler()
        >>> paths = handler.save(result)
        >>> paths['xml_path']
        'outputs/INV-42.xml'
    """

    def __init__(
        self,
        output_dir: Optional[str] = None,
        write_json: Optional[bool] = None
    ) -> None:
        self.output_dir = Path(output_dir or get_config("output.directory", "outputs"))
        self.write_json = write_json if write_json is not None else \
            get_config("output.write_json", True)

        logger.info(f"OutputHandler initialized (dir={self.output_dir}, json={self.write_json})")

    def default_stem(self, result: CompilationResult) -> str:
        """File stem for a result: the voucher number, made filesystem-safe."""
        number = result.record.document_number
        if not number:
            return f"voucher_{generate_timestamp()}"
        return safe_filename(number)

    def write_xml(
        self,
        result: CompilationResult,
        path: Optional[Union[str, Path]] = None,
        stem: Optional[str] = None
    ) -> str:
        """
        Write the Tally XML.

        Args:
            result: Compilation result.
            path: Target file; defaults to <output_dir>/<stem>.xml.
            stem: File stem when no path is given; defaults to default_stem().

        Returns:
            Path of the written file.

        Raises:
            OutputWriteError: If the file cannot be written.
        """
        target = Path(path) if path else self.output_dir / f"{stem or self.default_stem(result)}.xml"
        self._write(target, result.xml)
        logger.info(f"Tally XML written to {target}")
        return str(target)

    def write_response(
        self,
        response: Dict[str, Any],
        path: Optional[Union[str, Path]] = None,
        stem: Optional[str] = None
    ) -> str:
        """
        Write a JSON response document.

        Args:
            response: Response dictionary (see CompilationResult.to_dict).
            path: Target file; defaults to <output_dir>/<stem>.json.
            stem: File stem when no path is given.

        Raises:
            OutputWriteError: If the file cannot be written.
        """
        target = Path(path) if path else self.output_dir / f"{stem or 'response'}.json"
        text = json.dumps(response, indent=2, ensure_ascii=False, default=str)
        self._write(target, text)
        logger.info(f"JSON response written to {target}")
        return str(target)

    def save(
        self,
        result: CompilationResult,
        xml_path: Optional[Union[str, Path]] = None,
        json_path: Optional[Union[str, Path]] = None
    ) -> Dict[str, Optional[str]]:
        """
        Save a result to all enabled outputs.

        Returns:
            {'xml_path': ..., 'json_path': ...}; json_path is None when no
            JSON response was written.
        """
        stem = self.default_stem(result)
        output_info = {
            'xml_path': self.write_xml(result, xml_path, stem=stem),
            'json_path': None
        }

        if json_path or self.write_json:
            output_info['json_path'] = self.write_response(
                result.to_dict(),
                json_path,
                stem=stem
            )

        return output_info

    def _write(self, target: Path, text: str) -> None:
        try:
            ensure_directory(target.parent)
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(str(target), str(e)) from e
