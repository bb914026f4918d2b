"""
Main Input Handler Module.

The InputHandler is the entry point for invoice documents. It validates
the file, detects its media type and returns the raw bytes packaged for
the extraction adapter.

Usage:
    from invoice_voucher.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("invoice.pdf")
    document.media_type  # 'application/pdf'
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.helpers import format_file_size, get_file_extension
from invoice_voucher.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    DocumentNotFoundError,
    CorruptedFileError
)

from .image_processor import ImageProcessor

logger = get_logger(__name__)


@dataclass
class InputDocument:
    """
    A validated invoice document ready for extraction.

    Attributes:
        filepath: Original file path
        filename: Original filename
        media_type: MIME type sent along with the bytes
        data: Raw file contents
        metadata: Additional file metadata (size, image dimensions)
    """
    filepath: str
    filename: str
    media_type: str
    data: bytes
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"InputDocument(filename='{self.filename}', "
            f"media_type='{self.media_type}', "
            f"size={format_file_size(self.size)})"
        )


class InputHandler:
    """
    Loads and validates invoice documents.

    Attributes:
        supported_extensions: Set of supported file extensions
        max_file_size: Maximum accepted file size in bytes
        image_processor: ImageProcessor used for image integrity checks

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("scan.png")
        >>> document.media_type
        'image/png'
    """

    PDF_EXTENSIONS = {'.pdf'}
    EXTENSION_MEDIA_TYPES = {
        '.pdf': 'application/pdf',
        '.jpg': 'image/jpeg',
        '.jpeg': 'image/jpeg',
        '.png': 'image/png',
        '.webp': 'image/webp',
        '.tif': 'image/tiff',
        '.tiff': 'image/tiff',
        '.bmp': 'image/bmp',
    }

    PDF_SIGNATURE = b'%PDF'

    def __init__(self, max_file_size_mb: Optional[float] = None) -> None:
        """
        Initialize the InputHandler.

        Args:
            max_file_size_mb: Override for input.max_file_size_mb.
        """
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                list(self.EXTENSION_MEDIA_TYPES)
            )
        }
        if max_file_size_mb is None:
            max_file_size_mb = get_config("input.max_file_size_mb", 20)
        self.max_file_size = int(max_file_size_mb * 1024 * 1024)

        self.image_processor = ImageProcessor()

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    def detect_media_type(self, filepath: Union[str, Path]) -> str:
        """
        Detect the media type of an input file from its extension.

        Raises:
            UnsupportedFileTypeError: If file type is not supported.
        """
        extension = get_file_extension(filepath)

        if extension not in self.supported_extensions or extension not in self.EXTENSION_MEDIA_TYPES:
            raise UnsupportedFileTypeError(extension, list(self.supported_extensions))

        return self.EXTENSION_MEDIA_TYPES[extension]

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and within size limits.

        Raises:
            DocumentNotFoundError: If file doesn't exist.
            InputError: If the path is not a regular file or too large.
            UnsupportedFileTypeError: If file type is not supported.
            CorruptedFileError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise DocumentNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        self.detect_media_type(path)

        size = path.stat().st_size
        if size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")
        if size > self.max_file_size:
            raise InputError(
                f"File too large: {format_file_size(size)}",
                {"filepath": str(filepath), "limit": format_file_size(self.max_file_size)}
            )

        return path

    def load(self, filepath: Union[str, Path]) -> InputDocument:
        """
        Load an invoice document.

        Args:
            filepath: Path to the invoice file.

        Returns:
            InputDocument with raw bytes and detected media type.

        Raises:
            InputError: Any validation failure (see validate_file).
        """
        logger.info(f"Loading file: {filepath}")

        path = self.validate_file(filepath)
        media_type = self.detect_media_type(path)
        data = path.read_bytes()

        metadata: Dict[str, Any] = {'size_bytes': len(data)}

        if get_file_extension(path) in self.PDF_EXTENSIONS:
            if not data.startswith(self.PDF_SIGNATURE):
                raise CorruptedFileError(str(filepath), "Missing PDF header")
        else:
            metadata.update(self.image_processor.inspect(data, path))
            # Trust the decoded format over the extension
            media_type = metadata.get('media_type') or media_type

        document = InputDocument(
            filepath=str(filepath),
            filename=path.name,
            media_type=media_type,
            data=data,
            metadata=metadata
        )
        logger.info(f"Loaded {document.filename} ({media_type}, {format_file_size(document.size)})")
        return document
