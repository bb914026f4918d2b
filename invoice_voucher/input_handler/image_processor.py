"""
Image Processor Module.

Integrity checks for scanned invoice images before they are sent to the
extraction service. The vision model receives the original bytes, so no
resizing or enhancement happens here; the processor only makes sure the
file really is a readable image and records its basic metadata.

Supports: JPG, JPEG, PNG, WEBP, TIFF, BMP
"""

import io
from pathlib import Path
from typing import Any, Dict, Union

from PIL import Image, UnidentifiedImageError

from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import CorruptedFileError

logger = get_logger(__name__)


class ImageProcessor:
    """
    Validates image bytes with Pillow.

    Example:
        >>> processor = ImageProcessor()
        >>> metadata = processor.inspect(data, "invoice.jpg")
        >>> metadata['format']
        'JPEG'
    """

    # Pillow format name -> media type sent to the extraction service
    MEDIA_TYPES = {
        'JPEG': 'image/jpeg',
        'PNG': 'image/png',
        'WEBP': 'image/webp',
        'TIFF': 'image/tiff',
        'BMP': 'image/bmp',
    }

    def inspect(self, data: bytes, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Verify that ``data`` decodes as an image.

        Args:
            data: Raw file bytes.
            filepath: Source path, used for error reporting.

        Returns:
            Metadata dictionary with format, media_type, width and height.

        Raises:
            CorruptedFileError: If Pillow cannot identify or verify the image.
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
                width, height = image.size
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            logger.error(f"Image integrity check failed for {filepath}: {e}")
            raise CorruptedFileError(str(filepath), str(e)) from e

        metadata = {
            'format': image_format,
            'media_type': self.MEDIA_TYPES.get(image_format),
            'width': width,
            'height': height,
        }
        logger.debug(f"Verified image {Path(filepath).name}: {image_format} {width}x{height}")
        return metadata
