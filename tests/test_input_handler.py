"""
Unit Tests for the Input Handler
"""

import pytest
from PIL import Image

from invoice_voucher.input_handler import ImageProcessor, InputHandler
from invoice_voucher.utils.exceptions import (
    CorruptedFileError,
    DocumentNotFoundError,
    InputError,
    UnsupportedFileTypeError,
)


@pytest.fixture
def handler():
    return InputHandler()


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "scan.png"
    Image.new("RGB", (40, 20), "white").save(path, format="PNG")
    return path


class TestInputHandler:
    """Tests for InputHandler.load and validation."""

    def test_load_pdf(self, handler, pdf_file):
        document = handler.load(pdf_file)

        assert document.media_type == "application/pdf"
        assert document.filename == "invoice.pdf"
        assert document.data.startswith(b"%PDF")
        assert document.size == pdf_file.stat().st_size

    def test_load_image(self, handler, png_file):
        document = handler.load(png_file)

        assert document.media_type == "image/png"
        assert document.metadata["width"] == 40
        assert document.metadata["height"] == 20

    def test_decoded_format_wins_over_extension(self, handler, tmp_path):
        path = tmp_path / "scan.jpg"
        Image.new("RGB", (8, 8)).save(path, format="PNG")

        assert handler.load(path).media_type == "image/png"

    @pytest.mark.parametrize("extension, media_type", [
        (".pdf", "application/pdf"),
        (".JPG", "image/jpeg"),
        (".jpeg", "image/jpeg"),
        (".webp", "image/webp"),
        (".tiff", "image/tiff"),
    ])
    def test_detect_media_type(self, handler, extension, media_type):
        assert handler.detect_media_type(f"invoice{extension}") == media_type

    def test_missing_file(self, handler, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            handler.load(tmp_path / "nope.pdf")

    def test_unsupported_extension(self, handler, tmp_path):
        path = tmp_path / "invoice.docx"
        path.write_bytes(b"PK\x03\x04")
        with pytest.raises(UnsupportedFileTypeError):
            handler.load(path)

    def test_directory_rejected(self, handler, tmp_path):
        with pytest.raises(InputError):
            handler.load(tmp_path)

    def test_empty_file(self, handler, tmp_path):
        path = tmp_path / "empty.pdf"
        path.touch()
        with pytest.raises(CorruptedFileError):
            handler.load(path)

    def test_pdf_without_header(self, handler, tmp_path):
        path = tmp_path / "fake.pdf"
        path.write_bytes(b"<html>not a pdf</html>")
        with pytest.raises(CorruptedFileError):
            handler.load(path)

    def test_corrupted_image(self, handler, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n this is not image data")
        with pytest.raises(CorruptedFileError):
            handler.load(path)

    def test_size_limit(self, png_file):
        handler = InputHandler(max_file_size_mb=0.00001)
        with pytest.raises(InputError, match="too large"):
            handler.load(png_file)


class TestImageProcessor:
    """Tests for ImageProcessor.inspect."""

    def test_inspect(self, png_file):
        metadata = ImageProcessor().inspect(png_file.read_bytes(), png_file)
        assert metadata == {"format": "PNG", "media_type": "image/png", "width": 40, "height": 20}

    def test_garbage(self):
        with pytest.raises(CorruptedFileError):
            ImageProcessor().inspect(b"garbage", "garbage.png")
