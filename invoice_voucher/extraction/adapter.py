"""
Extraction Adapters.

An extraction adapter turns an invoice document into a JSON-shaped invoice
record. Adapters are external collaborators of the voucher compiler: their
output is best-effort and untrusted, and any failure is terminal for the
pipeline.

Adapters are constructed explicitly and handed to the pipeline, so tests
can substitute a fake without touching process-wide state.

Available adapters:
    - GeminiExtractionAdapter: Google Gemini vision model via google-genai
    - JSONRecordAdapter: reads a previously extracted record from disk
"""

import os
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from google import genai
from google.genai import types

from config import get_config
from invoice_voucher.input_handler.handler import InputDocument
from invoice_voucher.utils.logger import get_logger
from invoice_voucher.utils.exceptions import (
    ConfigurationError,
    DocumentNotFoundError,
    ExtractionParseError,
    ExtractionServiceError
)
from .prompts import EXTRACTION_PROMPT
from .response_parser import parse_model_response

logger = get_logger(__name__)


class ExtractionAdapter(ABC):
    """Base class for anything that can turn a document into an invoice record."""

    name = "extraction"

    @abstractmethod
    def extract(self, document: InputDocument) -> Dict[str, Any]:
        """
        Extract a JSON-shaped invoice record from a document.

        Raises:
            ExtractionError: If no parseable record could be produced.
        """


class GeminiExtractionAdapter(ExtractionAdapter):
    """
    Invoice extraction with a Gemini vision model.

    The document bytes are sent inline with their media type, followed by
    the extraction prompt. The reply is parsed with parse_model_response.

    Attributes:
        model_name: Gemini model identifier
        temperature: Sampling temperature

    Example:
        >>> adapter = GeminiExtractionAdapter(api_key="...")
        >>> record = adapter.extract(document)
        >>> record["invoice_number"]
        'INV-42'
    """

    name = "gemini"
    DEFAULT_MODEL = "gemini-flash-latest"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: float = 0.0,
        client: Optional[Any] = None
    ) -> None:
        """
        Initialize the adapter.

        Args:
            api_key: Gemini API key. Required unless ``client`` is given.
            model_name: Model identifier.
            temperature: Sampling temperature.
            client: Pre-built client exposing ``models.generate_content``.
        """
        if client is None and not api_key:
            raise ConfigurationError("extraction.api_key", "Gemini API key is not configured")

        self.model_name = model_name or self.DEFAULT_MODEL
        self.temperature = temperature
        self._api_key = api_key
        self._client = client

        logger.info(f"GeminiExtractionAdapter initialized with model: {self.model_name}")

    @classmethod
    def from_config(cls, api_key: Optional[str] = None) -> 'GeminiExtractionAdapter':
        """
        Build an adapter from the extraction.* configuration keys.

        The API key is read from the environment variable named by
        extraction.api_key_env unless passed explicitly.
        """
        if api_key is None:
            api_key = os.getenv(get_config("extraction.api_key_env", "GEMINI_API_KEY"))

        return cls(
            api_key=api_key,
            model_name=get_config("extraction.model", cls.DEFAULT_MODEL),
            temperature=get_config("extraction.temperature", 0.0)
        )

    @property
    def client(self) -> Any:
        """Get or create the Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def extract(self, document: InputDocument) -> Dict[str, Any]:
        """
        Send the document to Gemini and parse the reply.

        Raises:
            ExtractionServiceError: If the API call fails.
            ExtractionParseError: If the reply holds no JSON object.
        """
        logger.info(f"Extracting invoice fields from {document.filename} with {self.model_name}")
        start_time = time.time()

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=[
                    types.Part.from_bytes(data=document.data, mime_type=document.media_type),
                    EXTRACTION_PROMPT
                ],
                config=types.GenerateContentConfig(
                    temperature=self.temperature,
                    response_mime_type="application/json"
                )
            )
        except Exception as e:
            logger.error(f"Gemini request failed for {document.filename}: {e}")
            raise ExtractionServiceError(self.model_name, str(e)) from e

        record = parse_model_response(response.text or "")

        logger.info(
            f"Extraction finished in {time.time() - start_time:.2f}s "
            f"({len(record)} top-level fields)"
        )
        return record


class JSONRecordAdapter(ExtractionAdapter):
    """
    Reads an already extracted invoice record from a JSON file.

    Used to re-compile vouchers without calling the vision model again.
    When constructed with a ``record_path`` the same file is returned for
    every document; otherwise the document itself is decoded as JSON.
    """

    name = "json"

    def __init__(self, record_path: Optional[Union[str, Path]] = None) -> None:
        self.record_path = Path(record_path) if record_path else None

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a record file.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            ExtractionParseError: If it is not a JSON object.
        """
        path = Path(path)
        if not path.is_file():
            raise DocumentNotFoundError(str(path))
        return parse_model_response(path.read_text(encoding='utf-8'))

    def extract(self, document: InputDocument) -> Dict[str, Any]:
        if self.record_path is not None:
            return self.load(self.record_path)

        try:
            text = document.data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ExtractionParseError(f"Document is not UTF-8 JSON: {e}") from e
        return parse_model_response(text)
