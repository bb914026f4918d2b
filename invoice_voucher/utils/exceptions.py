"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the invoice to
voucher converter. Every failure raised by the system is typed by kind so
that the calling layer (CLI, a web service) can translate it into its own
response without inspecting messages.

Exception Hierarchy:
    InvoiceVoucherError (base)
    ├── ConfigurationError
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── DocumentNotFoundError
    │   └── CorruptedFileError
    ├── ExtractionError
    │   ├── ExtractionServiceError
    │   └── ExtractionParseError
    ├── CompilationError
    │   └── MalformedInvoiceError
    └── OutputError
        ├── SerializationError
        └── OutputWriteError
"""

from typing import Any, Optional


class InvoiceVoucherError(Exception):
    """
    Base exception for all converter errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(InvoiceVoucherError):
    """Raised when required configuration (e.g. an API key) is missing or invalid."""

    def __init__(self, setting: str, reason: str = None):
        message = f"Invalid configuration: {setting}"
        details = {"setting": setting, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceVoucherError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".pdf", ".jpg"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": sorted(supported_types)}
        super().__init__(message, details)


class DocumentNotFoundError(InputError):
    """Raised when the input document cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file appears to be corrupted, empty or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceVoucherError):
    """
    Base exception for extraction adapter failures.

    An extraction failure is terminal for the pipeline: the voucher
    compiler is never invoked.
    """
    pass


class ExtractionServiceError(ExtractionError):
    """Raised when the extraction service call itself fails."""

    def __init__(self, service: str, reason: str = None):
        message = f"Extraction service call failed: {service}"
        details = {"service": service, "reason": reason}
        super().__init__(message, details)


class ExtractionParseError(ExtractionError):
    """Raised when the extraction service reply holds no parseable invoice record."""

    def __init__(self, reason: str, raw_response: Optional[str] = None):
        message = "Extraction failed to produce a valid JSON invoice record"
        details = {"reason": reason}
        if raw_response is not None:
            details["raw_response"] = raw_response[:500]
        super().__init__(message, details)


# =============================================================================
# COMPILATION ERRORS
# =============================================================================

class CompilationError(InvoiceVoucherError):
    """Base exception for voucher compilation errors."""
    pass


class MalformedInvoiceError(CompilationError):
    """
    Raised when an invoice record has a shape the compiler cannot use.

    Example:
        >>> raise MalformedInvoiceError("lineItems[0].amount", "abc", "not a number")
    """

    def __init__(self, field_path: str, value: Any = None, reason: str = None):
        self.field_path = field_path
        message = f"Malformed invoice record at '{field_path}'"
        if reason:
            message = f"{message}: {reason}"
        details = {"field": field_path, "value": repr(value), "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(InvoiceVoucherError):
    """Base exception for output handling errors."""
    pass


class SerializationError(OutputError):
    """Raised when the voucher document cannot be rendered to XML."""

    def __init__(self, reason: str = None):
        message = "Failed to serialize voucher document"
        details = {"reason": reason}
        super().__init__(message, details)


class OutputWriteError(OutputError):
    """Raised when an output file cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to write output file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceVoucherError',
    'ConfigurationError',
    'InputError',
    'UnsupportedFileTypeError',
    'DocumentNotFoundError',
    'CorruptedFileError',
    'ExtractionError',
    'ExtractionServiceError',
    'ExtractionParseError',
    'CompilationError',
    'MalformedInvoiceError',
    'OutputError',
    'SerializationError',
    'OutputWriteError',
]
