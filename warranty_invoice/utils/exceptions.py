"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the invoice
extraction pipeline. Only structurally fatal conditions are exceptions;
everything that can be expressed as a warning on the result is.

Exception Hierarchy:
    InvoiceExtractionError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── DocumentNotFoundError
    │   └── DecodeError
    ├── OCRError
    │   └── OcrEngineError
    └── ExtractionError
        └── ExtractionFailed
"""


class InvoiceExtractionError(Exception):
    """
    Root of every error raised by the extraction pipeline.

    The CLI catches this type to skip a bad document and keep going
    with the rest of a batch.

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


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceExtractionError):
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
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class DocumentNotFoundError(InputError):
    """Raised when an input file cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class DecodeError(InputError):
    """
    Raised when document bytes cannot be decoded into an image.

    Not transient: retrying the same bytes will fail the same way.
    """

    def __init__(self, source: str, reason: str = None):
        message = f"Unreadable or corrupt document: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceExtractionError):
    """Base exception for OCR-related errors."""
    pass


class OcrEngineError(OCRError):
    """
    Raised when the OCR engine is unavailable, crashes, or returns no text.

    Fatal for the current request; the whole request may be retried later.
    """

    def __init__(self, engine_name: str, reason: str = None):
        message = f"OCR engine failure: {engine_name}"
        details = {"engine": engine_name, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceExtractionError):
    """Base exception for extraction strategy errors."""
    pass


class ExtractionFailed(ExtractionError):
    """
    Raised when an extraction strategy produced no usable totals.

    The orchestrator falls through to the next strategy; raised to the
    caller only when no strategy produced a result.
    """

    def __init__(self, strategy: str, reason: str = None):
        message = f"Extraction failed: {strategy}"
        details = {"strategy": strategy, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceExtractionError',
    'InputError',
    'UnsupportedFileTypeError',
    'DocumentNotFoundError',
    'DecodeError',
    'OCRError',
    'OcrEngineError',
    'ExtractionError',
    'ExtractionFailed',
]
