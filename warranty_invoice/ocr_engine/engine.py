"""
Main OCR Engine Module.

This module provides the OCREngine class, the adapter between the
normalized page image and the text recognizer. It owns the one rule the
rest of the pipeline relies on: a successful call always returns some
text. Empty output is an engine failure, not an empty invoice.

Usage:
    from warranty_invoice.ocr_engine import OCREngine

    engine = OCREngine()
    ocr_text = engine.recognize(normalized_image)
    print(ocr_text.text)

Author: ML Engineering Team
"""

from typing import Optional, Union

from PIL import Image

from warranty_invoice.config import get_config
from warranty_invoice.input_handler.image_processor import NormalizedImage
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.exceptions import OcrEngineError
from .ocr_result import OcrText
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Unified interface for text recognition.

    The backend is created lazily on first use so that constructing a
    pipeline never shells out to Tesseract.

    Attributes:
        backend_name: Name of the configured OCR backend

    Example:
        >>> engine = OCREngine()
        >>> ocr_text = engine.recognize(image)
        >>> for line in ocr_text:
        ...     print(line.text)
    """

    SUPPORTED_BACKENDS = ['tesseract']

    def __init__(self, backend: Optional[TesseractBackend] = None) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: Pre-built backend. If None, one is created from
                    configuration on first use.
        """
        self.backend_name = get_config("ocr.engine", "tesseract")
        if self.backend_name == "pytesseract":
            self.backend_name = "tesseract"

        if self.backend_name not in self.SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported OCR backend '{self.backend_name}'. "
                f"Choose from {self.SUPPORTED_BACKENDS}"
            )

        self._backend = backend

    @property
    def backend(self) -> TesseractBackend:
        if self._backend is None:
            self._backend = TesseractBackend()
        return self._backend

    def recognize(self, image: Union[NormalizedImage, Image.Image]) -> OcrText:
        """
        Recognize the text of a normalized page.

        Args:
            image: NormalizedImage or PIL Image.

        Returns:
            OcrText with at least one non-blank line.

        Raises:
            OcrEngineError: If the engine is unavailable, crashes, or
                           returns no text.
        """
        if isinstance(image, NormalizedImage):
            image = image.to_pil()

        ocr_text = self.backend.extract(image)

        if ocr_text.is_empty:
            logger.error("OCR returned no text")
            raise OcrEngineError(self.backend_name, "zero-length output")

        logger.info(
            f"OCR completed: {ocr_text.line_count} lines "
            f"({ocr_text.processing_time:.2f}s)"
        )
        return ocr_text
