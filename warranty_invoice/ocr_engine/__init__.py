"""
OCR Engine Module for the Warranty Invoice Extraction Pipeline.

Wraps Tesseract and returns page text as ordered, read-only lines.

Author: ML Engineering Team
"""

from .engine import OCREngine
from .ocr_result import OcrLine, OcrText
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'OcrLine', 'OcrText', 'TesseractBackend']
