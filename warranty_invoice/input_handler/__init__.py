"""
Input Handler Module for the Warranty Invoice Extraction Pipeline.

This module provides functionality for:
    - Loading invoice files into immutable RawDocument records
    - Rendering the first page of a PDF
    - Normalizing images for OCR (upscale, grayscale, binarize)

Supported formats:
    - Images: JPG, JPEG, PNG, TIFF, BMP
    - PDF (first page)

Author: ML Engineering Team
"""

from .handler import InputHandler, RawDocument
from .pdf_processor import PDFProcessor
from .image_processor import ImageNormalizer, NormalizedImage

__all__ = ['InputHandler', 'RawDocument', 'PDFProcessor', 'ImageNormalizer', 'NormalizedImage']
