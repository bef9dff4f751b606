"""
Warranty Invoice Extraction - Source Package.

Turns a photographed or scanned supplier invoice into a structured,
confidence-scored record used to pre-fill a warranty claim form.

Modules:
    - input_handler: File loading, PDF rendering, image normalization
    - ocr_engine: Tesseract text recognition
    - layout_parser: Offline header and table parsing
    - postprocessor: Classification, scoring, validation, mapping
    - extraction: Data model, strategies and the fallback pipeline
    - utils: Logging, exceptions, helpers

Architecture:
    Input -> Normalize -> OCR -> Layout Parser --+
                                                 +-> Mapper -> Result
    Input -> Assistant tier -> Vision tier ------+
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'config',
    'input_handler',
    'ocr_engine',
    'layout_parser',
    'postprocessor',
    'extraction',
    'utils',
]
