"""
Tesseract OCR Backend.

This module runs Tesseract (through pytesseract) with the settings tuned
for Norwegian supplier invoices: Norwegian + English language packs, a
single uniform text block, a character whitelist and preserved interword
spacing. Preserved spacing matters: the layout parser uses runs of two or
more spaces as the table column delimiter.

Two output modes:
    - string: image_to_string, spacing preserved by Tesseract itself
    - data: image_to_data, lines rebuilt from word boxes, wide
      horizontal gaps emitted as a double space

Requirements:
    - Tesseract OCR installed on the system, with the 'nor' traineddata
    - pytesseract Python package

Author: ML Engineering Team
"""

import time
from typing import Any, Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from warranty_invoice.config import get_config
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.exceptions import OcrEngineError
from .ocr_result import OcrLine, OcrText

# Initialize module logger
logger = get_logger(__name__)

ENGINE_NAME = "tesseract"


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language string (e.g., "nor+eng")
        psm: Page Segmentation Mode (6 = single uniform block)
        oem: OCR Engine Mode
        dpi: Resolution hint passed to Tesseract
        char_whitelist: Characters Tesseract may emit
        mode: 'string' or 'data'

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.extract(image)
        >>> print(text.line_count)
    """

    MODES = ('string', 'data')

    def __init__(self, mode: Optional[str] = None) -> None:
        """
        Initialize the Tesseract backend with configuration.

        Raises:
            OcrEngineError: If Tesseract is not installed or not in PATH.
        """
        self.language = get_config("ocr.tesseract.lang", "nor+eng")
        self.psm = get_config("ocr.tesseract.psm", 6)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.dpi = get_config("ocr.tesseract.dpi", 300)
        self.preserve_spaces = get_config("ocr.tesseract.preserve_interword_spaces", True)
        self.char_whitelist = get_config("ocr.tesseract.char_whitelist", "")
        self.column_gap_ratio = get_config("ocr.tesseract.column_gap_ratio", 1.0)
        self.mode = (mode or get_config("ocr.tesseract.mode", "string")).lower()

        if self.mode not in self.MODES:
            raise ValueError(f"Unknown Tesseract mode '{self.mode}'. Choose from {self.MODES}")

        self.version = self._check_engine()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem}, mode={self.mode})"
        )

    def _check_engine(self) -> str:
        """
        Verify that the Tesseract binary is reachable.

        Returns:
            Tesseract version string.

        Raises:
            OcrEngineError: If the binary cannot be invoked.
        """
        try:
            version = str(pytesseract.get_tesseract_version())
        except Exception as e:
            raise OcrEngineError(ENGINE_NAME, f"not installed or not in PATH: {e}") from e

        logger.info(f"Tesseract version: {version}")
        return version

    def build_config(self) -> str:
        """
        Build the Tesseract command line configuration string.

        pytesseract shell-splits this string, so the whitelist is quoted.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}",
            f"--dpi {self.dpi}",
        ]

        if self.preserve_spaces:
            config_parts.append("-c preserve_interword_spaces=1")

        if self.char_whitelist:
            config_parts.append(f'-c "tessedit_char_whitelist={self.char_whitelist}"')

        return ' '.join(config_parts)

    def extract(self, image: Image.Image) -> OcrText:
        """
        Recognize text in an image.

        Args:
            image: PIL Image to process.

        Returns:
            OcrText with one entry per recognized line.

        Raises:
            OcrEngineError: If Tesseract crashes.
        """
        start_time = time.time()
        config = self.build_config()
        logger.debug(f"Running Tesseract OCR (config: {config})")

        try:
            if self.mode == 'data':
                data = pytesseract.image_to_data(
                    image,
                    lang=self.language,
                    config=config,
                    output_type=pytesseract.Output.DICT
                )
                lines = self._lines_from_data(data)
            else:
                raw = pytesseract.image_to_string(image, lang=self.language, config=config)
                lines = tuple(OcrLine(text=line.rstrip()) for line in raw.splitlines())
        except Exception as e:
            logger.error(f"OCR processing failed: {e}")
            raise OcrEngineError(ENGINE_NAME, str(e)) from e

        processing_time = time.time() - start_time
        return OcrText(lines=lines, engine=ENGINE_NAME, processing_time=processing_time)

    def _lines_from_data(self, data: Dict[str, List[Any]]) -> Tuple[OcrLine, ...]:
        """
        Rebuild text lines from Tesseract word boxes.

        Words are grouped by (block, paragraph, line). Inside a line a
        horizontal gap wider than column_gap_ratio x line height becomes
        a double space, so table columns stay separable.
        """
        groups: Dict[Tuple[int, int, int], List[Tuple[int, int, int, int, str, float]]] = {}

        for i, text in enumerate(data['text']):
            if not text or not text.strip():
                continue

            w, h = data['width'][i], data['height'][i]
            if w <= 0 or h <= 0:
                continue

            key = (data['block_num'][i], data['par_num'][i], data['line_num'][i])
            conf = max(float(data['conf'][i]), 0.0)  # -1 for non-word elements
            groups.setdefault(key, []).append(
                (data['left'][i], data['top'][i], w, h, text.strip(), conf)
            )

        lines = []
        for key in sorted(groups):
            words = sorted(groups[key], key=lambda word: word[0])
            line_height = max(word[3] for word in words)

            parts = [words[0][4]]
            for prev, word in zip(words, words[1:]):
                gap = word[0] - (prev[0] + prev[2])
                separator = "  " if gap > self.column_gap_ratio * line_height else " "
                parts.append(separator + word[4])

            x1 = min(word[0] for word in words)
            y1 = min(word[1] for word in words)
            x2 = max(word[0] + word[2] for word in words)
            y2 = max(word[1] + word[3] for word in words)
            confidence = sum(word[5] for word in words) / len(words)

            lines.append(OcrLine(text="".join(parts), bbox=(x1, y1, x2, y2), confidence=confidence))

        return tuple(lines)
