"""
OCR Result Data Classes.

This module defines the read-only structures produced by the OCR adapter
and consumed by the layout parser.

Classes:
    OcrLine: One recognized line with optional geometry
    OcrText: Ordered lines for a whole page

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class OcrLine:
    """
    A single line of recognized text.

    Attributes:
        text: Raw line text, interword spacing preserved.
        bbox: Optional bounding box as (x1, y1, x2, y2) in pixels.
        confidence: Optional mean word confidence (0-100).

    Example:
        >>> line = OcrLine("T1  Arbeid  3,00  650,00  1 950,00")
    """
    text: str
    bbox: Optional[Tuple[int, int, int, int]] = None
    confidence: Optional[float] = None


@dataclass(frozen=True)
class OcrText:
    """
    Recognized text of one page as an ordered sequence of lines.

    Attributes:
        lines: Lines in reading order.
        engine: Name of the OCR engine that produced the text.
        processing_time: Engine wall time in seconds.
    """
    lines: Tuple[OcrLine, ...] = ()
    engine: str = "tesseract"
    processing_time: float = field(default=0.0, compare=False)

    @classmethod
    def from_string(cls, text: str, engine: str = "tesseract",
                    processing_time: float = 0.0) -> 'OcrText':
        """
        Build from plain text, one OcrLine per line break.

        Trailing whitespace is trimmed; empty lines are kept so that
        blank-line separated blocks survive.
        """
        lines = tuple(OcrLine(text=raw.rstrip()) for raw in text.splitlines())
        return cls(lines=lines, engine=engine, processing_time=processing_time)

    @property
    def text(self) -> str:
        """Full page text joined with newlines."""
        return "\n".join(line.text for line in self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def __iter__(self) -> Iterator[OcrLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)
