"""
Deterministic Layout Parser.

Turns OCR text of a known supplier layout into header fields and table
rows using only regular expressions and column heuristics. It never
calls a network service, which makes it the fast, free, offline first
choice of the pipeline.

Usage:
    from warranty_invoice.layout_parser import LayoutParser

    parsed = LayoutParser().parse(ocr_text)
    print(parsed.header.invoice_number, len(parsed.rows))

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from warranty_invoice.extraction.extraction_result import InvoiceHeader, InvoiceRow
from warranty_invoice.ocr_engine.ocr_result import OcrText
from warranty_invoice.utils.logger import get_logger
from .header_fields import extract_header_fields
from .table_rows import RowParser

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class ParsedInvoice:
    """Header and rows read from one page."""
    header: InvoiceHeader
    rows: Tuple[InvoiceRow, ...] = ()


class LayoutParser:
    """
    Offline header and table parser.

    Values are accumulated locally and built into immutable records at
    the end, so a failure half way never leaks a half-built header.

    Example:
        >>> parser = LayoutParser()
        >>> parsed = parser.parse(OcrText.from_string("Faktura nr. 2313044"))
        >>> parsed.header.invoice_number
        '2313044'
    """

    def __init__(self, row_parser: Optional[RowParser] = None) -> None:
        self.row_parser = row_parser or RowParser()

    def parse(self, ocr_text: Union[OcrText, str]) -> ParsedInvoice:
        """
        Parse OCR text into header and rows.

        Args:
            ocr_text: OcrText (or plain text) of one page.

        Returns:
            ParsedInvoice; missing fields are None, never an error.
        """
        if isinstance(ocr_text, str):
            ocr_text = OcrText.from_string(ocr_text)

        values = extract_header_fields(ocr_text.text)
        rows = self.row_parser.parse([line.text for line in ocr_text.lines])

        header = InvoiceHeader(**{
            name: (value if value != '' else None) for name, value in values.items()
        })

        found = [name for name, value in values.items() if value not in ('', None)]
        logger.info(f"Layout parser found {len(found)} header field(s) and {len(rows)} row(s)")
        logger.debug(f"Header fields found: {found}")

        return ParsedInvoice(header=header, rows=rows)
