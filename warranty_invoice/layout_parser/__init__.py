"""
Layout Parser Module for the Warranty Invoice Extraction Pipeline.

Regex and column heuristics for the known supplier layout:
    - Header field table (label -> pattern -> post-processor)
    - Table row reconstruction from space-delimited OCR lines
"""

from .header_fields import HEADER_FIELDS, HeaderField, extract_header_fields
from .table_rows import RowParser, is_row_candidate
from .parser import LayoutParser, ParsedInvoice

__all__ = [
    'HEADER_FIELDS',
    'HeaderField',
    'extract_header_fields',
    'RowParser',
    'is_row_candidate',
    'LayoutParser',
    'ParsedInvoice',
]
