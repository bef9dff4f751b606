"""
Extraction Module for the Warranty Invoice Pipeline.

Holds the canonical data model and the extraction strategies.

Strategies and the pipeline are imported by module path so that lower
layers can depend on the data model without import cycles:

    from warranty_invoice.extraction.pipeline import InvoiceExtractionPipeline

Author: ML Engineering Team
"""

from .extraction_result import (
    CostBreakdown,
    CostCategory,
    ExtractionResult,
    ExtractionSource,
    InvoiceHeader,
    InvoiceRow,
    RawExtraction,
)
from .json_payload import find_json_object, parse_json_object

__all__ = [
    'CostBreakdown',
    'CostCategory',
    'ExtractionResult',
    'ExtractionSource',
    'InvoiceHeader',
    'InvoiceRow',
    'RawExtraction',
    'find_json_object',
    'parse_json_object',
]
