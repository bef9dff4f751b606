"""
Extraction Result Data Classes.

This module defines the canonical records every extraction strategy
converges to. All records are immutable and created fresh per call; the
caller owns persisting an ExtractionResult if desired.

Serialized field names are camelCase and stable, since the claim form
pre-fills its inputs from them.

Author: ML Engineering Team
"""

import json
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ExtractionSource(str, Enum):
    """Which strategy produced a result."""
    DETERMINISTIC = "DETERMINISTIC"
    AI_ASSISTANT = "AI_ASSISTANT"
    AI_VISION_FALLBACK = "AI_VISION_FALLBACK"


class CostCategory(str, Enum):
    """Cost bucket of an invoice line."""
    LABOR = "labor"
    TRAVEL = "travel"
    PARTS = "parts"


def camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class InvoiceRow:
    """
    One parsed table line.

    The printed line_total is authoritative over quantity x unit_price;
    OCR noise is likelier in the small quantity and price columns.

    Attributes:
        code: Supplier line-item code (e.g. "T1", "RT1", "KM", "100234")
        description: Free text description
        quantity: Quantity (>= 0)
        unit_price: Unit price (>= 0)
        line_total: Printed line total (>= 0)
        category: Cost bucket, assigned by the classifier
    """
    code: str
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    line_total: float = 0.0
    category: Optional[CostCategory] = None

    def with_category(self, category: CostCategory) -> 'InvoiceRow':
        return replace(self, category=category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'description': self.description,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'lineTotal': self.line_total,
            'category': self.category.value if self.category else None,
        }


@dataclass(frozen=True)
class InvoiceHeader:
    """
    Scalar invoice header fields.

    Every field is optional; absence is a valid state, never an error.
    The trailing hour, rate and kilometre fields pre-fill the claim's
    work section; they are reported by the AI tiers or summed from rows.
    """
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None
    service_number: Optional[str] = None
    project_number: Optional[str] = None
    customer_number: Optional[str] = None
    order_number: Optional[str] = None
    order_address: Optional[str] = None
    work_order_text: Optional[str] = None
    work_performed_text: Optional[str] = None
    technician_name: Optional[str] = None
    declared_total: Optional[float] = None
    customer_name: Optional[str] = None
    customer_org_number: Optional[str] = None
    kid_number: Optional[str] = None
    technician_hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    travel_time_hours: Optional[float] = None
    vehicle_km: Optional[float] = None

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys."""
        return {camel_case(name): value for name, value in asdict(self).items()}


@dataclass(frozen=True)
class CostBreakdown:
    """
    Line totals aggregated per cost bucket.

    Attributes:
        labor_cost: Sum of labor line totals
        travel_cost: Sum of travel line totals (kilometres included)
        parts_cost: Sum of all remaining line totals
        labor_rows / travel_rows / parts_rows: Row counts per bucket
    """
    labor_cost: float = 0.0
    travel_cost: float = 0.0
    parts_cost: float = 0.0
    labor_rows: int = 0
    travel_rows: int = 0
    parts_rows: int = 0

    @property
    def total(self) -> float:
        return self.labor_cost + self.travel_cost + self.parts_cost

    @property
    def row_count(self) -> int:
        return self.labor_rows + self.travel_rows + self.parts_rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            'laborCost': self.labor_cost,
            'travelCost': self.travel_cost,
            'partsCost': self.parts_cost,
            'totalCost': self.total,
        }


@dataclass(frozen=True)
class RawExtraction:
    """
    What a strategy produced before canonical mapping.

    Attributes:
        source: Strategy that produced the payload
        payload: Canonical JSON shape: header fields (camelCase),
                 totals {labour, travel, parts, grandTotal}, optional rows[]
        confidence: Confidence reported by the strategy, if any
    """
    source: ExtractionSource
    payload: Mapping[str, Any]
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ExtractionResult:
    """
    Canonical output of the extraction pipeline.

    This is the only object handed to the claim form. It is a proposal
    for a human to review, never an already validated record.

    Attributes:
        header: Invoice header fields
        costs: Cost breakdown per bucket
        rows: Parsed table lines
        confidence: Completeness score 0-100 (not a probability)
        warnings: Human-readable review notes
        source: Strategy that produced the result
        source_file: Name of the input document, if known
        extraction_timestamp: When extraction was performed

    Example:
        >>> result = pipeline.extract(document)
        >>> result.labor_cost, result.confidence
        (1950.0, 88)
        >>> print(result.to_json())
    """
    header: InvoiceHeader
    costs: CostBreakdown
    rows: Tuple[InvoiceRow, ...] = ()
    confidence: int = 0
    warnings: Tuple[str, ...] = ()
    source: ExtractionSource = ExtractionSource.DETERMINISTIC
    source_file: Optional[str] = None
    extraction_timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def invoice_number(self) -> Optional[str]:
        return self.header.invoice_number

    @property
    def declared_total(self) -> Optional[float]:
        return self.header.declared_total

    @property
    def labor_cost(self) -> float:
        return self.costs.labor_cost

    @property
    def travel_cost(self) -> float:
        return self.costs.travel_cost

    @property
    def parts_cost(self) -> float:
        return self.costs.parts_cost

    def with_warning(self, warning: str) -> 'ExtractionResult':
        """Return a copy with one more warning appended."""
        return replace(self, warnings=self.warnings + (warning,))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format with camelCase keys.

        Returns:
            Flat header and cost fields plus rows, confidence,
            warnings and provenance.
        """
        data = self.header.to_dict()
        data.update(self.costs.to_dict())
        data.update({
            'rows': [row.to_dict() for row in self.rows],
            'confidence': self.confidence,
            'warnings': list(self.warnings),
            'source': self.source.value,
            'sourceFile': self.source_file,
            'extractionTimestamp': self.extraction_timestamp,
        })
        return data

    def to_json(self, indent: int = 2) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __repr__(self) -> str:
        return (
            f"ExtractionResult("
            f"invoice={self.invoice_number}, "
            f"total={self.costs.total:.2f}, "
            f"confidence={self.confidence}, "
            f"source={self.source.value})"
        )
