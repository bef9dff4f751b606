"""
Cost Classifier Module.

Groups invoice lines into labor, travel and parts buckets by the
supplier's item-code convention:
    - T1, T2, ...   labor time
    - RT1, RT2, ... travel time
    - KM            driven kilometres (travel)
    - anything else parts and materials

The buckets form a strict partition: every row lands in exactly one.

Author: ML Engineering Team
"""

import re
from typing import Iterable, Optional, Sequence, Tuple

from warranty_invoice.config import get_config
from warranty_invoice.extraction.extraction_result import CostBreakdown, CostCategory, InvoiceRow
from warranty_invoice.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class CostClassifier:
    """
    Item-code based cost classifier.

    Attributes:
        labor_pattern: Regex matched against the upper-cased item code
        travel_pattern: Regex matched against the upper-cased item code
        kilometer_codes: Exact codes counted as travel

    Example:
        >>> classifier = CostClassifier()
        >>> classifier.classify_row(InvoiceRow(code="RT1", line_total=450.0))
        <CostCategory.TRAVEL: 'travel'>
    """

    def __init__(
        self,
        labor_pattern: Optional[str] = None,
        travel_pattern: Optional[str] = None,
        kilometer_codes: Optional[Iterable[str]] = None
    ) -> None:
        self.labor_pattern = re.compile(
            labor_pattern or get_config("classification.labor_pattern", r"^T\d")
        )
        self.travel_pattern = re.compile(
            travel_pattern or get_config("classification.travel_pattern", r"^RT\d")
        )
        codes = kilometer_codes if kilometer_codes is not None else get_config(
            "classification.kilometer_codes", ["KM"]
        )
        self.kilometer_codes = frozenset(code.upper() for code in codes)

    def classify_row(self, row: InvoiceRow) -> CostCategory:
        """Assign one row to its cost bucket."""
        code = row.code.strip().upper()

        if self.labor_pattern.match(code):
            return CostCategory.LABOR
        if self.travel_pattern.match(code) or code in self.kilometer_codes:
            return CostCategory.TRAVEL
        return CostCategory.PARTS

    def categorize(self, rows: Sequence[InvoiceRow]) -> Tuple[InvoiceRow, ...]:
        """Return copies of the rows with their category set."""
        return tuple(row.with_category(self.classify_row(row)) for row in rows)

    def classify(self, rows: Sequence[InvoiceRow]) -> CostBreakdown:
        """
        Sum line totals per bucket.

        Args:
            rows: Parsed invoice rows.

        Returns:
            CostBreakdown with per-bucket totals and row counts.
        """
        costs = {category: 0.0 for category in CostCategory}
        counts = {category: 0 for category in CostCategory}

        for row in rows:
            category = self.classify_row(row)
            costs[category] += row.line_total
            counts[category] += 1

        breakdown = CostBreakdown(
            labor_cost=costs[CostCategory.LABOR],
            travel_cost=costs[CostCategory.TRAVEL],
            parts_cost=costs[CostCategory.PARTS],
            labor_rows=counts[CostCategory.LABOR],
            travel_rows=counts[CostCategory.TRAVEL],
            parts_rows=counts[CostCategory.PARTS],
        )

        logger.debug(
            f"Classified {len(rows)} row(s): labor={breakdown.labor_cost:.2f} "
            f"({breakdown.labor_rows}), travel={breakdown.travel_cost:.2f} "
            f"({breakdown.travel_rows}), parts={breakdown.parts_cost:.2f} ({breakdown.parts_rows})"
        )
        return breakdown
