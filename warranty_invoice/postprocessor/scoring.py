"""
Confidence Scoring Module.

The confidence score is the share of expected signal found on the
invoice, as a percentage:

    score = round(achieved weight / maximum weight x 100)

It is a completeness measure, not a calibrated probability. Weights
live in settings.yaml under scoring.weights.

Author: ML Engineering Team
"""

from typing import Dict, Optional, Sequence

from warranty_invoice.config import get_config
from warranty_invoice.extraction.extraction_result import (
    CostBreakdown,
    InvoiceHeader,
    InvoiceRow,
)
from warranty_invoice.utils.logger import get_logger
from .classifier import CostClassifier
from .normalizers import DateNormalizer

# Initialize module logger
logger = get_logger(__name__)


DEFAULT_WEIGHTS = {
    'invoice_number': 20,
    'invoice_date': 20,
    'declared_total': 20,
    'service_number': 10,
    'project_number': 10,
    'technician_name': 10,
    'work_order_text': 10,
    'rows_present': 5,
    'labor_row': 5,
    'classified_row': 5,
}


class ConfidenceScorer:
    """
    Additive weighted rubric over header fields and rows.

    Attributes:
        weights: Criterion name -> weight
        min_invoice_number_length: Shortest invoice number that counts

    Example:
        >>> scorer = ConfidenceScorer()
        >>> scorer.score(InvoiceHeader(invoice_number="2313044",
        ...                            invoice_date="03.11.2023"), [])
        35
    """

    def __init__(
        self,
        weights: Optional[Dict[str, int]] = None,
        min_invoice_number_length: Optional[int] = None,
        classifier: Optional[CostClassifier] = None
    ) -> None:
        self.weights = dict(DEFAULT_WEIGHTS)
        self.weights.update(weights or get_config("scoring.weights", {}) or {})
        self.min_invoice_number_length = min_invoice_number_length or get_config(
            "scoring.min_invoice_number_length", 6
        )
        self.classifier = classifier or CostClassifier()
        self._dates = DateNormalizer()

    @property
    def max_score(self) -> int:
        return sum(self.weights.values())

    def criteria(
        self,
        header: InvoiceHeader,
        rows: Sequence[InvoiceRow],
        costs: Optional[CostBreakdown] = None
    ) -> Dict[str, bool]:
        """Evaluate every rubric criterion."""
        if costs is None:
            costs = self.classifier.classify(rows)

        return {
            'invoice_number': len(header.invoice_number or '') >= self.min_invoice_number_length,
            'invoice_date': self._dates.is_valid(header.invoice_date),
            'declared_total': (header.declared_total or 0) > 0,
            'service_number': bool(header.service_number),
            'project_number': bool(header.project_number),
            'technician_name': bool(header.technician_name),
            'work_order_text': bool(header.work_order_text or header.work_performed_text),
            'rows_present': len(rows) > 0,
            'labor_row': costs.labor_rows > 0,
            # Travel-only rows earn no classification credit
            'classified_row': costs.labor_rows + costs.parts_rows > 0,
        }

    def score(
        self,
        header: InvoiceHeader,
        rows: Sequence[InvoiceRow],
        costs: Optional[CostBreakdown] = None
    ) -> int:
        """
        Compute the 0-100 confidence score.

        Args:
            header: Parsed header.
            rows: Parsed rows.
            costs: Breakdown of the same rows; computed when omitted.

        Returns:
            Integer score 0-100.
        """
        if self.max_score <= 0:
            return 0

        met = self.criteria(header, rows, costs)
        achieved = sum(self.weights.get(name, 0) for name, ok in met.items() if ok)
        score = round(achieved / self.max_score * 100)

        logger.debug(f"Confidence {score} ({achieved}/{self.max_score}), missing: "
                     f"{[name for name, ok in met.items() if not ok]}")
        return score
