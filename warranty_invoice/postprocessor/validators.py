"""
Cross-Validation Module.

Checks a parsed invoice for arithmetic and plausibility problems:
    - Line items (or bucket totals) vs the declared total
    - Invoice date in the future or not a real date
    - Missing required fields
    - Project number shorter than expected
    - Per-row quantity x unit price vs printed line total

Validation never raises. OCR output is noisy, so every finding becomes
a human-readable warning for the operator reviewing the claim form.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from warranty_invoice.config import get_config
from warranty_invoice.extraction.extraction_result import (
    CostBreakdown,
    InvoiceHeader,
    InvoiceRow,
)
from warranty_invoice.utils.logger import get_logger
from .normalizers import DateNormalizer

# Initialize module logger
logger = get_logger(__name__)

NO_LINE_ITEMS = "No line items found"


@dataclass(frozen=True)
class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        warnings: Warning messages, in check order
        total_mismatch: Whether the total cross-check failed
    """
    warnings: Tuple[str, ...] = ()
    total_mismatch: bool = False

    @property
    def is_clean(self) -> bool:
        return not self.warnings


class CrossValidator:
    """
    Arithmetic and plausibility checks on a parsed invoice.

    Attributes:
        tolerance: Allowed difference for bucket totals reported by a service
        row_tolerance: Allowed difference for sums of printed line items
        required_fields: Header fields that must be present
        min_project_number_digits: Shorter project numbers are flagged
        check_row_arithmetic: Whether to compare qty x price per row

    Example:
        >>> validator = CrossValidator()
        >>> result = validator.validate(header, rows, costs)
        >>> for warning in result.warnings:
        ...     print(warning)
    """

    def __init__(
        self,
        tolerance: Optional[float] = None,
        row_tolerance: Optional[float] = None,
        required_fields: Optional[Iterable[str]] = None,
        min_project_number_digits: Optional[int] = None,
        check_row_arithmetic: Optional[bool] = None,
        today: Optional[Callable[[], date]] = None
    ) -> None:
        self.tolerance = tolerance if tolerance is not None else get_config(
            "validation.total_tolerance", 2.0
        )
        self.row_tolerance = row_tolerance if row_tolerance is not None else get_config(
            "validation.row_tolerance", 1.0
        )
        self.required_fields = tuple(required_fields or get_config(
            "validation.required_fields",
            ["invoice_number", "declared_total", "technician_name"]
        ))
        self.min_project_number_digits = min_project_number_digits or get_config(
            "validation.min_project_number_digits", 6
        )
        self.check_row_arithmetic = check_row_arithmetic if check_row_arithmetic is not None else \
            get_config("validation.check_row_arithmetic", True)
        self._today = today or date.today
        self._dates = DateNormalizer()

    def validate(
        self,
        header: InvoiceHeader,
        rows: Sequence[InvoiceRow],
        costs: CostBreakdown,
        costs_from_rows: Optional[bool] = None
    ) -> ValidationResult:
        """
        Run every check.

        Args:
            header: Invoice header.
            rows: Invoice rows (may be empty for AI results).
            costs: Bucket totals to compare with the declared total.
            costs_from_rows: Whether costs are sums of the printed line
                items; defaults to True whenever rows are present.

        Returns:
            ValidationResult with warnings; never raises.
        """
        warnings: List[str] = []

        if not rows:
            warnings.append(NO_LINE_ITEMS)

        if costs_from_rows is None:
            costs_from_rows = bool(rows)

        total_warning = self._check_total(header, rows, costs, costs_from_rows)
        if total_warning:
            warnings.append(total_warning)

        warnings.extend(self._check_date(header))
        warnings.extend(self._check_required(header))
        warnings.extend(self._check_project_number(header))

        if self.check_row_arithmetic:
            warnings.extend(self._check_rows(rows))

        if warnings:
            logger.info(f"Validation produced {len(warnings)} warning(s)")
            for warning in warnings:
                logger.debug(f"  - {warning}")

        return ValidationResult(warnings=tuple(warnings), total_mismatch=total_warning is not None)

    def _check_total(
        self,
        header: InvoiceHeader,
        rows: Sequence[InvoiceRow],
        costs: CostBreakdown,
        costs_from_rows: bool
    ) -> Optional[str]:
        declared = header.declared_total
        if declared is None or (not rows and costs.total == 0):
            return None

        # Sums of printed line items are exact; bucket totals from a service are rounded
        tolerance = self.row_tolerance if costs_from_rows else self.tolerance
        difference = abs(costs.total - declared)
        if difference <= tolerance:
            return None

        return (
            f"Line items total {costs.total:.2f} does not match declared total "
            f"{declared:.2f} (difference {difference:.2f})"
        )

    def _check_date(self, header: InvoiceHeader) -> List[str]:
        if not header.invoice_date:
            return []

        parsed = self._dates.parse(header.invoice_date)
        if parsed is None:
            return [f"Invoice date is not a valid date: {header.invoice_date}"]
        if parsed > self._today():
            return [f"Invoice date {header.invoice_date} is in the future"]
        return []

    def _check_required(self, header: InvoiceHeader) -> List[str]:
        warnings = []
        for field_name in self.required_fields:
            value = getattr(header, field_name, None)
            missing = value in (None, '')
            if field_name == 'declared_total' and not missing:
                missing = value <= 0
            if missing:
                warnings.append(f"Missing required field: {field_name}")
        return warnings

    def _check_project_number(self, header: InvoiceHeader) -> List[str]:
        project = header.project_number
        if project and len(project) < self.min_project_number_digits:
            return [f"Project number looks incomplete: {project}"]
        return []

    def _check_rows(self, rows: Sequence[InvoiceRow]) -> List[str]:
        warnings = []
        for row in rows:
            if row.quantity <= 0 or row.unit_price <= 0:
                continue
            expected = row.quantity * row.unit_price
            if abs(expected - row.line_total) > self.row_tolerance:
                warnings.append(
                    f"Row {row.code}: quantity x unit price {expected:.2f} differs from "
                    f"line total {row.line_total:.2f}"
                )
        return warnings
