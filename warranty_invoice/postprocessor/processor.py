"""
Canonical Mapper Module.

This module provides the CanonicalMapper that turns the raw output of
any extraction strategy into one validated ExtractionResult.

Operations:
    - Unify field names (labour/labor, vehicle -> travel, grandTotal)
    - Fill customer defaults for the fixed supplier relationship
    - Map and classify rows
    - Re-run the total cross-check and apply the discrepancy penalty
    - Clamp confidence to 0-100

Because every strategy goes through here, deterministic and AI results
end up on the same validated scale.

Author: ML Engineering Team
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from warranty_invoice.config import get_config
from warranty_invoice.extraction.extraction_result import (
    CostBreakdown,
    CostCategory,
    ExtractionResult,
    ExtractionSource,
    InvoiceHeader,
    InvoiceRow,
    RawExtraction,
    camel_case,
)
from warranty_invoice.utils.logger import get_logger
from warranty_invoice.utils.exceptions import ExtractionFailed
from .classifier import CostClassifier
from .normalizers import AmountNormalizer, DateNormalizer
from .validators import CrossValidator

# Initialize module logger
logger = get_logger(__name__)


# Canonical bucket -> accepted payload keys, first present wins
TOTALS_ALIASES = {
    'labor': ('labour', 'labor', 'laborCost', 'labor_cost', 'workCost'),
    'travel': ('travel', 'travelCost', 'travel_cost'),
    'vehicle': ('vehicle', 'vehicleCost', 'kilometers'),
    'parts': ('parts', 'partsCost', 'parts_cost', 'materials'),
    'grand_total': ('grandTotal', 'grand_total', 'total'),
}

ROW_ALIASES = {
    'code': ('code', 'productCode', 'itemCode', 'produktkode'),
    'description': ('description', 'beskrivelse', 'text'),
    'quantity': ('quantity', 'qty', 'antall'),
    'unit_price': ('unitPrice', 'unit_price', 'price', 'pris'),
    'line_total': ('lineTotal', 'line_total', 'totalPrice', 'amount', 'total', 'belop'),
}

# Extra header spellings seen in service responses
HEADER_ALIASES = {
    'technician_name': ('technician', 'tekniker'),
    'work_performed_text': ('workDescription', 'description'),
    'declared_total': ('totalAmount', 'ordresum'),
    'technician_hours': ('workHours', 'hours'),
    'hourly_rate': ('rate',),
    'travel_time_hours': ('travelHours',),
    'vehicle_km': ('km',),
}

# Work quantities; when a payload has none they are summed from the rows
WORK_FIELDS = ('technician_hours', 'hourly_rate', 'travel_time_hours', 'vehicle_km')

NUMERIC_FIELDS = ('declared_total',) + WORK_FIELDS
TEXT_FIELDS = tuple(name for name in InvoiceHeader.field_names() if name not in NUMERIC_FIELDS)


def _first(data: Mapping[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ''):
            return value
    return None


class CanonicalMapper:
    """
    Maps strategy output to the canonical ExtractionResult.

    Attributes:
        penalty: Confidence subtracted on a total mismatch
        penalty_floor: The penalty never pushes a score below this
        default_ai_confidence: Used when an AI tier reports none
        default_customer_name: Filled when the payload has none
        default_customer_org_number: Filled when the payload has none

    Example:
        >>> mapper = CanonicalMapper()
        >>> raw = RawExtraction(
        ...     source=ExtractionSource.AI_ASSISTANT,
        ...     payload={"totals": {"labour": 1950, "travel": 0,
        ...                         "parts": 1125, "grandTotal": 3075}})
        >>> mapper.map(raw).labor_cost
        1950.0
    """

    def __init__(
        self,
        classifier: Optional[CostClassifier] = None,
        validator: Optional[CrossValidator] = None,
        penalty: Optional[float] = None,
        penalty_floor: Optional[float] = None,
        default_ai_confidence: Optional[float] = None
    ) -> None:
        self.classifier = classifier or CostClassifier()
        self.validator = validator or CrossValidator()
        self.penalty = penalty if penalty is not None else get_config(
            "validation.discrepancy_penalty", 20
        )
        self.penalty_floor = penalty_floor if penalty_floor is not None else get_config(
            "validation.penalty_floor", 50
        )
        self.default_ai_confidence = default_ai_confidence if default_ai_confidence is not None \
            else get_config("ai.default_confidence", 85)
        self.default_customer_name = get_config("defaults.customer_name", "")
        self.default_customer_org_number = get_config("defaults.customer_org_number", "")

        self._amounts = AmountNormalizer()
        self._dates = DateNormalizer()

    def map(self, raw: RawExtraction, source_file: Optional[str] = None) -> ExtractionResult:
        """
        Map a raw extraction to an ExtractionResult.

        Args:
            raw: Strategy output in the canonical JSON shape.
            source_file: Name of the input document, for provenance.

        Returns:
            Validated ExtractionResult.

        Raises:
            ExtractionFailed: If the payload has no totals object.
        """
        payload = raw.payload
        totals = payload.get('totals') if isinstance(payload, Mapping) else None
        if not isinstance(totals, Mapping):
            raise ExtractionFailed(raw.source.value, "response has no totals object")

        rows = self.classifier.categorize(self._map_rows(payload.get('rows')))
        header = self._map_header(payload, totals, rows)
        costs, bucket_totals_given = self._map_costs(totals, rows)

        # Deterministic bucket totals are the row sums themselves
        costs_from_rows = bool(rows) and (
            raw.source is ExtractionSource.DETERMINISTIC or not bucket_totals_given
        )
        validation = self.validator.validate(header, rows, costs, costs_from_rows)

        confidence = self._initial_confidence(raw)
        if validation.total_mismatch:
            penalized = self.apply_penalty(confidence)
            logger.warning(
                f"Total mismatch on {raw.source.value} result, "
                f"confidence {confidence} -> {penalized}"
            )
            confidence = penalized

        result = ExtractionResult(
            header=header,
            costs=costs,
            rows=rows,
            confidence=confidence,
            warnings=validation.warnings,
            source=raw.source,
            source_file=source_file,
        )

        logger.info(
            f"Mapped {raw.source.value} result: invoice={header.invoice_number}, "
            f"total={costs.total:.2f}, confidence={confidence}, warnings={len(result.warnings)}"
        )
        return result

    def apply_penalty(self, confidence: int) -> int:
        """
        Reduce confidence after a total mismatch.

        The result is floored at penalty_floor, but a score already below
        the floor is never raised.
        """
        return int(max(confidence - self.penalty, min(confidence, self.penalty_floor)))

    def _initial_confidence(self, raw: RawExtraction) -> int:
        confidence = raw.confidence
        if confidence is None:
            confidence = self._amounts.to_float(raw.payload.get('confidence'))
        if confidence is None:
            confidence = self.default_ai_confidence
        return int(round(min(max(float(confidence), 0.0), 100.0)))

    def _map_header(
        self,
        payload: Mapping[str, Any],
        totals: Mapping[str, Any],
        rows: Tuple[InvoiceRow, ...] = ()
    ) -> InvoiceHeader:
        values: Dict[str, Any] = {}

        for name in TEXT_FIELDS:
            value = _first(payload, (camel_case(name), name) + HEADER_ALIASES.get(name, ()))
            values[name] = str(value).strip() if value is not None else None

        if values['invoice_date']:
            parsed = self._dates.parse(values['invoice_date'])
            if parsed is not None:
                values['invoice_date'] = self._dates.format(parsed)

        if values['customer_org_number']:
            values['customer_org_number'] = ''.join(
                ch for ch in values['customer_org_number'] if ch.isdigit()
            ) or None

        declared = self._amounts.to_float(
            _first(payload, ('declaredTotal', 'declared_total') + HEADER_ALIASES['declared_total'])
        )
        if declared is None:
            declared = self._amounts.to_float(_first(totals, TOTALS_ALIASES['grand_total']))
        values['declared_total'] = declared

        from_rows = self._work_quantities(rows)
        for name in WORK_FIELDS:
            value = _first(payload, (camel_case(name), name) + HEADER_ALIASES.get(name, ()))
            quantity = self._amounts.to_float(value)
            if quantity is None or quantity <= 0:
                quantity = from_rows[name]
            values[name] = quantity

        if not values['customer_name'] and self.default_customer_name:
            values['customer_name'] = self.default_customer_name
        if not values['customer_org_number'] and self.default_customer_org_number:
            values['customer_org_number'] = self.default_customer_org_number

        return InvoiceHeader(**{
            name: (value if value != '' else None) for name, value in values.items()
        })

    def _map_rows(self, raw_rows: Any) -> Tuple[InvoiceRow, ...]:
        if not isinstance(raw_rows, list):
            return ()

        rows: List[InvoiceRow] = []
        for item in raw_rows:
            if not isinstance(item, Mapping):
                continue

            code = _first(item, ROW_ALIASES['code'])
            if code is None:
                continue

            rows.append(InvoiceRow(
                code=str(code).strip(),
                description=str(_first(item, ROW_ALIASES['description']) or '').strip(),
                quantity=self._amounts.to_non_negative(_first(item, ROW_ALIASES['quantity'])),
                unit_price=self._amounts.to_non_negative(_first(item, ROW_ALIASES['unit_price'])),
                line_total=self._amounts.to_non_negative(_first(item, ROW_ALIASES['line_total'])),
            ))

        return tuple(rows)

    def _map_costs(
        self,
        totals: Mapping[str, Any],
        rows: Tuple[InvoiceRow, ...]
    ) -> Tuple[CostBreakdown, bool]:
        """Return the cost breakdown and whether bucket totals were given."""
        from_rows = self.classifier.classify(rows)

        def bucket(name: str) -> Optional[float]:
            value = _first(totals, TOTALS_ALIASES[name])
            return None if value is None else self._amounts.to_non_negative(value)

        labor, travel, vehicle, parts = (
            bucket(name) for name in ('labor', 'travel', 'vehicle', 'parts')
        )

        if labor is None and travel is None and vehicle is None and parts is None:
            return from_rows, False

        return CostBreakdown(
            labor_cost=labor or 0.0,
            travel_cost=(travel or 0.0) + (vehicle or 0.0),
            parts_cost=parts or 0.0,
            labor_rows=from_rows.labor_rows,
            travel_rows=from_rows.travel_rows,
            parts_rows=from_rows.parts_rows,
        ), True

    def _work_quantities(self, rows: Tuple[InvoiceRow, ...]) -> Dict[str, Optional[float]]:
        """Hours, rate and kilometres read off categorized rows."""
        labor = [row for row in rows if row.category is CostCategory.LABOR]
        kilometers = [
            row for row in rows
            if row.code.strip().upper() in self.classifier.kilometer_codes
        ]
        travel = [
            row for row in rows
            if row.category is CostCategory.TRAVEL and row not in kilometers
        ]

        def positive_sum(selected: List[InvoiceRow]) -> Optional[float]:
            total = sum(row.quantity for row in selected)
            return total if total > 0 else None

        rate = labor[0].unit_price if labor else 0.0
        return {
            'technician_hours': positive_sum(labor),
            'hourly_rate': rate if rate > 0 else None,
            'travel_time_hours': positive_sum(travel),
            'vehicle_km': positive_sum(kilometers),
        }
