"""
Unit Tests - Cost classification
"""

import random

import pytest

from warranty_invoice.extraction.extraction_result import CostCategory, InvoiceRow
from warranty_invoice.postprocessor.classifier import CostClassifier


@pytest.fixture
def classifier():
    return CostClassifier()


class TestCostClassifier:
    """Tests for item-code based bucketing"""

    @pytest.mark.parametrize("code, category", [
        ("T1", CostCategory.LABOR),
        ("t2", CostCategory.LABOR),
        ("RT1", CostCategory.TRAVEL),
        ("KM", CostCategory.TRAVEL),
        ("km", CostCategory.TRAVEL),
        ("KMX", CostCategory.PARTS),
        ("TX", CostCategory.PARTS),
        ("K-2201", CostCategory.PARTS),
        ("RT", CostCategory.PARTS),
    ])
    def test_classify_row(self, classifier, code, category):
        assert classifier.classify_row(InvoiceRow(code=code, line_total=1.0)) is category

    def test_sample_breakdown(self, classifier):
        rows = [
            InvoiceRow(code="T1", line_total=1950.0),
            InvoiceRow(code="RT1", line_total=450.0),
            InvoiceRow(code="KM", line_total=125.0),
            InvoiceRow(code="K-2201", line_total=550.0),
        ]

        costs = classifier.classify(rows)

        assert costs.labor_cost == 1950.0
        assert costs.travel_cost == 575.0
        assert costs.parts_cost == 550.0
        assert (costs.labor_rows, costs.travel_rows, costs.parts_rows) == (1, 2, 1)

    def test_partition_over_random_rows(self, classifier):
        rng = random.Random(7)
        codes = ["T1", "T9", "RT1", "RT3", "KM", "K-1", "VENT", "TX", "R1", "KM2"]

        for _ in range(50):
            rows = [
                InvoiceRow(code=rng.choice(codes), line_total=float(rng.randint(0, 5000)))
                for _ in range(rng.randint(0, 12))
            ]

            costs = classifier.classify(rows)

            assert costs.row_count == len(rows)
            assert costs.total == sum(row.line_total for row in rows)

    def test_categorize_sets_category(self, classifier):
        rows = classifier.categorize([InvoiceRow(code="RT1"), InvoiceRow(code="X")])

        assert [row.category for row in rows] == [CostCategory.TRAVEL, CostCategory.PARTS]

    def test_custom_patterns(self):
        classifier = CostClassifier(labor_pattern=r"^ARB", kilometer_codes=["KJ"])

        assert classifier.classify_row(InvoiceRow(code="ARB1")) is CostCategory.LABOR
        assert classifier.classify_row(InvoiceRow(code="KJ")) is CostCategory.TRAVEL
        assert classifier.classify_row(InvoiceRow(code="T1")) is CostCategory.PARTS
