"""
Unit Tests - Confidence scoring
"""

import pytest

from warranty_invoice.extraction.extraction_result import InvoiceHeader, InvoiceRow
from warranty_invoice.postprocessor.scoring import ConfidenceScorer


@pytest.fixture
def scorer():
    return ConfidenceScorer()


FULL_HEADER = dict(
    invoice_number="2313044",
    invoice_date="03.11.2023",
    declared_total=3075.0,
    service_number="1045521",
    project_number="4400123",
    technician_name="Ola Nordmann",
    work_order_text="Bytte kompressor",
)


class TestConfidenceScorer:
    """Tests for the weighted rubric"""

    def test_header_only_gets_no_row_credit(self, scorer):
        header = InvoiceHeader(invoice_number="2313044", invoice_date="03.11.2023")

        # 40 of 115
        assert scorer.score(header, []) == 35

    def test_complete_invoice_scores_100(self, scorer):
        rows = [InvoiceRow(code="T1", line_total=1950.0)]

        assert scorer.score(InvoiceHeader(**FULL_HEADER), rows) == 100

    def test_empty_invoice_scores_zero(self, scorer):
        assert scorer.score(InvoiceHeader(), []) == 0

    def test_short_invoice_number_not_credited(self, scorer):
        assert not scorer.criteria(InvoiceHeader(invoice_number="12345"), [])['invoice_number']

    def test_invalid_date_not_credited(self, scorer):
        assert not scorer.criteria(InvoiceHeader(invoice_date="31.02.2023"), [])['invoice_date']

    def test_parts_only_rows_get_classification_bonus(self, scorer):
        met = scorer.criteria(InvoiceHeader(), [InvoiceRow(code="K-2201", line_total=550.0)])

        assert met['rows_present']
        assert not met['labor_row']
        assert met['classified_row']

    def test_travel_only_rows_get_no_classification_bonus(self, scorer):
        rows = [InvoiceRow(code="RT1", line_total=450.0), InvoiceRow(code="KM", line_total=125.0)]

        met = scorer.criteria(InvoiceHeader(), rows)

        assert met['rows_present']
        assert not met['classified_row']

    def test_parts_only_invoice_loses_only_labor_credit(self, scorer):
        rows = [InvoiceRow(code="K-2201", line_total=550.0)]

        # 110 of 115
        assert scorer.score(InvoiceHeader(**FULL_HEADER), rows) == 96

    def test_monotonic_as_fields_are_added(self, scorer):
        rows = [InvoiceRow(code="K-1", line_total=10.0)]
        present = {}
        previous = scorer.score(InvoiceHeader(), rows)

        for name, value in FULL_HEADER.items():
            present[name] = value
            current = scorer.score(InvoiceHeader(**present), rows)
            assert current >= previous
            previous = current

    def test_weights_override(self):
        scorer = ConfidenceScorer(weights={'invoice_number': 0, 'invoice_date': 0})
        header = InvoiceHeader(invoice_number="2313044", invoice_date="03.11.2023")

        assert scorer.score(header, []) == 0
