"""
Unit Tests - Bucket totals of parsed invoices agree with the printed total

Synthetic, internally consistent invoices are rendered the way OCR with
preserved interword spacing reads them, then parsed and classified.
"""

import random

import pytest

from warranty_invoice.layout_parser.parser import LayoutParser
from warranty_invoice.postprocessor.classifier import CostClassifier
from warranty_invoice.postprocessor.validators import CrossValidator

LABOR_CODES = ["T1", "T2", "T3"]
TRAVEL_CODES = ["RT1", "RT2", "KM"]
PART_CODES = ["K-2201", "VENT-12", "R404A", "FILTER-3", "3100457"]
DESCRIPTIONS = ["Arbeid montør", "Reisetid", "Kjøring", "Kompressor", "Ventil 1/2", "Kuldemedium"]


def kroner(cents):
    """Format cents the Norwegian way, e.g. 195000 -> '1 950,00'."""
    return f"{cents / 100:,.2f}".replace(",", " ").replace(".", ",")


def synthetic_invoice(rng):
    """Return (ocr text, expected row count, expected total in cents)."""
    lines = [
        "T. MYHRVOLD AS",
        "Faktura nr. 2313044",
        "Fakturadato: 03.11.2023",
        "Tekniker: Ola Nordmann",
        "",
        "Produktnr  Beskrivelse  Antall  Pris  Rabatt  Beløp",
    ]
    total_cents = 0
    row_count = rng.randint(1, 12)

    for _ in range(row_count):
        code = rng.choice(rng.choice([LABOR_CODES, TRAVEL_CODES, PART_CODES]))
        quantity = rng.randint(1, 40)
        price_cents = rng.randint(1, 5000) * 100 + rng.choice([0, 25, 50])
        columns = [code, rng.choice(DESCRIPTIONS), kroner(quantity * 100), kroner(price_cents)]

        if rng.random() < 0.3:
            discount = rng.choice([5, 10, 15, 25])
            line_cents = quantity * price_cents * (100 - discount) // 100
            columns.append(f"{discount} %")
        else:
            line_cents = quantity * price_cents

        columns.append(kroner(line_cents))
        lines.append("  ".join(columns))
        total_cents += line_cents

    lines.extend(["", f"Ordresum: {kroner(total_cents)}", ""])
    return "\n".join(lines), row_count, total_cents


class TestParsedBucketTotals:
    """Parser + classifier agree with the declared total on clean documents"""

    @pytest.mark.parametrize("seed", range(40))
    def test_buckets_sum_to_declared_total(self, seed, fixed_today):
        text, row_count, total_cents = synthetic_invoice(random.Random(seed))
        validator = CrossValidator(today=fixed_today)

        parsed = LayoutParser().parse(text)
        costs = CostClassifier().classify(parsed.rows)
        result = validator.validate(parsed.header, parsed.rows, costs)

        assert len(parsed.rows) == row_count
        assert parsed.header.declared_total == pytest.approx(total_cents / 100)
        assert abs(costs.total - parsed.header.declared_total) <= validator.row_tolerance
        assert not result.total_mismatch
        assert costs.row_count == row_count

    def test_generator_covers_discount_rows_and_every_bucket(self):
        texts = [synthetic_invoice(random.Random(seed))[0] for seed in range(40)]
        costs = [CostClassifier().classify(LayoutParser().parse(text).rows) for text in texts]

        assert any(" %  " in text for text in texts)
        assert any(c.labor_rows for c in costs)
        assert any(c.travel_rows for c in costs)
        assert any(c.parts_rows for c in costs)
