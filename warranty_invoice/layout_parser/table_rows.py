"""
Table Row Reconstruction.

After OCR with preserved interword spacing, the supplier's line-item
table survives as lines whose columns are separated by runs of two or
more spaces. This module turns such lines back into InvoiceRow records.

Column layout (right aligned numbers):
    code | description ... | quantity | unit price | line total

Some invoices carry an extra discount column, which yields exactly six
columns. The six-column rule is tuned to one supplier's layout and is
configurable (parser.discount_column_count).

Author: ML Engineering Team
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from warranty_invoice.config import get_config
from warranty_invoice.extraction.extraction_result import InvoiceRow
from warranty_invoice.postprocessor.normalizers import AmountNormalizer
from warranty_invoice.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

COLUMN_DELIMITER = re.compile(r' {2,}|\t+')
DISCOUNT_COLUMN = re.compile(r'^\d+(?:[.,]\d+)?\s*%$')

DEFAULT_COLUMN_TITLES = (
    "kode", "varenr", "varenummer", "produktnr", "artikkel", "beskrivelse",
    "tekst", "antall", "pris", "enhetspris", "rabatt", "sum", "beløp",
    "code", "description", "qty", "quantity", "price", "amount",
)


def is_row_candidate(line: str) -> bool:
    """A line can be a table row only if it has a column gap."""
    return COLUMN_DELIMITER.search(line.strip()) is not None


class RowParser:
    """
    Reconstructs table rows from OCR lines.

    Attributes:
        column_titles: Lowercase words that mark a column title line
        discount_column_count: Column count that implies a discount column
        min_columns: Fewest columns a row may have

    Example:
        >>> parser = RowParser()
        >>> parser.parse_line("T1  Arbeid montør  3,00  650,00  1 950,00")
        InvoiceRow(code='T1', description='Arbeid montør', quantity=3.0, ...)
    """

    def __init__(
        self,
        column_titles: Optional[Iterable[str]] = None,
        discount_column_count: Optional[int] = None,
        min_columns: int = 4
    ) -> None:
        titles = column_titles or get_config("parser.column_titles", DEFAULT_COLUMN_TITLES)
        self.column_titles = frozenset(title.lower() for title in titles)
        self.discount_column_count = discount_column_count or get_config(
            "parser.discount_column_count", 6
        )
        self.min_columns = min_columns
        self._amounts = AmountNormalizer()

    def split_columns(self, line: str) -> List[str]:
        """
        Split a line on runs of 2+ spaces, dropping a discount column.

        With exactly discount_column_count columns, a "<number> %" column
        is removed if present, otherwise the third-from-last column.
        """
        columns = [col.strip() for col in COLUMN_DELIMITER.split(line.strip()) if col.strip()]

        if len(columns) == self.discount_column_count:
            for index, column in enumerate(columns):
                if DISCOUNT_COLUMN.match(column):
                    del columns[index]
                    break
            else:
                del columns[-3]

        return columns

    def is_title_line(self, line: str) -> bool:
        words = line.split()
        if not words:
            return False
        return words[0].lower().strip('.:') in self.column_titles

    def parse_line(self, line: str) -> Optional[InvoiceRow]:
        """
        Parse one OCR line into a row.

        Returns:
            InvoiceRow, or None if the line is not an acceptable row.
        """
        if not is_row_candidate(line) or self.is_title_line(line):
            return None

        columns = self.split_columns(line)
        if len(columns) < self.min_columns:
            return None

        code = columns[0]
        description = ' '.join(columns[1:-3])
        quantity, unit_price, line_total = (
            self._amounts.to_non_negative(value) for value in columns[-3:]
        )

        if not code or (unit_price <= 0 and line_total <= 0):
            return None

        return InvoiceRow(
            code=code,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            line_total=line_total,
        )

    def parse(self, lines: Sequence[str]) -> Tuple[InvoiceRow, ...]:
        """Parse every acceptable row, in document order."""
        rows = []
        for line in lines:
            row = self.parse_line(line)
            if row is not None:
                rows.append(row)

        logger.debug(f"Reconstructed {len(rows)} table row(s) from {len(lines)} line(s)")
        return tuple(rows)
