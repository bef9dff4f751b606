"""
Data Normalizers Module.

This module provides normalization functions for the Norwegian number
and date conventions printed on supplier invoices:
    - Amounts: "3 025,00", "1.950,00", "750,-", "kr 3075"
    - Dates: DD.MM.YYYY

Author: ML Engineering Team
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser

from warranty_invoice.config import get_config
from warranty_invoice.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class DateNormalizer:
    """
    Parses invoice dates.

    The printed format is DD.MM.YYYY. Other day-first spellings are
    accepted through dateutil as a fallback.

    Attributes:
        input_formats: Explicit strptime formats tried first
        output_format: Format used by format()

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.parse("03.11.2023")
        datetime.date(2023, 11, 3)
        >>> normalizer.is_valid("31.02.2023")
        False
    """

    DEFAULT_INPUT_FORMATS = ["%d.%m.%Y", "%d.%m.%y", "%d/%m/%Y", "%Y-%m-%d"]

    def __init__(self) -> None:
        """Initialize the date normalizer with configuration."""
        self.input_formats = get_config(
            "postprocessing.date.input_formats", self.DEFAULT_INPUT_FORMATS
        )
        self.output_format = get_config("postprocessing.date.output_format", "%d.%m.%Y")

    def parse(self, date_str: Optional[str]) -> Optional[date]:
        """
        Parse a date string.

        Args:
            date_str: Date text such as "03.11.2023".

        Returns:
            Parsed date, or None if the text is not a real calendar date.
        """
        if not date_str:
            return None

        date_str = ' '.join(date_str.split())

        for fmt in self.input_formats:
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue

        # Impossible dates like 31.02.2023 must stay invalid
        if re.fullmatch(r'\d{1,2}[./]\d{1,2}[./]\d{2,4}', date_str):
            return None

        try:
            return date_parser.parse(date_str, dayfirst=True, fuzzy=False).date()
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date: {date_str}")
            return None

    def is_valid(self, date_str: Optional[str]) -> bool:
        """Check if a string is a real calendar date."""
        return self.parse(date_str) is not None

    def format(self, value: date) -> str:
        """Format a date in the invoice convention."""
        return value.strftime(self.output_format)


class AmountNormalizer:
    """
    Normalizes Norwegian currency/amount strings to floats.

    Rules:
        - Whitespace (including thousands spaces) is removed
        - Currency markers (kr, NOK) and a trailing ",-" are dropped
        - If both '.' and ',' occur, the rightmost is the decimal mark
        - A lone ',' is the decimal mark

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_float("3 025,00")
        3025.0
        >>> normalizer.to_float("1.950,00")
        1950.0
        >>> normalizer.to_float("abc") is None
        True
    """

    CURRENCY_PATTERN = re.compile(r'\b(?:NOK|kr)\b\.?', re.IGNORECASE)

    def normalize(self, amount_str: Union[str, int, float, None]) -> Optional[str]:
        """
        Normalize an amount string to a dot-decimal numeric string.

        Args:
            amount_str: Input amount (e.g., "kr 3 025,00").

        Returns:
            Numeric string (e.g., "3025.00") or None.
        """
        if amount_str is None:
            return None
        if isinstance(amount_str, (int, float)):
            return f"{float(amount_str):.2f}"
        if not isinstance(amount_str, str):
            return None

        text = self.CURRENCY_PATTERN.sub('', amount_str)
        text = re.sub(r'[,.]-$', '', text.strip())
        text = re.sub(r'\s+', '', text)

        if not text:
            return None

        if ',' in text and '.' in text:
            if text.rfind(',') > text.rfind('.'):
                text = text.replace('.', '')
            else:
                text = text.replace(',', '')
        text = text.replace(',', '.')

        # Keep the last dot as the decimal mark
        if text.count('.') > 1:
            head, _, tail = text.rpartition('.')
            text = head.replace('.', '') + '.' + tail

        try:
            value = float(text)
        except ValueError:
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return None

        return f"{value:.2f}"

    def to_float(self, amount_str: Union[str, int, float, None]) -> Optional[float]:
        """
        Convert an amount to float.

        Returns:
            Float value or None when the text is not a number.
        """
        normalized = self.normalize(amount_str)
        if normalized is None:
            return None
        return float(normalized)

    def to_non_negative(self, amount_str: Union[str, int, float, None]) -> float:
        """
        Convert a table cell to a number >= 0.

        Unparseable text becomes 0.0 and negative values are clamped.
        """
        value = self.to_float(amount_str)
        if value is None or value < 0:
            return 0.0
        return value
