"""
Header Field Table.

Invoice header fields are read by a flat, ordered table of
(field name, pattern, post-processor) entries evaluated once per
document. Several entries may target the same field; the first entry
that matches wins, so more specific labels are listed before generic
ones. Adding a field is a one-line change.

Labels follow the supplier's Norwegian layout with English fallbacks.
Separators are [ \\t] rather than \\s so that a label never captures a
value from the following line.

Author: ML Engineering Team
"""

import re
from typing import Any, Callable, Dict, NamedTuple, Optional, Pattern

from warranty_invoice.postprocessor.normalizers import AmountNormalizer


_amounts = AmountNormalizer()

# Optional "nr" / "nr." / "nummer" / "no" suffix followed by an optional colon
_NR = r'[ \t]*(?:nr|nummer|no)?\.?[ \t]*:?[ \t]*'
# Label followed by an optional colon
_COLON = r'[ \t]*:?[ \t]*'
# Value up to end of line or the next column gap
_CELL = r'([^\n]+?)(?=[ \t]{2,}|[ \t]*$)'
# Amount such as "3 075,00", "3075.00", "1.950,-"
_AMOUNT = r'(?:kr\.?|NOK)?[ \t]*(\d+(?:[ .]\d{3})*(?:[,.]\d{1,2}|,-)?)'
# A line made only of capitals, e.g. "MATERIELL" or "DELER OG UTSTYR:"
_CAPS_HEADER = r'\n[ \t]*[A-ZÆØÅ][A-ZÆØÅ \t]{2,}:?[ \t]*(?=\n|\Z)'


def _text(value: str) -> str:
    return value.strip()


def _collapse(value: str) -> str:
    return ' '.join(value.split())


def _digits(value: str) -> str:
    return re.sub(r'\D', '', value)


def _amount(value: str) -> Optional[float]:
    return _amounts.to_float(value)


class HeaderField(NamedTuple):
    """
    One header extractor.

    Attributes:
        name: InvoiceHeader attribute the value is stored in
        pattern: Compiled regex; group 1 is the raw value
        post: Post-processor applied to the raw value
        numeric: Missing numeric values are None, text values ''
    """
    name: str
    pattern: Pattern
    post: Callable[[str], Any] = _text
    numeric: bool = False

    def extract(self, text: str) -> Any:
        """
        Return the first match, post-processed.

        Missing fields are never fatal: an absent text field is '' and
        an absent numeric field is None.
        """
        match = self.pattern.search(text)
        if match is None:
            return None if self.numeric else ''

        value = self.post(match.group(1))
        if value in ('', None):
            return None if self.numeric else ''
        return value


def _field(name: str, regex: str, post: Callable[[str], Any] = _text,
           flags: int = re.IGNORECASE | re.MULTILINE, numeric: bool = False) -> HeaderField:
    return HeaderField(name, re.compile(regex, flags), post, numeric)


HEADER_FIELDS = (
    _field('invoice_number', r'\b(?:Faktura|Invoice)' + _NR + r'(\d{6,})'),
    _field('invoice_number', r'\bNr\.[ \t]*(\d{6,})'),
    _field('invoice_date', r'\b(?:Fakturadato|Invoice[ \t]*date)' + _COLON + r'(\d{2}\.\d{2}\.\d{4})'),
    _field('invoice_date', r'\b(?:Ordredato|Dato|Date)' + _COLON + r'(\d{2}\.\d{2}\.\d{4})'),
    _field('service_number', r'\bService' + _NR + r'(\d+)'),
    _field('project_number', r'\bProsjekt' + _NR + r'(\d+)'),
    _field('customer_number', r'\bKunde' + _NR + r'(\d+)'),
    _field('order_number', r'\bOrdre' + _NR + r'(\d+)'),
    _field('order_address', r'\bOrdreadresse' + _COLON + _CELL),
    _field('work_order_text', r'(?i:\bOppdrag)[ \t]*:[ \t]*(.+?)(?=\n[ \t]*\n|\n[A-ZÆØÅ]|\Z)', _collapse,
           flags=re.DOTALL),
    _field('work_performed_text',
           r'(?i:\b(?:Utført arbeid|Arbeid utført|Beskrivelse utført|Jobb utført))[ \t]*:?[ \t]*'
           r'(.+?)(?=' + _CAPS_HEADER + r'|\Z)',
           _collapse, flags=re.DOTALL),
    _field('technician_name', r'\b(?:Tekniker|Montør|Utført av)' + _COLON + r'([A-ZÆØÅ][^\n]*?)(?=[ \t]{2,}|[ \t]*$)'),
    _field('declared_total', r'\bOrdresum' + _COLON + _AMOUNT, _amount, numeric=True),
    _field('declared_total', r'\bSum[ \t]+avgiftsfritt' + _COLON + _AMOUNT, _amount, numeric=True),
    _field('declared_total', r'\bSum[ \t]+eks\.?[ \t]*mva\.?' + _COLON + _AMOUNT, _amount, numeric=True),
    _field('declared_total', r'\b(?:Totalt|Total|Totalbeløp|Å[ \t]+betale)' + _COLON + _AMOUNT, _amount, numeric=True),
    _field('customer_name', r'\bKunde(?:navn)?[ \t]*:[ \t]*' + _CELL),
    _field('customer_org_number', r'\bOrg\.?' + _NR + r'((?:NO[ \t]*)?\d{3}[ \t]?\d{3}[ \t]?\d{3})', _digits),
    _field('kid_number', r'\bKID' + _NR + r'(\d{2,25})'),
)


def extract_header_fields(text: str) -> Dict[str, Any]:
    """
    Evaluate the header table once against a page of text.

    Returns:
        Mapping of field name to value; every field named in the table
        is present, '' or None when not found.
    """
    values: Dict[str, Any] = {}
    for header_field in HEADER_FIELDS:
        if values.get(header_field.name) not in (None, ''):
            continue
        values[header_field.name] = header_field.extract(text)
    return values
