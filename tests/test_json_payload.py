"""
Unit Tests - JSON extraction from model replies
"""

from warranty_invoice.extraction.json_payload import find_json_object, parse_json_object


class TestJsonPayload:
    """Tests for pulling the first JSON object out of free text"""

    def test_plain_json(self):
        assert parse_json_object('{"totals": {"labour": 1}}') == {"totals": {"labour": 1}}

    def test_markdown_fence(self):
        text = 'Here is the data:\n```json\n{"invoiceNumber": "2313044"}\n```'

        assert parse_json_object(text) == {"invoiceNumber": "2313044"}

    def test_braces_inside_strings(self):
        assert find_json_object('x {"a": "}{", "b": {"c": 1}} y') == '{"a": "}{", "b": {"c": 1}}'

    def test_escaped_quote_inside_string(self):
        assert parse_json_object(r'{"a": "say \"}\""}') == {"a": 'say "}"'}

    def test_skips_unbalanced_prefix(self):
        assert parse_json_object('{ broken {"ok": true}') == {"ok": True}

    def test_no_object(self):
        assert parse_json_object("no json here") is None
        assert parse_json_object("") is None
        assert parse_json_object("[1, 2]") is None
