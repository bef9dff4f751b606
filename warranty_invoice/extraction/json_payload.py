"""
JSON Payload Helpers.

Language-model services sometimes wrap the requested JSON in prose or a
markdown fence. These helpers pull out the first balanced {...} block,
respecting braces inside string literals.

Author: ML Engineering Team
"""

import json
from typing import Any, Dict, Optional


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} block in text, or None.

    Example:
        >>> find_json_object('Here you go: {"a": {"b": "}"}} thanks')
        '{"a": {"b": "}"}}'
    """
    start = text.find('{')
    while start != -1:
        depth = 0
        in_string = False
        escaped = False

        for index in range(start, len(text)):
            char = text[index]

            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]

        # Unbalanced from this brace; try the next one
        start = text.find('{', start + 1)

    return None


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse the first JSON object found in text.

    Returns:
        The decoded dict, or None if no valid object is present.
    """
    if not text:
        return None

    candidate = text.strip()
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        block = find_json_object(candidate)
        if block is None:
            return None
        try:
            value = json.loads(block)
        except json.JSONDecodeError:
            return None

    return value if isinstance(value, dict) else None
