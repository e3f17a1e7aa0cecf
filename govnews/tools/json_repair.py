"""
JSON array extraction for LLM output.

Gemini is asked for a bare JSON array but regularly wraps it in prose or a
markdown code block, and long replies can be cut off mid-array. This module
finds the first array in the reply, closes it if truncated, and parses it.
"""

import json
import logging
import re
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r'^```(?:json)?\n?', '', cleaned)
        cleaned = re.sub(r'\n?```$', '', cleaned)
        cleaned = cleaned.strip()
    return cleaned


def extract_json_array(text: str) -> Optional[str]:
    """Return the first bracket-balanced ``[...]`` substring, or None if there is none."""
    start = text.find('[')
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape_next:
            escape_next = False
            continue
        if ch == '\\' and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == '[':
            depth += 1
        elif ch == ']':
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    # Brackets never balanced: the reply was truncated
    return repair_truncated_json(text[start:])


def repair_truncated_json(text: str) -> str:
    """Close an open string and any open brackets, innermost first."""
    stack = []
    in_string = False
    escape_next = False
    for ch in text:
        if escape_next:
            escape_next = False
            continue
        if ch == '\\' and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in ('{', '['):
            stack.append(ch)
        elif ch == '}' and stack and stack[-1] == '{':
            stack.pop()
        elif ch == ']' and stack and stack[-1] == '[':
            stack.pop()

    if in_string:
        text += '"'
    text = text.rstrip().rstrip(',')
    close_map = {'{': '}', '[': ']'}
    for bracket in reversed(stack):
        text += close_map[bracket]
    return text


def parse_json_array(response: str) -> Optional[List[Any]]:
    """
    Parse the first JSON array found in an LLM reply.

    Returns None when the reply holds no array or the array does not decode;
    callers treat that as "the model gave us nothing usable".
    """
    if not response:
        return None

    json_str = extract_json_array(strip_code_fence(response))
    if json_str is None:
        logger.warning(f"No JSON array in LLM response: {response[:200]}")
        return None

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError:
        # Literal newlines / tabs inside string values
        try:
            data = json.loads(json_str, strict=False)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON array: {e}\nResponse: {json_str[:500]}")
            return None

    if not isinstance(data, list):
        return None
    return data
