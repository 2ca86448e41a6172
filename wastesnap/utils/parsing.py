"""
JSON parsing utilities for Gemini API responses.
"""

import json
import re
from typing import List

from wastesnap.errors import MalformedResponse

_LEADING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?([\s\S]*?)(?:```)?\s*$")
_EMBEDDED_FENCE = re.compile(r"```[\w-]*[ \t]*\n([\s\S]*?)```")


def strip_code_fence(response_text: str) -> str:
    """Remove a markdown code block (```json ... ```) wrapping the whole text.

    The closing fence is optional so truncated replies still parse.
    """
    stripped = response_text.strip()
    match = _LEADING_FENCE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def parse_gemini_json_array(response_text: str) -> List:
    """
    Parse a JSON array from Gemini's text response.
    Handles markdown code blocks around the payload.
    
    Args:
        response_text: Raw text response from Gemini
        
    Returns:
        Parsed list of fragments (elements are not validated)
        
    Raises:
        MalformedResponse: If the text is not a JSON array
    """
    if not isinstance(response_text, str):
        raise MalformedResponse("Gemini response is not text", raw_text=repr(response_text))

    try:
        parsed = json.loads(strip_code_fence(response_text))
    except json.JSONDecodeError as e:
        # Fallback: a code block preceded by prose
        embedded = _EMBEDDED_FENCE.search(response_text)
        if not embedded:
            raise MalformedResponse(f"Could not parse JSON from Gemini response: {e}", raw_text=response_text)
        try:
            parsed = json.loads(embedded.group(1))
        except json.JSONDecodeError:
            raise MalformedResponse(f"Could not parse JSON from Gemini response: {e}", raw_text=response_text)

    if not isinstance(parsed, list):
        raise MalformedResponse(
            f"Expected a JSON array from Gemini, got {type(parsed).__name__}",
            raw_text=response_text,
        )
    return parsed
