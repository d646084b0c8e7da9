"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json
import re

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers (```json, ```) from text."""
    return _FENCE.sub("", text).strip()


def extract_json(text: str) -> dict | list:
    """Extract JSON from an LLM response.

    Tries in order:
    1. Direct json.loads on the stripped text
    2. Remove code fences and parse
    3. First '[' to last ']' (comment lists are arrays)
    4. First '{' to last '}'
    """
    text = (text or "").strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    unfenced = strip_code_fences(text)
    if unfenced != text:
        try:
            return json.loads(unfenced)
        except json.JSONDecodeError:
            pass

    for opener, closer in (("[", "]"), ("{", "}")):
        start = unfenced.find(opener)
        end = unfenced.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(unfenced[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")
