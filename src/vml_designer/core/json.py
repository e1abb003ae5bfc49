"""Fast JSON parsing with repair fallback."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def _strip_fences(text: str) -> str:
    if "```" not in text:
        return text
    start = text.find("```json")
    start = start + 7 if start != -1 else text.find("```") + 3
    end = text.find("```", start)
    return text[start:end].strip() if end != -1 else text


def extract_json(text: str, repair: bool = True) -> dict[str, Any]:
    """
    Parse a JSON object from text, repairing it if needed.

    Args:
        text: Text containing a JSON object
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed JSON dictionary

    Raises:
        JSONParseError: If parsing fails
    """
    working = _strip_fences(text.strip())
    start = working.find("{")
    end = working.rfind("}")
    if start == -1 or end == -1:
        raise JSONParseError("No JSON object found in text")
    json_str = working[start : end + 1]

    try:
        result = msgspec.json.decode(json_str.encode("utf-8"))
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e
        try:
            result = orjson.loads(repair_json(json_str))
        except (orjson.JSONDecodeError, ValueError) as repair_error:
            raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to a JSON string.

    Args:
        obj: Object to encode
        **kwargs: indent for pretty output

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)
    if indent == 0:
        try:
            return orjson.dumps(obj, default=str).decode("utf-8")
        except (TypeError, ValueError):
            # integers outside 64-bit range
            pass
    return json.dumps(obj, indent=indent if indent > 0 else None, default=str)
