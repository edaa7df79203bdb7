"""JSON coercion helpers for loosely-typed host payloads.

Tool arguments arrive as dicts once complete but as JSON text while the
host is still streaming them; tool output may be any JSON value.
"""

import json
from typing import Any


def parse_tool_params(raw: Any) -> dict[str, Any]:
    """Tool-call arguments as a dict. Empty dict when there is nothing usable.

    Truncated argument text from a partial call, non-object JSON and
    anything that is neither a dict nor a string all come back empty.
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def json_str(value: Any) -> str:
    """Render a payload value as display text. Empty string for None.

    Strings pass through unchanged; anything else is serialized as JSON,
    falling back to str() for values JSON cannot represent.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value)
    except (ValueError, TypeError):
        return str(value)
