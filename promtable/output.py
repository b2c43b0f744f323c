"""Render row records as JSON for the CLI and the HTTP API."""
import json
import math
from typing import Any, Dict, Iterable, List, Optional


def _exposition_float(value: float) -> Any:
    # JSON has no literal for these; use the exposition format spelling
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return value


def jsonable(value: Any) -> Any:
    """Copy of a record with non-finite floats replaced by their exposition spelling."""
    if isinstance(value, float):
        return _exposition_float(value)
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def render_json(records: List[Dict[str, Any]], indent: Optional[int] = None) -> str:
    """Render all records as one JSON array."""
    return json.dumps(jsonable(records), indent=indent, allow_nan=False)


def render_jsonl(records: Iterable[Dict[str, Any]]) -> str:
    """Render one JSON object per line."""
    lines = [json.dumps(jsonable(record), allow_nan=False) for record in records]
    return "\n".join(lines) + ("\n" if lines else "")
