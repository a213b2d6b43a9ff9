"""
Response formatter: renders query results as human-readable log text.

Documents are sanitised first (ObjectId, datetime, Decimal128, bytes) so that
everything can be dumped as indented JSON.
"""

import json
from typing import Any, Dict, List

EXPLAIN_STATS_KEY = "executionStats"


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, dict):
        return {k: _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except (UnicodeDecodeError, ValueError):
            return f"[binary {len(obj)} bytes]"
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    # datetime, ObjectId, Decimal128, etc.
    return str(obj)


def clean_documents(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [_sanitise_value(doc) for doc in results]


def format_documents(results: List[Dict[str, Any]]) -> str:
    return json.dumps(clean_documents(results), indent=2)


def format_execution_stats(explain: Dict[str, Any]) -> str:
    """Render only the ``executionStats`` part of an explain document."""
    stats = explain.get(EXPLAIN_STATS_KEY, {})
    return json.dumps(_sanitise_value(stats), indent=2)


def format_result(result: Any) -> str:
    """Pick the rendering for whatever a query step returned."""
    if isinstance(result, list):
        return format_documents(result)
    if isinstance(result, dict):
        return format_execution_stats(result)
    return str(result)
