"""
Shared utilities for the submission processing modules.

Nil-safe path lookup over decoded JSON documents, plus id conversions used
when marshalling store updates.
"""

import re
from typing import Any, Sequence

from core.logging import get_logger

logger = get_logger(__name__)

_MISSING = object()
_PATH_TOKEN = re.compile(r"\[(-?\d+)\]|([^.\[\]]+)")


def _split_path(path: str | Sequence[Any]) -> list[Any]:
    if not isinstance(path, str):
        return list(path)
    # "result.content[0].subTrack" -> ["result", "content", 0, "subTrack"]
    return [int(index) if index else name for index, name in _PATH_TOKEN.findall(path)]


def get_path(data: Any, path: str | Sequence[Any], default: Any = None) -> Any:
    """
    Look up a nested value, returning ``default`` when any link is missing.

    Supports dotted keys and list indexes, e.g. ``"result.content[0].subTrack"``.

    Example:
        >>> get_path({"result": {"content": [{"subTrack": "MARATHON_MATCH"}]}},
        ...          "result.content[0].subTrack")
        'MARATHON_MATCH'
        >>> get_path({"result": {"content": []}}, "result.content[0].subTrack") is None
        True
    """
    current = data
    for part in _split_path(path):
        if current is None:
            return default
        if isinstance(part, int):
            if not isinstance(current, (list, tuple)) or not -len(current) <= part < len(current):
                return default
            current = current[part]
        elif isinstance(current, dict):
            current = current.get(part, _MISSING)
            if current is _MISSING:
                return default
        else:
            return default
    return default if current is None else current


def safe_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        logger.warning(
            "Type conversion failed",
            extra={"value": str(value)[:100], "target_type": "int"},
        )
        return None


def safe_str_id(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float):
        return str(int(value))
    s = str(value).strip()
    return s if s else None
