"""Date-aware JSON serialization.

Plain JSON has no timestamp type, so ``datetime`` values are written as a
tagged object ``{"__date__": "<ISO-8601>"}`` and turned back into
``datetime`` objects on load. Everything else is standard JSON.

A mapping key that looks like the tag (``__date__``, ``~__date__``, ...)
gets one extra ``~`` prefix on the way out and loses it on the way in, so
user data shaped like a tagged date still round-trips unchanged.

Used for persisted objects (snapshot, changelog) and for the
``payloadString`` envelope of the default HTTP binding.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

_DATE_TAG = "__date__"
_ESCAPE = "~"
_TAG_LIKE_KEY = re.compile(rf"{_ESCAPE}*{_DATE_TAG}")
_ESCAPED_KEY = re.compile(rf"{_ESCAPE}+{_DATE_TAG}")


def _tag(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATE_TAG: value.isoformat()}
    if isinstance(value, Mapping):
        return {
            (_ESCAPE + key if isinstance(key, str) and _TAG_LIKE_KEY.fullmatch(key) else key): _tag(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_tag(item) for item in value]
    return value


def _decode_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and isinstance(obj.get(_DATE_TAG), str):
        try:
            return datetime.fromisoformat(obj[_DATE_TAG])
        except ValueError:
            return obj
    if any(_ESCAPED_KEY.fullmatch(key) for key in obj):
        return {(key[1:] if _ESCAPED_KEY.fullmatch(key) else key): item for key, item in obj.items()}
    return obj


def dumps(value: Any) -> str:
    """Serialize *value* to a JSON string, tagging ``datetime`` values."""
    return json.dumps(_tag(value), separators=(",", ":"))


def loads(text: str | bytes) -> Any:
    """Inverse of :func:`dumps`; tagged dates come back as ``datetime``."""
    return json.loads(text, object_hook=_decode_hook)
