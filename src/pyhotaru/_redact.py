"""Redaction of request payloads before they reach DEBUG logs.

Every Hotaru request carries the installation id and master key, and most
carry a session id or credentials. Those are masked; a ``None`` stays
``None`` so a missing master key is still visible in the log. Pending
changelogs can be long, so they are reduced to their size.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

_SECRET_KEYS = frozenset({"password", "masterkey", "sessionid"})
_SUMMARIZED_KEYS = frozenset({"clientchangelog"})


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of *value* with secrets masked and long strings cut."""
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for key, item in value.items():
            name = str(key)
            if item is not None and name.lower() in _SECRET_KEYS:
                redacted[name] = "<redacted>"
            elif isinstance(item, list) and name.lower() in _SUMMARIZED_KEYS:
                redacted[name] = f"<{len(item)} changes>"
            else:
                redacted[name] = redact_for_log(item, max_string=max_string)
        return redacted
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
