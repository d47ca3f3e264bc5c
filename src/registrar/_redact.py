"""Helpers for safe debug logging.

Models routinely carry credentials (passwords, tokens) as plain attributes.
This module redacts sensitive attribute values before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# Matched against the attribute name with ``_``/``-`` stripped, as a suffix,
# so ``user_password`` and ``refresh-token`` are caught too.
_SENSITIVE_SUFFIXES: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "authorization",
    "cookie",
)


def is_sensitive_key(key: str) -> bool:
    """Return ``True`` when values stored under *key* must not be logged."""
    normalized = key.lower().replace("_", "").replace("-", "")
    return normalized.endswith(_SENSITIVE_SUFFIXES)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    # Nested models are logged through their attributes.
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        value = to_dict()

    if isinstance(value, Mapping):
        return {
            str(k): "<redacted>"
            if is_sensitive_key(str(k))
            else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, str):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
