"""Helpers for safe debug logging.

Oracle requests carry the server-held access token as a query parameter.
This module masks it before request parameters or oracle error text reach
the logs, and shortens route geometries so traces stay readable.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

_SECRET_PARAMS: frozenset[str] = frozenset({"access_token", "token", "secret", "authorization"})

_TOKEN_IN_URL = re.compile(r"(access_token=)[^&\s]+", re.IGNORECASE)

# Oracle JSON nests routes -> legs -> steps; anything deeper is collapsed.
_MAX_DEPTH = 6


def redact_url(url: str) -> str:
    """Mask the ``access_token`` query parameter in *url*."""
    return _TOKEN_IN_URL.sub(rf"\1{REDACTED}", url)


def _clip(text: str, limit: int) -> str:
    text = redact_url(text)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...<{len(text) - limit} more chars>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of an oracle request or response that is safe to log.

    Secret-named keys are replaced, tokens embedded in URLs are masked and
    strings longer than *max_string* (typically encoded polylines) are clipped.
    """
    if isinstance(value, str):
        return _clip(value, max_string)
    if isinstance(value, Mapping):
        if _depth >= _MAX_DEPTH:
            return f"<{len(value)} keys>"
        return {
            str(key): REDACTED
            if str(key).lower() in _SECRET_PARAMS
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        if _depth >= _MAX_DEPTH:
            return f"<{len(value)} items>"
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return value
