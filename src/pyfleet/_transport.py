"""HTTP transport for the routing oracle."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfleet._constants import USER_AGENT
from pyfleet._redact import redact_for_log, redact_url
from pyfleet.config import FleetConfig
from pyfleet.exceptions import FleetOracleAuthError, FleetTransportError

_logger = logging.getLogger(__name__)

# Statuses whose JSON body carries an oracle application code worth
# mapping (e.g. ``InvalidInput``), rather than a bare transport failure.
_APPLICATION_ERROR_STATUSES: frozenset[int] = frozenset({400, 404, 422})


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Tests pass small fakes implementing this instead of a live session.
    """

    async def get_json(self, path: str, params: Mapping[str, str]) -> dict[str, Any]:
        ...


class HttpTransport:
    """One bounded-timeout GET per call, JSON decoded, no retries."""

    def __init__(self, config: FleetConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, path: str, params: Mapping[str, str]) -> dict[str, Any]:
        url = f"{self._config.oracle_base_url}{path}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s params=%s", url, redact_for_log(dict(params)))

        try:
            async with self._http.get(url, params=dict(params), headers=headers, timeout=self._timeout) as resp:
                status = resp.status
                text = await resp.text()
        except TimeoutError as exc:
            raise FleetTransportError(
                f"Request to {path} timed out after {self._config.request_timeout}s",
                endpoint=path,
            ) from exc
        except aiohttp.ClientError as exc:
            raise FleetTransportError(
                f"Request to {path} failed: {redact_url(str(exc))}",
                endpoint=path,
            ) from exc

        if status in (401, 403):
            raise FleetOracleAuthError(
                f"Oracle rejected credentials for {path} (HTTP {status})",
                oracle_code=str(status),
                endpoint=path,
            )

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetTransportError(
                f"Invalid JSON from {path} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=path,
            ) from exc

        if status != 200:
            if status in _APPLICATION_ERROR_STATUSES and isinstance(body, dict) and "code" in body:
                return body
            raise FleetTransportError(
                f"HTTP {status} from {path}: {text[:200]}",
                status_code=status,
                endpoint=path,
            )

        if not isinstance(body, dict):
            raise FleetTransportError(
                f"Unexpected response shape from {path}: {type(body).__name__}",
                status_code=status,
                endpoint=path,
            )

        if self._config.api_trace_enabled:
            _logger.debug("Response %s: %s", path, redact_for_log(body, max_string=128))

        return body
