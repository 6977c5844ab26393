"""Service configuration for pyfleet."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfleet._constants import DEFAULT_MAX_SPEED_KMH, ORACLE_BASE_URL


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Service configuration.

    Parameters
    ----------
    oracle_token : str or None
        Server-held secret for the routing oracle. Never exposed to
        callers. ``None`` makes every oracle call fail with
        :class:`~pyfleet.exceptions.FleetConfigError`.
    oracle_base_url : str
        Oracle API base URL.
    routing_profile : str
        Oracle routing profile (``driving``, ``driving-traffic`` ...).
    request_timeout : float
        Total timeout in seconds for a single oracle request.
    max_speed_kmh : float
        Speed above which a location update is treated as spoofed.
    eta_retry_attempts : int
        How many times the ETA effect calls the oracle when it fails
        with a transient error. ``1`` disables retries.
    eta_retry_delay : float
        Seconds between ETA attempts.
    completion_ledger_size : int
        Number of recent completion keys kept on a driver record to
        detect duplicate trip-completion deliveries.
    api_trace_enabled : bool
        Log redacted oracle responses at DEBUG level.
    """

    oracle_token: str | None = None
    oracle_base_url: str = ORACLE_BASE_URL
    routing_profile: str = "driving"
    request_timeout: float = 10.0
    max_speed_kmh: float = DEFAULT_MAX_SPEED_KMH
    eta_retry_attempts: int = 2
    eta_retry_delay: float = 1.0
    completion_ledger_size: int = 32
    api_trace_enabled: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads ``FLEET_ORACLE_TOKEN`` (falling back to
        ``MAPBOX_SECRET_TOKEN``) and the optional ``FLEET_*`` variables.
        Explicit keyword arguments override environment values.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}

        token = env.get("FLEET_ORACLE_TOKEN") or env.get("MAPBOX_SECRET_TOKEN")
        if token:
            config_kwargs["oracle_token"] = token

        _ENV_STR_MAP = {
            "FLEET_ORACLE_BASE_URL": "oracle_base_url",
            "FLEET_ROUTING_PROFILE": "routing_profile",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "FLEET_REQUEST_TIMEOUT": "request_timeout",
            "FLEET_MAX_SPEED_KMH": "max_speed_kmh",
            "FLEET_ETA_RETRY_DELAY": "eta_retry_delay",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = float(val)

        _ENV_INT_MAP = {
            "FLEET_ETA_RETRY_ATTEMPTS": "eta_retry_attempts",
            "FLEET_COMPLETION_LEDGER_SIZE": "completion_ledger_size",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = int(val)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("FLEET_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
