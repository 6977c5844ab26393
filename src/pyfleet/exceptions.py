"""Custom exception hierarchy for pyfleet.

Every error carries a ``code`` matching the error kinds surfaced by the
callable requests (``invalid-argument``, ``not-found`` ...).
"""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all pyfleet errors."""

    code: str = "internal"


class FleetConfigError(FleetError):
    """Invalid or missing server configuration (e.g. no oracle token)."""

    code = "failed-precondition"


class FleetInvalidArgumentError(FleetError):
    """Malformed caller input. Raised before any I/O."""

    code = "invalid-argument"


class FleetUnauthenticatedError(FleetError):
    """Caller identity missing or invalid."""

    code = "unauthenticated"


class FleetNotFoundError(FleetError):
    """The oracle found no route, or a referenced record is absent."""

    code = "not-found"


class FleetConflictError(FleetError):
    """A conditional write lost against a concurrent writer."""

    code = "aborted"

    def __init__(
        self,
        message: str,
        *,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ) -> None:
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(message)


class FleetInternalError(FleetError):
    """Unexpected failure."""


class FleetTransportError(FleetError):
    """Oracle unreachable, timed out, or returned an unusable response.

    Callers treat this as retryable.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetApiError(FleetError):
    """Oracle returned an application-level error code."""

    def __init__(
        self,
        message: str,
        *,
        oracle_code: str = "",
        endpoint: str = "",
    ) -> None:
        self.oracle_code = oracle_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetOracleAuthError(FleetApiError):
    """The oracle rejected the server-held credential (HTTP 401/403).

    This is a server misconfiguration from the caller's point of view,
    so it surfaces as ``failed-precondition``.
    """

    code = "failed-precondition"


class FleetCallableError(FleetError):
    """Structured error returned to a callable-request caller.

    Wraps any of the above with its ``code`` and a caller-safe message.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}
