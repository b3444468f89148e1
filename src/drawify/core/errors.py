"""Exception types raised by the Drawify core services.

Each exception carries the HTTP status code the API layer should answer
with, so route handlers can translate any :class:`DrawifyError` into an
``HTTPException`` without knowing which service raised it.
"""

from __future__ import annotations


class DrawifyError(Exception):
    """Base class for all expected service failures."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidDrawingError(DrawifyError):
    """The submitted drawing is missing, malformed, or too large."""

    status_code = 400


class ConfigurationError(DrawifyError):
    """A required backend is not configured."""

    status_code = 500


class UpstreamError(DrawifyError):
    """The analysis or image-generation service failed."""

    status_code = 502


class GatewayError(DrawifyError):
    """Delegation to the remote function failed.

    ``status_code`` mirrors the gateway's HTTP status when it answered with
    an error, and defaults to 502 when it could not be reached at all.
    """

    status_code = 502
