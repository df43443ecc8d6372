"""Error taxonomy shared by every service in the engine.

Services raise these; the API layer never builds HTTPExceptions for
domain failures itself.  A single exception handler in app/main.py maps
each class to its status code and a ``{"detail": message}`` body.

Reads catch UpstreamUnavailable and degrade.  Writes let every one of
these propagate to the caller unchanged.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class.  ``status_code`` is the HTTP status the API maps it to."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(EngineError):
    status_code = 404
    default_message = "Not found"


class Forbidden(EngineError):
    status_code = 403
    default_message = "Insufficient permissions"


class ValidationFailed(EngineError):
    status_code = 422
    default_message = "Validation failed"

    def __init__(
        self, message: str | None = None, *, fields: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.fields = fields or []


class UpstreamUnavailable(EngineError):
    status_code = 503
    default_message = "Storage unavailable, please try again"

    def __init__(self, message: str | None = None, *, source: str = "unknown") -> None:
        super().__init__(message)
        self.source = source


class Conflict(EngineError):
    status_code = 409
    default_message = "Conflict"
