"""Gateway exceptions and their JSON error bodies"""
from typing import Any, Optional


class GatewayError(Exception):
    status_code: int = 500
    error: str = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        details: Any = None,
        hint: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message or error or self.error)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error
        self.details = details
        self.hint = hint
        self.upstream_status = upstream_status

    def to_body(self) -> dict:
        body: dict = {"error": self.error}
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        if self.message is not None:
            body["message"] = self.message
        if self.hint is not None:
            body["hint"] = self.hint
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequestError(GatewayError):
    """Client input problem, reported before any upstream call."""

    status_code = 400
    error = "Invalid request"

    def __init__(self, error: str, *, hint: Optional[str] = None, details: Any = None):
        super().__init__(error=error, hint=hint, details=details)


class ConfigurationError(GatewayError):
    status_code = 500

    def __init__(self, error: str):
        super().__init__(error=error)


class UpstreamError(GatewayError):
    status_code = 502
    error = "Upstream error"
