"""Error kinds raised while talking to Cobot or validating caller input."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors rendered as ``{"success": false, "error": ...}``."""


class ProviderError(DashboardError):
    """A Cobot request failed.

    ``status_code`` is the HTTP status of the failed response, or ``None``
    when the request never produced one (timeout, DNS, connection reset,
    undecodable body).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ValidationError(DashboardError):
    """Caller-supplied input translates to nothing that can be written."""
