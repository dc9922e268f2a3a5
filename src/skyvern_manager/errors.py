"""Error taxonomy shared by the service layers.

- ConfigValidationError: a persisted or submitted configuration document has
  the wrong shape. Raised before any remote fetch.
- UpstreamError: a call to the Skyvern API failed. Carries the upstream
  status and body so the API layer can surface them unchanged.
- InternalError: unexpected failure while shaping or rendering output.

Missing data inside records is never an error; it degrades to absence.
"""

from __future__ import annotations

from typing import Any


class ManagerError(Exception):
    """Base class for all service errors."""


class ConfigValidationError(ManagerError):
    """Configuration document failed validation."""


class UpstreamError(ManagerError):
    """A Skyvern API request failed.

    Attributes:
        status_code: HTTP status returned upstream, or None for transport errors.
        detail: Parsed response body (or error message).
        url: Request URL, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: Any = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
        self.url = url


class InternalError(ManagerError):
    """Unexpected failure while producing output."""
