"""Exceptions raised by the Ring client."""

from __future__ import annotations

from typing import Optional


class RingError(RuntimeError):
    """Expected client failure with a user-facing message."""


class ConfigError(RingError):
    """Required configuration (e.g. credentials) is missing or invalid."""


class LoginError(RingError):
    """The session endpoint answered with something other than 201 Created."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(RingError):
    """The response body was not the JSON shape we expect."""


__all__ = ["ConfigError", "LoginError", "ResponseFormatError", "RingError"]
