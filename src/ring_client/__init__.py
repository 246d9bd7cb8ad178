"""
Top-level package for the `ring_client` Python code.

This package provides a minimal client for the Ring "clients_api" session
endpoint: login with device identification, typed profile/feature parsing,
and an in-memory authentication token.
"""

from .api_auth.auth import (
    ConfigError,
    LoginError,
    ResponseFormatError,
    RingClient,
    RingError,
)
from .models import Features, LoginResponse, Profile

__all__: list[str] = [
    "ConfigError",
    "Features",
    "LoginError",
    "LoginResponse",
    "Profile",
    "ResponseFormatError",
    "RingClient",
    "RingError",
]
