"""
Ring clients_api URL and environment configuration.

Loads .env and exposes the base URL, the session endpoint URL and the fixed
device-identification values. The base URL and hardware id can be overridden
via environment variables (e.g. to point at a local mock server).

Environment variables:
  - RING_API_BASE_URL   (optional, default: https://api.ring.com)
  - RING_HARDWARE_ID    (optional, default: a fixed made-up UUID)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


_DEFAULT_API_BASE = "https://api.ring.com"
_DEFAULT_HARDWARE_ID = "e6b664f0-606d-11e8-bbc0-db91a8e49ced"

API_VERSION = "9"
API_VERSION_PARAM = "api_version"
SESSION_PATH = "/clients_api/session"


def _load_dotenv(log: Optional[logging.LoggerAdapter] = None) -> None:
    """
    Load a .env file into the process environment (if one exists).

    Search order:
    1. Current working directory (.env)
    2. The project root, three levels up from this file
       (src/ring_client/config.py -> project root)

    Variables already set in the shell win: load_dotenv() is always called
    with override=False.
    """
    cwd_env = Path.cwd() / ".env"
    #   config.py -> ring_client/ -> src/ -> project root
    package_root_env = Path(__file__).resolve().parents[2] / ".env"

    env_file: Optional[Path] = None
    if cwd_env.is_file():
        env_file = cwd_env
    elif package_root_env.is_file():
        env_file = package_root_env

    if env_file is None:
        return

    loaded = load_dotenv(env_file, override=False)
    if log is not None:
        if loaded:
            log.debug("loaded .env from %s (shell vars take precedence)", env_file)
        else:
            log.debug(
                ".env found at %s but all variables were already set in the environment",
                env_file,
            )


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable, stripped; return default if unset or empty."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


# Load .env on module import so URL getters see env vars.
_load_dotenv()


def get_api_base_url() -> str:
    """Return API base URL (e.g. https://api.ring.com)."""
    return _get_env("RING_API_BASE_URL", _DEFAULT_API_BASE) or _DEFAULT_API_BASE


def get_session_url() -> str:
    """Return full session-creation (login) endpoint URL."""
    return f"{get_api_base_url().rstrip('/')}{SESSION_PATH}"


def get_hardware_id() -> str:
    """Return the hardware id sent with the login form."""
    return _get_env("RING_HARDWARE_ID", _DEFAULT_HARDWARE_ID) or _DEFAULT_HARDWARE_ID
