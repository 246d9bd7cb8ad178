#!/usr/bin/env python3
"""
Ring clients_api login helper (library + CLI).

Creates a session against the undocumented Ring API the way the Android app
does:

- Builds a form body describing a fixed, fake device (hardware id, OS, app
  brand and device metadata)
- POSTs it to /clients_api/session with HTTP basic auth and ?api_version=9
- Expects 201 Created and decodes the JSON body into a typed LoginResponse
- Keeps profile.authentication_token in memory for subsequent calls

Environment variables:
  - RING_USERNAME          (required for the CLI)
  - RING_PASSWORD          (required for the CLI)
  - RING_HARDWARE_ID       (optional; overrides the built-in hardware id)
  - RING_API_BASE_URL      (optional, default: https://api.ring.com)
  - RING_LOG_LEVEL         (optional, default: INFO)
"""

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import math
import os
import re
import sys
import time
import uuid
from dataclasses import dataclass
from typing import Optional

import requests

from .. import config as _config
from ..exceptions import ConfigError, LoginError, ResponseFormatError, RingError
from ..models import LoginResponse

_LOGGER_NAME = "ring_client.api_auth"


class _RunIdFilter(logging.Filter):
    """
    Ensure every log record has a run_id attribute for formatting.
    """

    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 - logging uses `filter` name
        if not hasattr(record, "run_id"):
            record.run_id = self._run_id
        return True


def _coerce_log_level(level: str) -> int:
    level_upper = (level or "").strip().upper()
    if not level_upper:
        return logging.INFO
    return logging._nameToLevel.get(level_upper, logging.INFO)


def configure_logging(*, run_id: str, level: str) -> logging.LoggerAdapter:
    """
    Configure logging for CLI runs.

    - Uses root logger configuration only if nothing is configured yet.
    - Adds a run_id to all records so the login steps of one run correlate.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=_coerce_log_level(level),
            format="%(asctime)s %(levelname)s [%(name)s] [run=%(run_id)s] %(message)s",
        )
    else:
        root.setLevel(_coerce_log_level(level))

    # Records from urllib3/requests also need run_id for the format string.
    old_factory = logging.getLogRecordFactory()
    # Unwrap a factory installed by an earlier call so repeated runs do not stack.
    old_factory = getattr(old_factory, "_wrapped_factory", old_factory)

    def record_factory(*args, **kwargs):  # type: ignore[no-untyped-def]
        record = old_factory(*args, **kwargs)
        if not hasattr(record, "run_id"):
            record.run_id = run_id
        return record

    record_factory._wrapped_factory = old_factory  # type: ignore[attr-defined]
    logging.setLogRecordFactory(record_factory)

    for h in root.handlers:
        for stale in [f for f in h.filters if isinstance(f, _RunIdFilter)]:
            h.removeFilter(stale)
        h.addFilter(_RunIdFilter(run_id))

    logger = logging.getLogger(_LOGGER_NAME)
    # run_id comes from the record factory; passing it as `extra` too would
    # raise KeyError ("Attempt to overwrite 'run_id' in LogRecord").
    return logging.LoggerAdapter(logger, {})


_SENSITIVE_KEYS = {
    "password",
    "authentication_token",
    "auth_token",
    "authorization",
}


def _redact(value: object) -> str:
    """
    Partially redact identifying (not secret) values for logging.
    """
    if value is None:
        return "<none>"
    s = str(value)
    if not s:
        return "<empty>"
    if len(s) <= 8:
        return "<redacted>"
    return f"{s[:3]}...{s[-3:]}"


def _redact_sensitive(value: object) -> str:
    """
    Redact *fully* for secret-bearing fields (tokens, passwords).
    """
    if value is None:
        return "<none>"
    s = str(value)
    if not s:
        return "<empty>"
    return "<redacted>"


def _sanitize_mapping(d: dict) -> dict:
    """
    Return a shallow copy safe for logging (redacts sensitive keys).
    """
    safe: dict = {}
    for k, v in d.items():
        if str(k).lower() in _SENSITIVE_KEYS:
            safe[k] = _redact_sensitive(v)
        else:
            safe[k] = v
    return safe


def _sanitize_obj(obj: object) -> object:
    """
    Deep-sanitize JSON-like objects (dict/list/tuple) for safe logging.
    """
    if isinstance(obj, dict):
        out: dict = {}
        for k, v in obj.items():
            if str(k).lower() in _SENSITIVE_KEYS:
                out[k] = _redact_sensitive(v)
            else:
                out[k] = _sanitize_obj(v)
        return out
    if isinstance(obj, list):
        return [_sanitize_obj(v) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_sanitize_obj(v) for v in obj)
    return obj


def _sanitize_text(text: str) -> str:
    """
    Best-effort scrub of authentication tokens in free-form text.

    Over-redaction is preferred to accidental leaks.
    """
    if not text:
        return text
    scrubbed = re.sub(
        r'("authentication_token"\s*:\s*")[^"]+(")', r"\1<redacted>\2", text, flags=re.IGNORECASE
    )
    scrubbed = re.sub(r"(auth_token=)[^&\s]+", r"\1<redacted>", scrubbed, flags=re.IGNORECASE)
    scrubbed = re.sub(r"(Basic\s+)[A-Za-z0-9+/=]+", r"\1<redacted>", scrubbed)
    return scrubbed


def build_login_form(hardware_id: str) -> dict[str, str]:
    """
    Return the device-identification form posted to the session endpoint.

    The values describe a fixed desktop "Android" client. The misspelled
    `app_instalation_date` key is what the API expects.
    """
    return {
        _config.API_VERSION_PARAM: _config.API_VERSION,
        "device[hardware_id]": hardware_id,
        "device[os]": "android",
        "device[app_brand]": "ring",
        "device[metadata][device_model]": "KVM",
        "device[metadata][device_name]": "Python",
        "device[metadata][resolution]": "600x800",
        "device[metadata][app_version]": "1.3.806",
        "device[metadata][app_instalation_date]": "",
        "device[metadata][manufacturer]": "Qemu",
        "device[metadata][device_type]": "desktop",
        "device[metadata][architecture]": "desktop",
        "device[metadata][language]": "en",
    }


@dataclass(frozen=True)
class Config:
    username: str
    password: str
    hardware_id: str
    timeout_seconds: float = 30.0
    ssl_verify: bool = True


def _get_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(args: argparse.Namespace, *, log: logging.LoggerAdapter) -> Config:
    _config._load_dotenv(log=log)
    username = _get_env("RING_USERNAME")
    password = _get_env("RING_PASSWORD")
    hardware_id = getattr(args, "hardware_id", None) or _config.get_hardware_id()

    missing = [k for k, v in [("RING_USERNAME", username), ("RING_PASSWORD", password)] if not v]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        timeout_seconds = float(args.timeout_seconds)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid --timeout-seconds value: {args.timeout_seconds!r}") from e
    if not (math.isfinite(timeout_seconds) and timeout_seconds > 0):
        raise ConfigError(f"--timeout-seconds must be a positive number, got {args.timeout_seconds!r}")

    # Log high-level config without leaking secrets/PII.
    username_hash = hashlib.sha256(username.lower().encode("utf-8")).hexdigest()[:12]
    log.info("loaded configuration")
    log.debug(
        "config details (sanitized): %s",
        _sanitize_mapping(
            {
                "username_sha256_12": username_hash,
                "password": password,
                "hardware_id": _redact(hardware_id),
                "session_url": _config.get_session_url(),
                "timeout_seconds": timeout_seconds,
                "ssl_verify": not bool(args.insecure_skip_ssl_verify),
            }
        ),
    )

    return Config(
        username=username,
        password=password,
        hardware_id=hardware_id,
        timeout_seconds=timeout_seconds,
        ssl_verify=not bool(args.insecure_skip_ssl_verify),
    )


def login(
    *,
    session: requests.Session,
    cfg: Config,
    log: Optional[logging.LoggerAdapter] = None,
    strict: bool = True,
) -> LoginResponse:
    """
    Create a session and return the decoded login response.

    Raises:
        LoginError: the endpoint answered with anything other than 201.
        ResponseFormatError: the body is not JSON or does not decode.
        requests.exceptions.RequestException: transport failures, unchanged.
    """
    if log is None:
        log = logging.LoggerAdapter(logging.getLogger(_LOGGER_NAME), {})

    url = _config.get_session_url()
    params = {_config.API_VERSION_PARAM: _config.API_VERSION}
    form = build_login_form(cfg.hardware_id)
    headers = {"Content-Type": "application/x-www-form-urlencoded"}

    log.info("creating session")
    log.debug(
        "session request details (sanitized): %s",
        {
            "url": url,
            "params": params,
            "form_keys": list(form.keys()),
            "hardware_id": _redact(cfg.hardware_id),
            "auth_username": "<redacted>",
            "auth_password": "<redacted>",
            "timeout_seconds": cfg.timeout_seconds,
            "ssl_verify": cfg.ssl_verify,
        },
    )

    start = time.perf_counter()
    resp = session.post(
        url,
        params=params,
        data=form,
        headers=headers,
        # requests encodes str credentials as latin-1; the API expects UTF-8.
        auth=(cfg.username.encode("utf-8"), cfg.password.encode("utf-8")),
        timeout=cfg.timeout_seconds,
        verify=cfg.ssl_verify,
    )
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    log.debug(
        "session response details: %s",
        {
            "status_code": resp.status_code,
            "elapsed_ms": elapsed_ms,
            "content_type": resp.headers.get("Content-Type") or resp.headers.get("content-type"),
        },
    )

    if resp.status_code != requests.codes.created:
        log.warning("session creation rejected (status=%s)", resp.status_code)
        raise LoginError(
            f"Unable to login: HTTP {resp.status_code}. "
            f"Body (truncated, sanitized): {_sanitize_text((resp.text or '')[:500])!r}",
            status_code=resp.status_code,
        )

    try:
        payload = resp.json()
    except ValueError as e:
        raise ResponseFormatError(
            f"Session response was not valid JSON: {e}. "
            f"Body: {_sanitize_text((resp.text or '')[:500])!r}"
        ) from e

    log.debug("session response body (sanitized): %s", _sanitize_obj(payload))

    result = LoginResponse.from_dict(payload, strict=strict)
    log.info("session created")
    return result


class RingClient:
    """
    Client for the non-public Ring API.

    Holds a requests.Session (and its cookie jar) plus the authentication
    token from the last successful login. Only session creation is
    implemented.

    Usage:
        cfg = Config(username="me@example.com", password="...", hardware_id=config.get_hardware_id())
        with RingClient(cfg) as client:
            response = client.login()
            print(response.profile.first_name, client.is_logged_in)
    """

    def __init__(
        self,
        cfg: Config,
        *,
        session: Optional[requests.Session] = None,
        log: Optional[logging.LoggerAdapter] = None,
        strict: bool = True,
    ) -> None:
        self._cfg = cfg
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._log = log if log is not None else logging.LoggerAdapter(logging.getLogger(_LOGGER_NAME), {})
        self._strict = strict
        self._auth_token = ""

    @property
    def config(self) -> Config:
        return self._cfg

    @property
    def session(self) -> requests.Session:
        return self._session

    @property
    def auth_token(self) -> str:
        """Authentication token from the last successful login ("" before)."""
        return self._auth_token

    @property
    def is_logged_in(self) -> bool:
        return bool(self._auth_token)

    def login(self) -> LoginResponse:
        """Log in and keep the returned authentication token."""
        response = login(session=self._session, cfg=self._cfg, log=self._log, strict=self._strict)
        self._auth_token = response.profile.authentication_token
        if not self._auth_token:
            self._log.warning("login succeeded but the profile carried no authentication_token")
        return response

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RingClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RingClient(hardware_id={_redact(self._cfg.hardware_id)!r}, logged_in={self.is_logged_in})"


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ring-login",
        description="Ring clients_api login CLI (create session -> print profile).",
    )
    p.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")
    p.add_argument("--timeout-seconds", default="30", help="HTTP timeout in seconds (default: 30).")
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help='Logging verbosity (default: RING_LOG_LEVEL or "INFO").',
    )
    p.add_argument(
        "--insecure-skip-ssl-verify",
        action="store_true",
        help="Disable TLS certificate verification (NOT recommended).",
    )
    p.add_argument(
        "--hardware-id",
        default=None,
        help="Override the hardware id sent in the login form (default: RING_HARDWARE_ID or built-in).",
    )
    p.add_argument(
        "--show-token",
        action="store_true",
        help="Print the authentication token instead of redacting it.",
    )
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    log: Optional[logging.LoggerAdapter] = None
    fallback = logging.getLogger(_LOGGER_NAME)
    try:
        run_id = uuid.uuid4().hex[:12]
        log_level = args.log_level or _get_env("RING_LOG_LEVEL") or "INFO"
        log = configure_logging(run_id=run_id, level=log_level)

        log.info("starting login")

        cfg = load_config(args, log=log)

        with RingClient(cfg, log=log) as client:
            response = client.login()

        out = response.to_dict()
        if not args.show_token:
            out = _sanitize_obj(out)

        if args.pretty:
            print(json.dumps(out, indent=2, ensure_ascii=False, sort_keys=True))
        else:
            print(json.dumps(out, ensure_ascii=False))
        log.info("completed successfully")
        return 0
    except RingError as e:
        (log or fallback).error("login error: %s", _sanitize_text(str(e)))
        print(f"Error: {_sanitize_text(str(e))}", file=sys.stderr)
        return 2
    except requests.exceptions.SSLError as e:
        (log or fallback).error("SSL error: %s", str(e))
        print(
            "Error: SSL verification failed. "
            "If you must (not recommended), retry with --insecure-skip-ssl-verify. "
            f"Details: {e}",
            file=sys.stderr,
        )
        return 3
    except requests.exceptions.Timeout:
        (log or fallback).error("request timed out")
        print("Error: request timed out. Try increasing --timeout-seconds.", file=sys.stderr)
        return 4
    except requests.exceptions.ConnectionError as e:
        (log or fallback).error("connection error: %s", str(e))
        print(f"Error: could not connect to {_config.get_api_base_url()}: {e}", file=sys.stderr)
        return 5
    except requests.exceptions.RequestException as e:
        (log or fallback).error("request failed: %s", _sanitize_text(str(e)))
        print(f"Error: request failed: {_sanitize_text(str(e))}", file=sys.stderr)
        return 5
    except KeyboardInterrupt:
        (log or fallback).warning("interrupted by user")
        print("Interrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
