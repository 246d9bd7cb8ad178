"""
Tests for the `ring-login` CLI entrypoint and configuration loading.
"""

from __future__ import annotations

import argparse
import json
import logging
from unittest.mock import Mock

import pytest
import requests

import ring_client.api_auth.auth as auth_mod


def _make_json_response(payload: dict, *, status_code: int = 201) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp.headers["Content-Type"] = "application/json"
    resp._content = json.dumps(payload).encode("utf-8")  # noqa: SLF001
    resp.encoding = "utf-8"
    return resp


@pytest.fixture
def creds(monkeypatch) -> None:
    monkeypatch.setenv("RING_USERNAME", "user@example.com")
    monkeypatch.setenv("RING_PASSWORD", "pw")
    monkeypatch.delenv("RING_HARDWARE_ID", raising=False)


@pytest.fixture
def fake_session(monkeypatch) -> Mock:
    session = Mock()
    session.post.return_value = _make_json_response(
        {"profile": {"id": 1, "first_name": "Ada", "authentication_token": "CLI_TOKEN"}}
    )
    monkeypatch.setattr(auth_mod.requests, "Session", Mock(return_value=session))
    return session


def _log() -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logging.getLogger("test"), {})


def test_load_config_reads_env(creds) -> None:
    args = auth_mod.parse_args(["--timeout-seconds", "12", "--insecure-skip-ssl-verify"])

    cfg = auth_mod.load_config(args, log=_log())

    assert cfg.username == "user@example.com"
    assert cfg.password == "pw"
    assert cfg.hardware_id == "e6b664f0-606d-11e8-bbc0-db91a8e49ced"
    assert cfg.timeout_seconds == 12.0
    assert cfg.ssl_verify is False


def test_load_config_hardware_id_arg_wins(creds, monkeypatch) -> None:
    monkeypatch.setenv("RING_HARDWARE_ID", "from-env")
    args = auth_mod.parse_args(["--hardware-id", "from-arg"])

    assert auth_mod.load_config(args, log=_log()).hardware_id == "from-arg"


def test_load_config_missing_credentials(monkeypatch) -> None:
    monkeypatch.delenv("RING_USERNAME", raising=False)
    monkeypatch.setenv("RING_PASSWORD", "pw")

    with pytest.raises(auth_mod.ConfigError) as e:
        auth_mod.load_config(auth_mod.parse_args([]), log=_log())

    assert "RING_USERNAME" in str(e.value)
    assert "RING_PASSWORD" not in str(e.value)


@pytest.mark.parametrize("timeout", ["soon", "0", "-5", "nan", "inf", None])
def test_load_config_rejects_bad_timeout(creds, timeout) -> None:
    args = argparse.Namespace(timeout_seconds=timeout, insecure_skip_ssl_verify=False, hardware_id=None)

    with pytest.raises(auth_mod.ConfigError):
        auth_mod.load_config(args, log=_log())


def test_main_prints_profile_with_redacted_token(creds, fake_session, capsys) -> None:
    rc = auth_mod.main(["--pretty"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["profile"]["first_name"] == "Ada"
    assert out["profile"]["authentication_token"] == "<redacted>"
    assert fake_session.post.call_args[1]["auth"] == (b"user@example.com", b"pw")
    fake_session.close.assert_called_once()


def test_main_show_token(creds, fake_session, capsys) -> None:
    rc = auth_mod.main(["--show-token"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["profile"]["authentication_token"] == "CLI_TOKEN"


def test_main_returns_2_on_rejected_login(creds, fake_session, capsys) -> None:
    fake_session.post.return_value = _make_json_response({"error": "bad"}, status_code=401)

    rc = auth_mod.main([])

    assert rc == 2
    assert "HTTP 401" in capsys.readouterr().err


def test_main_returns_2_on_missing_credentials(monkeypatch, capsys) -> None:
    monkeypatch.delenv("RING_USERNAME", raising=False)
    monkeypatch.delenv("RING_PASSWORD", raising=False)

    assert auth_mod.main([]) == 2
    assert "Missing required environment variables" in capsys.readouterr().err


@pytest.mark.parametrize(
    "exc, expected_rc",
    [
        (requests.exceptions.SSLError("bad cert"), 3),
        (requests.exceptions.ReadTimeout("slow"), 4),
        (requests.exceptions.ConnectionError("refused"), 5),
        (requests.exceptions.InvalidURL("bad url"), 5),
        (requests.exceptions.TooManyRedirects("loop"), 5),
    ],
)
def test_main_maps_transport_errors(creds, fake_session, exc, expected_rc: int) -> None:
    fake_session.post.side_effect = exc

    assert auth_mod.main([]) == expected_rc


def test_main_returns_2_on_zero_timeout(creds, fake_session, capsys) -> None:
    assert auth_mod.main(["--timeout-seconds", "0"]) == 2
    assert "--timeout-seconds must be a positive number" in capsys.readouterr().err
    fake_session.post.assert_not_called()


def test_main_returns_130_on_keyboard_interrupt(creds, fake_session, capsys) -> None:
    fake_session.post.side_effect = KeyboardInterrupt

    assert auth_mod.main([]) == 130
    assert "Interrupted." in capsys.readouterr().err


def test_main_sanitizes_request_failure_message(creds, fake_session, capsys) -> None:
    fake_session.post.side_effect = requests.exceptions.MissingSchema("no scheme in auth_token=LEAKY")

    assert auth_mod.main([]) == 5
    err = capsys.readouterr().err
    assert "LEAKY" not in err
    assert "request failed" in err


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    factory = logging.getLogRecordFactory()
    level = root.level
    yield root
    logging.setLogRecordFactory(factory)
    root.setLevel(level)
    for h in root.handlers:
        for f in [f for f in h.filters if isinstance(f, auth_mod._RunIdFilter)]:
            h.removeFilter(f)


def test_configure_logging_stamps_run_id_on_third_party_records(restore_logging) -> None:
    auth_mod.configure_logging(run_id="run-abc123", level="DEBUG")

    record = logging.getLogger("urllib3.connectionpool").makeRecord(
        "urllib3.connectionpool", logging.DEBUG, __file__, 1, "Starting new HTTPS connection", (), None
    )
    formatted = logging.Formatter("%(levelname)s [%(name)s] [run=%(run_id)s] %(message)s").format(record)

    assert record.run_id == "run-abc123"
    assert formatted == "DEBUG [urllib3.connectionpool] [run=run-abc123] Starting new HTTPS connection"
    assert restore_logging.level == logging.DEBUG


def test_configure_logging_repeated_calls_do_not_stack(restore_logging) -> None:
    current = logging.getLogRecordFactory()
    original = getattr(current, "_wrapped_factory", current)
    handler = logging.NullHandler()
    restore_logging.addHandler(handler)
    try:
        auth_mod.configure_logging(run_id="first", level="INFO")
        auth_mod.configure_logging(run_id="second", level="INFO")

        factory = logging.getLogRecordFactory()
        assert factory._wrapped_factory is original
        assert logging.makeLogRecord({}).run_id == "second"
        run_filters = [f for f in handler.filters if isinstance(f, auth_mod._RunIdFilter)]
        assert len(run_filters) == 1
    finally:
        restore_logging.removeHandler(handler)
