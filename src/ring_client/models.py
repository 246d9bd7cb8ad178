"""
Data models for the Ring login response.

The session endpoint returns `{"profile": {...}}`; the profile carries account
identity, the authentication token and a large table of feature flags. JSON
keys map one-to-one onto dataclass attribute names.

Decoding rules:
- missing keys and JSON null decode to the zero value ("" / 0 / False)
- a value of the wrong JSON type is rejected
- in strict mode (the default) unknown keys are rejected at every level
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, TypeVar, get_type_hints

from .exceptions import ResponseFormatError

T = TypeVar("T")


@dataclass(frozen=True)
class Features:
    """Feature flags enabled for the account's doorbells and cameras."""

    remote_logging_format_storing: bool = False
    remote_logging_level: int = 0
    subscriptions_enabled: bool = False
    stickupcam_setup_enabled: bool = False
    vod_enabled: bool = False
    ringplus_enabled: bool = False
    lpd_enabled: bool = False
    reactive_snoozing_enabled: bool = False
    proactive_snoozing_enabled: bool = False
    owner_proactive_snoozing_enabled: bool = False
    live_view_settings_enabled: bool = False
    delete_all_settings_enabled: bool = False
    power_cable_enabled: bool = False
    device_health_alerts_enabled: bool = False
    chime_pro_enabled: bool = False
    multiple_calls_enabled: bool = False
    ujet_enabled: bool = False
    multiple_delete_enabled: bool = False
    delete_all_enabled: bool = False
    lpd_motion_announcement_enabled: bool = False
    starred_events_enabled: bool = False
    chime_dnd_enabled: bool = False
    video_search_enabled: bool = False
    floodlight_cam_enabled: bool = False
    ring_cam_battery_enabled: bool = False
    elite_cam_enabled: bool = False
    doorbell_v2_enabled: bool = False
    spotlight_battery_dashboard_controls_enabled: bool = False
    bypass_account_verification: bool = False
    legacy_cvr_retention_enabled: bool = False
    ring_cam_enabled: bool = False
    ring_search_enabled: bool = False
    ring_cam_mount_enabled: bool = False
    ring_alarm_enabled: bool = False
    in_app_call_notifications: bool = False
    ring_cash_eligible_enabled: bool = False
    app_alert_tones_enabled: bool = False
    motion_snoozing_enabled: bool = False
    history_classification_enabled: bool = False
    tile_dashboard_enabled: bool = False
    tile_dashboard_mode: str = ""
    scrubber_auto_live_enabled: bool = False
    scrubber_enabled: bool = False
    nw_enabled: bool = False
    nw_v2_enabled: bool = False
    nw_feed_types_enabled: bool = False
    nw_larger_area_enabled: bool = False
    nw_user_activated: bool = False
    nw_notification_types_enabled: bool = False
    nw_notification_radius_enabled: bool = False
    nw_map_view_feature_enabled: bool = False

    @classmethod
    def from_dict(cls, payload: Any, *, strict: bool = True, path: str = "features") -> "Features":
        return _decode_object(cls, payload, strict=strict, path=path)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Profile:
    """
    Account profile returned by the session endpoint.

    Attributes:
        id: Numeric account id
        authentication_token: Token to attach to subsequent API calls
        hardware_id: Echo of the hardware id sent in the login form
        features: Feature flags for the account
    """

    id: int = 0
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    authentication_token: str = ""
    hardware_id: str = ""
    explorer_program_terms: str = ""
    user_flow: str = ""
    app_brand: str = ""
    features: Features = field(default_factory=Features)

    @classmethod
    def from_dict(cls, payload: Any, *, strict: bool = True, path: str = "profile") -> "Profile":
        return _decode_object(cls, payload, strict=strict, path=path)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class LoginResponse:
    """Top-level body of a successful login (HTTP 201)."""

    profile: Profile = field(default_factory=Profile)

    @classmethod
    def from_dict(cls, payload: Any, *, strict: bool = True) -> "LoginResponse":
        """
        Decode a parsed JSON body.

        Raises:
            ResponseFormatError: wrong shape, wrong value types, or (strict)
                unknown keys. The message names the dotted key path.
        """
        return _decode_object(cls, payload, strict=strict, path="")

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _decode_value(expected: Any, value: Any, *, strict: bool, path: str) -> Any:
    if dataclasses.is_dataclass(expected):
        if value is None:
            return expected()
        return _decode_object(expected, value, strict=strict, path=path)
    if value is None:
        return expected()
    # bool is a subclass of int in Python but not a JSON number.
    if expected is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ResponseFormatError(
                f"Invalid value for '{path}': expected integer, got {type(value).__name__}."
            )
        return value
    if not isinstance(value, expected):
        raise ResponseFormatError(
            f"Invalid value for '{path}': expected {expected.__name__}, got {type(value).__name__}."
        )
    return value


def _decode_object(cls: type[T], payload: Any, *, strict: bool, path: str) -> T:
    where = f"'{path}'" if path else "response body"
    if not isinstance(payload, dict):
        raise ResponseFormatError(
            f"Unexpected JSON shape for {where}: expected object, got {type(payload).__name__}."
        )

    hints = get_type_hints(cls)
    names = [f.name for f in dataclasses.fields(cls)]

    if strict:
        unknown = sorted(str(k) for k in payload if k not in hints)
        if unknown:
            raise ResponseFormatError(
                f"Unknown field(s) in {where}: {', '.join(_join(path, k) for k in unknown)}"
            )

    kwargs: dict[str, Any] = {}
    for name in names:
        if name in payload:
            kwargs[name] = _decode_value(hints[name], payload[name], strict=strict, path=_join(path, name))
    return cls(**kwargs)


__all__ = ["Features", "LoginResponse", "Profile"]
