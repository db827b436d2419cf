"""Conversion of flat evaluation contexts into Statsig users and feature configs."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from flagkit.model import ErrorCode, ResolutionError, context_value_to_str

TARGETING_KEY = "targetingKey"
FEATURE_CONFIG_KEY = "feature_config"

_STRING_FIELDS = {
    TARGETING_KEY: "user_id",
    "UserID": "user_id",
    "Email": "email",
    "IpAddress": "ip_address",
    "UserAgent": "user_agent",
    "Country": "country",
    "Locale": "locale",
    "AppVersion": "app_version",
}


class FeatureConfigType(str, enum.Enum):
    """Kind of Statsig entity a flag is read from."""

    CONFIG = "CONFIG"
    LAYER = "LAYER"


@dataclass(frozen=True)
class FeatureConfig:
    """Names the dynamic config or layer that holds a flag's value."""

    feature_config_type: FeatureConfigType | str
    name: str


@dataclass
class StatsigUser:
    """The user attributes Statsig evaluates against."""

    user_id: str = ""
    email: str = ""
    ip_address: str = ""
    user_agent: str = ""
    country: str = ""
    locale: str = ""
    app_version: str = ""
    custom: Optional[dict] = None
    private_attributes: Optional[dict] = None
    statsig_environment: Optional[dict] = None
    custom_ids: Optional[dict] = None


def _invalid(message: str) -> ResolutionError:
    return ResolutionError(ErrorCode.INVALID_CONTEXT, message)


def _string_keyed(value: Any) -> bool:
    return isinstance(value, Mapping) and all(isinstance(k, str) for k in value)


def _string_map(value: Any) -> bool:
    return _string_keyed(value) and all(isinstance(v, str) for v in value.values())


def to_statsig_user(eval_ctx: Optional[Mapping[str, Any]]) -> StatsigUser:
    """Build a StatsigUser from a flat evaluation context.

    Well-known keys fill the matching user fields, the feature config key is
    ignored, and every other key lands in the custom attributes. Raises
    ResolutionError when a value has the wrong type or no user id is given.
    """
    if not eval_ctx:
        return StatsigUser()

    user = StatsigUser()
    for key, value in eval_ctx.items():
        if key in _STRING_FIELDS:
            try:
                text = context_value_to_str(value)
            except TypeError as err:
                raise _invalid(f"key `{key}` can not be converted to string") from err
            setattr(user, _STRING_FIELDS[key], text)
        elif key == "Custom":
            if not _string_keyed(value):
                raise _invalid(f"key `{key}` can not be converted to map")
            if user.custom is None:
                user.custom = dict(value)
            else:
                user.custom.update(value)
        elif key == "PrivateAttributes":
            if not _string_keyed(value):
                raise _invalid(f"key `{key}` can not be converted to map")
            user.private_attributes = dict(value)
        elif key == "StatsigEnvironment":
            if not _string_map(value):
                raise _invalid(f"key `{key}` can not be converted to map")
            user.statsig_environment = dict(value)
        elif key == "CustomIDs":
            if not _string_map(value):
                raise _invalid(f"key `{key}` can not be converted to map")
            user.custom_ids = dict(value)
        elif key == FEATURE_CONFIG_KEY:
            continue
        else:
            if user.custom is None:
                user.custom = {}
            user.custom[key] = value

    if not user.user_id:
        raise ResolutionError(
            ErrorCode.TARGETING_KEY_MISSING, "UserID/targetingKey is missing"
        )
    return user


def to_feature_config(eval_ctx: Optional[Mapping[str, Any]]) -> FeatureConfig:
    """Return the FeatureConfig stored in the context; raise ResolutionError if absent."""
    config = eval_ctx.get(FEATURE_CONFIG_KEY) if eval_ctx else None
    if not isinstance(config, FeatureConfig):
        raise ResolutionError(
            ErrorCode.GENERAL, f"`{FEATURE_CONFIG_KEY}` not found at evaluation context."
        )
    return config