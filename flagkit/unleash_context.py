"""Conversion of flat evaluation contexts into Unleash contexts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from flagkit.model import ErrorCode, ResolutionError, context_value_to_str

_FIELDS = {
    "AppName": "app_name",
    "CurrentTime": "current_time",
    "Environment": "environment",
    "RemoteAddress": "remote_address",
    "SessionId": "session_id",
    "UserId": "user_id",
}


@dataclass
class UnleashContext:
    """The context Unleash evaluates toggles against."""

    app_name: str = ""
    current_time: str = ""
    environment: str = ""
    remote_address: str = ""
    session_id: str = ""
    user_id: str = ""
    properties: Optional[dict] = None


def to_unleash_context(eval_ctx: Optional[Mapping[str, Any]]) -> UnleashContext:
    """Build an UnleashContext from a flat evaluation context.

    Every value is rendered as a string. Well-known keys fill the matching
    fields and all other keys become properties. Raises ResolutionError when
    a value cannot be rendered as a string.
    """
    if not eval_ctx:
        return UnleashContext()

    context = UnleashContext()
    properties: dict = {}
    for key, value in eval_ctx.items():
        try:
            text = context_value_to_str(value)
        except TypeError as err:
            raise ResolutionError(
                ErrorCode.INVALID_CONTEXT,
                f"key `{key}` can not be converted to string",
            ) from err
        field_name = _FIELDS.get(key)
        if field_name is None:
            properties[key] = text
        else:
            setattr(context, field_name, text)

    context.properties = properties
    return context