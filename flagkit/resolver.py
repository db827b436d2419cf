"""Flag resolution over the remote evaluation protocol."""

from __future__ import annotations

import email.utils
import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Protocol

from flagkit.model import ErrorCode, ResolutionError
from flagkit.outbound import Configuration, HttpOutbound, OutboundError, Resolution

_KNOWN_400_CODES = {
    ErrorCode.PARSE_ERROR.value: ErrorCode.PARSE_ERROR,
    ErrorCode.TARGETING_KEY_MISSING.value: ErrorCode.TARGETING_KEY_MISSING,
    ErrorCode.INVALID_CONTEXT.value: ErrorCode.INVALID_CONTEXT,
    ErrorCode.GENERAL.value: ErrorCode.GENERAL,
}


class _Outbound(Protocol):
    def single(self, key: str, payload: bytes) -> Resolution:
        """Send one evaluation request."""


@dataclass
class SuccessDto:
    """A successfully evaluated flag as reported by the service."""

    value: Any = None
    reason: str = ""
    variant: str = ""
    metadata: Optional[dict] = None


def _decode_object(data: bytes, string_fields: tuple) -> dict:
    parsed = json.loads(data)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    for name in string_fields:
        value = parsed.get(name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"field {name!r} must be a string")
    return parsed


def _parse_success(data: bytes) -> SuccessDto:
    try:
        obj = _decode_object(data, ("key", "reason", "variant"))
    except ValueError as err:
        raise ResolutionError(ErrorCode.PARSE_ERROR, f"error parsing the response: {err}") from err
    metadata = obj.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise ResolutionError(
            ErrorCode.PARSE_ERROR,
            "metadata must be a map of string keys and arbitrary values",
        )
    return SuccessDto(
        value=obj.get("value"),
        reason=obj.get("reason") or "",
        variant=obj.get("variant") or "",
        metadata=metadata,
    )


def _error_400(data: bytes) -> ResolutionError:
    try:
        obj = _decode_object(data, ("key", "errorCode", "errorDetails"))
    except ValueError as err:
        return ResolutionError(ErrorCode.GENERAL, f"error parsing error payload: {err}")
    code = _KNOWN_400_CODES.get(obj.get("errorCode") or "", ErrorCode.GENERAL)
    return ResolutionError(code, obj.get("errorDetails") or "")


def _error_500(data: bytes) -> ResolutionError:
    try:
        obj = _decode_object(data, ("errorDetails",))
    except ValueError as err:
        return ResolutionError(ErrorCode.GENERAL, f"error parsing error payload: {err}")
    return ResolutionError(ErrorCode.GENERAL, obj.get("errorDetails") or "")


def _retry_after_seconds(resolution: Resolution) -> float:
    value = resolution.header("Retry-After")
    if not value:
        return 0.0
    if re.fullmatch(r"[+-]?\d+", value):
        return float(int(value))
    try:
        parsed = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - datetime.now(timezone.utc)).total_seconds()


def _rate_limited(resolution: Resolution) -> ResolutionError:
    after = _retry_after_seconds(resolution)
    if after == 0:
        return ResolutionError(ErrorCode.GENERAL, "rate limit exceeded")
    return ResolutionError(
        ErrorCode.GENERAL, f"rate limit exceeded, try again after {after:f} seconds"
    )


class OutboundResolver:
    """Resolves flags by calling the evaluation service."""

    def __init__(self, client: _Outbound) -> None:
        self._client = client

    def resolve_single(self, key: str, eval_ctx: Optional[Mapping[str, Any]]) -> SuccessDto:
        """Evaluate one flag; raises ResolutionError when it cannot be resolved."""
        try:
            context = dict(eval_ctx) if eval_ctx is not None else None
            payload = json.dumps({"context": context}).encode("utf-8")
        except (TypeError, ValueError) as err:
            raise ResolutionError(ErrorCode.GENERAL, f"context marshalling error: {err}") from err

        try:
            response = self._client.single(key, payload)
        except (OutboundError, OSError) as err:
            raise ResolutionError(ErrorCode.GENERAL, f"ofrep request error: {err}") from err

        status = response.status
        if status == 200:
            return _parse_success(response.data)
        if status == 400:
            raise _error_400(response.data)
        if status in (401, 403):
            raise ResolutionError(ErrorCode.GENERAL, "authentication/authorization error")
        if status == 404:
            raise ResolutionError(ErrorCode.FLAG_NOT_FOUND, f"flag for key '{key}' does not exist")
        if status == 429:
            raise _rate_limited(response)
        if status == 500:
            raise _error_500(response.data)
        raise ResolutionError(ErrorCode.GENERAL, "invalid response")


def new_outbound_resolver(configuration: Configuration) -> OutboundResolver:
    """Build a resolver that talks HTTP using the given configuration."""
    return OutboundResolver(HttpOutbound(configuration))