"""Typed flag evaluation on top of a single-flag resolver."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from flagkit.model import ErrorCode, Reason, ResolutionDetail, ResolutionError
from flagkit.outbound import Configuration
from flagkit.resolver import SuccessDto, new_outbound_resolver

T = TypeVar("T")


class _Resolver(Protocol):
    def resolve_single(self, key: str, eval_ctx: Optional[Mapping[str, Any]]) -> SuccessDto:
        """Resolve one flag or raise ResolutionError."""


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise TypeError(value)


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise TypeError(value)


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(value)
    return float(value)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeError(value)


class Flags:
    """Flag evaluator: applies typing and reason rules to resolver results."""

    def __init__(self, resolver: _Resolver) -> None:
        self._resolver = resolver

    def _resolve(
        self,
        key: str,
        default_value: Any,
        eval_ctx: Optional[Mapping[str, Any]],
        kind: str,
        convert: Optional[Callable[[Any], Any]] = None,
    ) -> ResolutionDetail[Any]:
        try:
            success = self._resolver.resolve_single(key, eval_ctx)
        except ResolutionError as err:
            return ResolutionDetail(
                value=default_value, reason=Reason.ERROR, resolution_error=err
            )

        if success.reason == Reason.DISABLED.value:
            return ResolutionDetail(
                value=default_value,
                reason=Reason.DISABLED,
                variant=success.variant,
                flag_metadata=success.metadata,
            )

        value = success.value
        if convert is not None:
            try:
                value = convert(success.value)
            except TypeError:
                return ResolutionDetail(
                    value=default_value,
                    reason=Reason.ERROR,
                    resolution_error=ResolutionError(
                        ErrorCode.TYPE_MISMATCH,
                        f"resolved value {success.value} is not of {kind} type",
                    ),
                )

        return ResolutionDetail(
            value=value,
            reason=success.reason,
            variant=success.variant,
            flag_metadata=success.metadata,
        )

    def resolve_boolean(
        self, key: str, default_value: bool, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[bool]:
        """Resolve a boolean flag."""
        return self._resolve(key, default_value, eval_ctx, "boolean", _as_bool)

    def resolve_string(
        self, key: str, default_value: str, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[str]:
        """Resolve a string flag."""
        return self._resolve(key, default_value, eval_ctx, "string", _as_str)

    def resolve_float(
        self, key: str, default_value: float, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[float]:
        """Resolve a float flag."""
        return self._resolve(key, default_value, eval_ctx, "float", _as_float)

    def resolve_int(
        self, key: str, default_value: int, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[int]:
        """Resolve an integer flag; integral floats are accepted."""
        return self._resolve(key, default_value, eval_ctx, "integer", _as_int)

    def resolve_object(
        self, key: str, default_value: Any, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[Any]:
        """Resolve a flag of arbitrary structure."""
        return self._resolve(key, default_value, eval_ctx, "object")


def new_flags_evaluator(configuration: Configuration) -> Flags:
    """Build an evaluator that resolves flags over HTTP."""
    return Flags(new_outbound_resolver(configuration))