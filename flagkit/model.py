"""Core types shared by flag evaluators and providers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, Protocol, TypeVar

T = TypeVar("T")


class Reason(str, enum.Enum):
    """Why a flag resolved to the value it did."""

    STATIC = "STATIC"
    DEFAULT = "DEFAULT"
    TARGETING_MATCH = "TARGETING_MATCH"
    SPLIT = "SPLIT"
    CACHED = "CACHED"
    DISABLED = "DISABLED"
    UNKNOWN = "UNKNOWN"
    ERROR = "ERROR"


class ErrorCode(str, enum.Enum):
    """Category of a failed flag resolution."""

    PROVIDER_NOT_READY = "PROVIDER_NOT_READY"
    FLAG_NOT_FOUND = "FLAG_NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    TARGETING_KEY_MISSING = "TARGETING_KEY_MISSING"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    GENERAL = "GENERAL"


class ResolutionError(Exception):
    """A flag could not be resolved; carries an error code and a message."""

    def __init__(self, code: ErrorCode | str, message: str) -> None:
        self.code = ErrorCode(code)
        self.message = message
        super().__init__(self.code, message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


@dataclass
class ResolutionDetail(Generic[T]):
    """The outcome of resolving one flag."""

    value: T
    reason: str = ""
    variant: str = ""
    resolution_error: Optional[ResolutionError] = None
    flag_metadata: Optional[Mapping[str, Any]] = field(default=None)

    @property
    def error_code(self) -> Optional[ErrorCode]:
        """The error code, or None when resolution succeeded."""
        return self.resolution_error.code if self.resolution_error else None

    @property
    def error_message(self) -> str:
        """The error message, or an empty string when resolution succeeded."""
        return self.resolution_error.message if self.resolution_error else ""


@dataclass(frozen=True)
class Metadata:
    """Descriptive information about a provider."""

    name: str


class Evaluator(Protocol):
    """Contract for typed flag evaluation."""

    def resolve_boolean(
        self, key: str, default_value: bool, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[bool]:
        """Resolve a boolean flag."""

    def resolve_string(
        self, key: str, default_value: str, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[str]:
        """Resolve a string flag."""

    def resolve_float(
        self, key: str, default_value: float, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[float]:
        """Resolve a float flag."""

    def resolve_int(
        self, key: str, default_value: int, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[int]:
        """Resolve an integer flag."""

    def resolve_object(
        self, key: str, default_value: Any, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[Any]:
        """Resolve a flag of arbitrary structure."""


def context_value_to_str(value: Any) -> str:
    """Render a scalar evaluation-context value as a string.

    Raises TypeError for anything other than str, int, float or bool.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return f"{value:d}"
    if isinstance(value, float):
        return f"{value:.6f}"
    raise TypeError(f"value of type {type(value).__name__} can not be converted to string")