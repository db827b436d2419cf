"""Feature-flag provider backed by a remote evaluation service."""

from __future__ import annotations

import urllib.request
from typing import Any, Callable, Mapping, Optional

from flagkit.flags import new_flags_evaluator
from flagkit.model import Evaluator, Metadata, ResolutionDetail
from flagkit.outbound import Configuration, HeaderCallback

Option = Callable[[Configuration], None]


class Provider:
    """Provider for the remote flag evaluation protocol."""

    def __init__(self, base_uri: str, *args: Option) -> None:
        configuration = Configuration(base_uri=base_uri)
        for option in args:
            option(configuration)
        self._evaluator: Evaluator = new_flags_evaluator(configuration)

    def metadata(self) -> Metadata:
        """Describe this provider."""
        return Metadata(name="OpenFeature Remote Evaluation Protocol Provider")

    def boolean_evaluation(
        self, flag: str, default_value: bool, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[bool]:
        """Evaluate a boolean flag."""
        return self._evaluator.resolve_boolean(flag, default_value, eval_ctx)

    def string_evaluation(
        self, flag: str, default_value: str, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[str]:
        """Evaluate a string flag."""
        return self._evaluator.resolve_string(flag, default_value, eval_ctx)

    def float_evaluation(
        self, flag: str, default_value: float, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[float]:
        """Evaluate a float flag."""
        return self._evaluator.resolve_float(flag, default_value, eval_ctx)

    def int_evaluation(
        self, flag: str, default_value: int, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[int]:
        """Evaluate an integer flag."""
        return self._evaluator.resolve_int(flag, default_value, eval_ctx)

    def object_evaluation(
        self, flag: str, default_value: Any, eval_ctx: Optional[Mapping[str, Any]]
    ) -> ResolutionDetail[Any]:
        """Evaluate a flag of arbitrary structure."""
        return self._evaluator.resolve_object(flag, default_value, eval_ctx)

    def hooks(self) -> list:
        """This provider has no hooks."""
        return []


def with_header_provider(callback: HeaderCallback) -> Option:
    """Add a callback supplying a custom request header."""

    def apply(configuration: Configuration) -> None:
        configuration.callbacks.append(callback)

    return apply


def with_bearer_token(token: str) -> Option:
    """Authorize requests with a bearer token."""
    return with_header_provider(lambda: ("Authorization", f"Bearer {token}"))


def with_api_key_auth(token: str) -> Option:
    """Authorize requests with an API key header."""
    return with_header_provider(lambda: ("X-API-Key", token))


def with_client(client: urllib.request.OpenerDirector) -> Option:
    """Use a pre-configured HTTP opener for talking to the service."""

    def apply(configuration: Configuration) -> None:
        configuration.client = client

    return apply