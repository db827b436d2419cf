"""HTTP transport for the remote flag evaluation protocol."""

from __future__ import annotations

import http.client
import posixpath
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

OFREP_V1 = "/ofrep/v1/evaluate/flags/"

HeaderCallback = Callable[[], "tuple[str, str]"]


@dataclass
class Configuration:
    """Settings for the outbound HTTP client."""

    base_uri: str = ""
    callbacks: list = field(default_factory=list)
    client: Optional[urllib.request.OpenerDirector] = None
    timeout: float = 10.0


@dataclass(frozen=True)
class Resolution:
    """A raw HTTP response from the evaluation service."""

    data: bytes = b""
    status: int = 0
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Look up a response header, ignoring case."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class OutboundError(Exception):
    """The request to the evaluation service could not be completed."""


def _join_path(base_uri: str, key: str) -> str:
    parts = urllib.parse.urlsplit(base_uri)
    if not parts.scheme or not parts.netloc:
        raise OutboundError(f"error building request path: invalid base URI {base_uri!r}")
    joined = posixpath.normpath("/".join(["/", parts.path, OFREP_V1, key]))
    path = "/" + joined.lstrip("/")
    if key.endswith("/") and not path.endswith("/"):
        path += "/"
    return urllib.parse.urlunsplit(
        (parts.scheme, parts.netloc, urllib.parse.quote(path, safe="/"), "", "")
    )


class HttpOutbound:
    """Posts evaluation requests to the service over HTTP."""

    def __init__(self, configuration: Configuration) -> None:
        self._base_uri = configuration.base_uri
        self._callbacks = list(configuration.callbacks)
        self._client = configuration.client or urllib.request.build_opener()
        self._timeout = configuration.timeout

    def single(self, key: str, payload: bytes) -> Resolution:
        """Request evaluation of one flag and return the raw response."""
        url = _join_path(self._base_uri, key)
        request = urllib.request.Request(url, data=bytes(payload), method="POST")
        request.add_header("Content-Type", "application/json")
        for callback in self._callbacks:
            name, value = callback()
            request.add_header(name, value)

        try:
            with self._client.open(request, timeout=self._timeout) as response:
                return Resolution(
                    data=response.read(),
                    status=response.status,
                    headers=response.headers,
                )
        except urllib.error.HTTPError as err:
            with err:
                try:
                    body = err.read()
                except OSError as read_err:
                    raise OutboundError(f"error reading response: {read_err}") from read_err
            return Resolution(data=body, status=err.code, headers=err.headers or {})
        except (urllib.error.URLError, OSError, http.client.HTTPException) as err:
            raise OutboundError(str(err)) from err