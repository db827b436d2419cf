import json

import pytest

from flagkit.model import ErrorCode, Reason, ResolutionError
from flagkit.outbound import Configuration, OutboundError, Resolution
from flagkit.resolver import OutboundResolver, SuccessDto, new_outbound_resolver


class MockOutbound:
    def __init__(self, rsp=None, err=None):
        self.rsp = rsp if rsp is not None else Resolution()
        self.err = err
        self.calls = []

    def single(self, key, payload):
        self.calls.append((key, payload))
        if self.err is not None:
            raise self.err
        return self.rsp


SUCCESS = {
    "value": True,
    "key": "flagA",
    "reason": Reason.STATIC.value,
    "variant": "true",
    "metadata": {"key": "value"},
}


def _resolver(status, data=b"", headers=None, err=None):
    rsp = Resolution(data=data, status=status, headers=headers or {})
    return OutboundResolver(MockOutbound(rsp=rsp, err=err))


def _expect_code(resolver, code, key=""):
    with pytest.raises(ResolutionError) as info:
        resolver.resolve_single(key, {})
    assert info.value.code is code
    assert code.value in str(info.value)
    return info.value


def test_success_evaluation_response():
    resolver = _resolver(200, json.dumps(SUCCESS).encode())
    dto = resolver.resolve_single("", {})
    assert dto.value is True
    assert dto.variant == "true"
    assert dto.reason == Reason.STATIC.value
    assert dto.metadata["key"] == "value"


def test_invalid_payload_is_parse_error():
    _expect_code(_resolver(200, b"some payload"), ErrorCode.PARSE_ERROR)


def test_invalid_metadata_is_parse_error():
    data = json.dumps(dict(SUCCESS, metadata="metadata")).encode()
    _expect_code(_resolver(200, data), ErrorCode.PARSE_ERROR)


def test_no_metadata():
    data = json.dumps(dict(SUCCESS, metadata=None)).encode()
    dto = _resolver(200, data).resolve_single("", {})
    assert not dto.metadata
    assert dto == SuccessDto(value=True, reason=Reason.STATIC.value, variant="true")


def test_request_payload_wraps_context():
    client = MockOutbound(rsp=Resolution(data=json.dumps(SUCCESS).encode(), status=200))
    OutboundResolver(client).resolve_single("flagA", {"user": "u1"})
    key, payload = client.calls[0]
    assert key == "flagA"
    assert json.loads(payload) == {"context": {"user": "u1"}}


def test_unserialisable_context_is_general_error():
    client = MockOutbound()
    with pytest.raises(ResolutionError) as info:
        OutboundResolver(client).resolve_single("k", {"bad": object()})
    assert info.value.code is ErrorCode.GENERAL
    assert client.calls == []


@pytest.mark.parametrize(
    "resolver",
    [
        _resolver(0, err=OutboundError("some http error")),
        _resolver(503),
        _resolver(401),
        _resolver(403),
    ],
    ids=["http error", "unknown status", "401", "403"],
)
def test_general_errors(resolver):
    _expect_code(resolver, ErrorCode.GENERAL, key="key")


@pytest.mark.parametrize(
    "error_code, expect_code",
    [
        (ErrorCode.PARSE_ERROR, ErrorCode.PARSE_ERROR),
        (ErrorCode.TARGETING_KEY_MISSING, ErrorCode.TARGETING_KEY_MISSING),
        (ErrorCode.INVALID_CONTEXT, ErrorCode.INVALID_CONTEXT),
        (ErrorCode.GENERAL, ErrorCode.GENERAL),
        (ErrorCode.PROVIDER_NOT_READY, ErrorCode.GENERAL),
    ],
)
def test_evaluation_error_4xx(error_code, expect_code):
    data = json.dumps({"key": "", "errorCode": error_code.value, "errorDetails": ""}).encode()
    _expect_code(_resolver(400, data), expect_code)


def test_400_details_are_kept():
    data = json.dumps({"errorCode": ErrorCode.INVALID_CONTEXT.value, "errorDetails": "no ctx"}).encode()
    err = _expect_code(_resolver(400, data), ErrorCode.INVALID_CONTEXT)
    assert err.message == "no ctx"


def test_400_unparsable_body_is_general():
    _expect_code(_resolver(400, b"oops"), ErrorCode.GENERAL)


def test_flag_not_found_404():
    err = _expect_code(_resolver(404), ErrorCode.FLAG_NOT_FOUND, key="my-flag")
    assert err.message == "flag for key 'my-flag' does not exist"


def test_429_with_seconds():
    err = _expect_code(_resolver(429, headers={"Retry-After": "10"}), ErrorCode.GENERAL)
    assert err.message == "rate limit exceeded, try again after 10.000000 seconds"


def test_429_with_date():
    headers = {"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}
    err = _expect_code(_resolver(429, headers=headers), ErrorCode.GENERAL)
    assert err.message.startswith("rate limit exceeded, try again after -")


def test_429_without_header():
    err = _expect_code(_resolver(429), ErrorCode.GENERAL)
    assert err.message == "rate limit exceeded"


def test_500_without_body():
    _expect_code(_resolver(500, b""), ErrorCode.GENERAL)


def test_500_with_valid_body():
    data = json.dumps({"errorDetails": "some error detail"}).encode()
    err = _expect_code(_resolver(500, data), ErrorCode.GENERAL)
    assert err.message == "some error detail"


def test_500_with_invalid_body():
    err = _expect_code(_resolver(500, b"some error"), ErrorCode.GENERAL)
    assert err.message.startswith("error parsing error payload")


def test_new_outbound_resolver_reports_request_errors():
    resolver = new_outbound_resolver(Configuration(base_uri="not a uri"))
    with pytest.raises(ResolutionError) as info:
        resolver.resolve_single("flag", {})
    assert info.value.code is ErrorCode.GENERAL
    assert info.value.message.startswith("ofrep request error")