# flagkit

flagkit evaluates feature flags against a service that speaks the
OpenFeature Remote Evaluation Protocol (OFREP). It also has helpers that
turn a flat evaluation context into user and context objects in the shape
that Statsig and Unleash expect.

It uses only the standard library.

## Installation

```
pip install flagkit
```

## Evaluating flags over OFREP

```python
from flagkit.provider import Provider, with_bearer_token

provider = Provider("https://flags.example.com", with_bearer_token("token"))

detail = provider.boolean_evaluation("new-checkout", False, {"targetingKey": "user-1"})
print(detail.value, detail.reason, detail.variant)
```

Every evaluation returns a `flagkit.model.ResolutionDetail`. It has the
fields `value`, `reason`, `variant`, `resolution_error` and `flag_metadata`,
and the properties `error_code` and `error_message`.

The evaluation call does not raise. If the flag does not exist, the server
rejects the request, the request fails or the value has the wrong type, the
detail holds your default value, the reason `Reason.ERROR` and a
`ResolutionError` that carries an `ErrorCode`. If the service reports the
flag as `DISABLED`, the detail holds your default value and the reason
`Reason.DISABLED`, with no error.

There is one method for each value type:

- `boolean_evaluation` accepts only a boolean value.
- `string_evaluation` accepts only a string value.
- `float_evaluation` accepts any number that is not a boolean and returns it as a float.
- `int_evaluation` accepts integers, and floats that hold a whole number.
- `object_evaluation` accepts any value.

`Provider.metadata()` returns a `Metadata` with the provider's name.
`Provider.hooks()` returns an empty list.

Options passed to `Provider` after the base URI:

- `with_bearer_token(token)` sends `Authorization: Bearer <token>`.
- `with_api_key_auth(token)` sends `X-API-Key: <token>`.
- `with_header_provider(callback)` adds a header. The callback takes no arguments and returns a `(name, value)` pair.
- `with_client(client)` uses the given `urllib.request.OpenerDirector` to send requests instead of a default one.

Requests time out after 10 seconds. Each flag is evaluated with a `POST` to
`<base>/ofrep/v1/evaluate/flags/<key>`, with the header
`Content-Type: application/json` and the JSON body `{"context": ...}`.

## Lower-level pieces

- `flagkit.outbound.HttpOutbound` sends the HTTP requests and returns a `Resolution` with the body, status and headers. It raises `OutboundError` when the request cannot be completed. `Configuration` holds the base URI, the header callbacks, the client and the timeout.
- `flagkit.resolver.OutboundResolver` turns a response into a `SuccessDto` or raises a `ResolutionError`. It handles the status codes 200, 400, 401, 403, 404, 429 and 500. Any other status is a general error. For 429 the error message includes the `Retry-After` delay when the header is given, in seconds or as an HTTP date.
- `flagkit.flags.Flags` checks the type of the resolved value and builds the detail. `new_flags_evaluator(configuration)` builds one that talks HTTP.

You can pass any object with a `resolve_single(key, eval_ctx)` method to
`Flags` to test evaluation without a server.

## Context helpers

```python
from flagkit.statsig_user import FeatureConfig, FeatureConfigType, to_feature_config, to_statsig_user
from flagkit.unleash_context import to_unleash_context

user = to_statsig_user({"UserID": "123", "Email": "user@example.com", "plan": "pro"})
config = to_feature_config(
    {"feature_config": FeatureConfig(FeatureConfigType.CONFIG, "test_config")}
)
ctx = to_unleash_context({"UserId": "111", "Environment": "test-env"})
```

`to_statsig_user` fills the known fields of a `StatsigUser` from keys such
as `UserID` or `targetingKey`, `Email`, `Country` and `CustomIDs`. It skips
the `feature_config` key and puts every other key into `custom`. It raises
`ResolutionError` with code `TARGETING_KEY_MISSING` when no user id is
present, and with code `INVALID_CONTEXT` when a value has the wrong type.

`to_feature_config` returns the `FeatureConfig` stored under
`feature_config`, or raises `ResolutionError` with code `GENERAL` when there
is none.

`to_unleash_context` turns every value into a string. Known keys such as
`UserId`, `AppName` and `CurrentTime` fill the fields of an
`UnleashContext`, and all other keys go into `properties`. It raises
`ResolutionError` with code `INVALID_CONTEXT` for values that are not
strings, numbers or booleans.

Numbers are written as `%d` for integers and with six decimal places for
floats, and booleans as `true` or `false`.

## What this package does not do

The Statsig and Unleash helpers only build context objects. flagkit does not
talk to Statsig or Unleash, and it has no providers that evaluate flags
against them. Only OFREP evaluation is included.