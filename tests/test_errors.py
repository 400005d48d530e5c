"""
HelpingAI SDK - Error Classification Tests
"""

import httpx
import pytest

from helpingai.errors import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    ContentFilterError,
    ErrorEnvelope,
    HAIError,
    InvalidAPIKeyError,
    InvalidModelError,
    InvalidRequestError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
    StreamDecodeError,
    TimeoutError,
    TooManyRequestsError,
    classify_error,
    extract_model_name,
    is_retryable_error,
    parse_error_envelope,
    parse_retry_after,
    translate_transport_errors,
)


def error_body(message, type=None, code=None, param=None):
    return {"error": {"message": message, "type": type, "code": code, "param": param}}


class TestClassifyError:
    """Status and body to error class mapping."""

    def test_401_is_invalid_api_key(self):
        error = classify_error(401, {}, error_body("bad key"))
        assert isinstance(error, InvalidAPIKeyError)
        assert isinstance(error, AuthenticationError)
        assert error.status_code == 401

    def test_400_mentioning_model(self):
        """A 400 about a model carries the quoted model name."""
        error = classify_error(400, {}, error_body("Model 'gpt-x' not found"))
        assert isinstance(error, InvalidModelError)
        assert error.model == "gpt-x"
        assert error.param == "model"

    def test_400_model_without_quotes(self):
        error = classify_error(400, {}, error_body("model does not exist"))
        assert isinstance(error, InvalidModelError)
        assert error.model == "unknown"

    def test_400_other(self):
        error = classify_error(
            400, {}, error_body("temperature out of range", code="bad_value", param="temperature")
        )
        assert type(error) is InvalidRequestError
        assert error.param == "temperature"
        assert error.code == "bad_value"
        assert "(Parameter: temperature)" in str(error)
        assert "(Error Code: bad_value)" in str(error)

    def test_429_with_retry_after(self):
        error = classify_error(429, {"Retry-After": "60"}, error_body("slow down"))
        assert isinstance(error, TooManyRequestsError)
        assert isinstance(error, RateLimitError)
        assert error.retry_after == 60
        assert "Retry after: 60 seconds" in str(error)

    def test_429_without_retry_after(self):
        error = classify_error(429, {}, None)
        assert isinstance(error, TooManyRequestsError)
        assert error.retry_after is None

    def test_429_unparsable_retry_after(self):
        error = classify_error(429, {"retry-after": "soon"}, None)
        assert error.retry_after is None

    def test_503_is_service_unavailable(self):
        error = classify_error(503, {}, None)
        assert isinstance(error, ServiceUnavailableError)

    @pytest.mark.parametrize("status", [500, 502, 504])
    def test_5xx_is_server_error(self, status):
        error = classify_error(status, {}, error_body("boom"))
        assert isinstance(error, ServerError)
        assert error.message == "boom"
        assert error.code == "server_error"

    def test_content_filter_type(self):
        error = classify_error(403, {}, error_body("flagged", type="content_filter_violation"))
        assert isinstance(error, ContentFilterError)
        assert error.code == "content_filter"

    def test_fallback_is_api_error(self):
        error = classify_error(404, {}, error_body("nope", type="not_found", code="missing"))
        assert type(error) is APIError
        assert error.type == "not_found"
        assert error.code == "missing"
        assert str(error) == "nope (HTTP 404) (Code: missing) (Type: not_found)"

    def test_unparsable_body(self):
        """A body that did not parse still produces an error."""
        error = classify_error(418, {}, None)
        assert type(error) is APIError
        assert error.message == "Unknown error occurred"

    def test_headers_lower_cased(self):
        error = classify_error(500, {"X-Request-ID": "abc"}, None)
        assert error.headers == {"x-request-id": "abc"}


class TestErrorEnvelope:
    """Error body normalization."""

    def test_nested_object(self):
        envelope = parse_error_envelope(error_body("m", type="t", code="c", param="p"))
        assert envelope == ErrorEnvelope(message="m", type="t", code="c", param="p")

    def test_string_error(self):
        assert parse_error_envelope({"error": "plain"}) == ErrorEnvelope(message="plain")

    def test_flat_body(self):
        envelope = parse_error_envelope({"message": "flat", "type": "invalid_request_error"})
        assert envelope.message == "flat"
        assert envelope.type == "invalid_request_error"

    def test_missing_message(self):
        assert parse_error_envelope({"error": {}}).message == "Unknown error"

    @pytest.mark.parametrize("body", [None, "text", ["a"]])
    def test_non_object(self, body):
        assert parse_error_envelope(body).message == "Unknown error occurred"

    @pytest.mark.parametrize("body, expected", [
        ({"error": {"message": "nope", "type": 7}}, ErrorEnvelope(message="nope", type="7")),
        ({"error": {"message": ["bad"]}}, ErrorEnvelope(message="Unknown error")),
        ({"message": 42}, ErrorEnvelope(message="Unknown error")),
        ({"error": {"message": None, "code": {"x": 1}, "param": True}},
         ErrorEnvelope(message="Unknown error")),
        ({"error": {"message": "m", "code": 1001}}, ErrorEnvelope(message="m", code="1001")),
        ({"error": ""}, ErrorEnvelope(message="Unknown error")),
    ])
    def test_wrongly_typed_fields(self, body, expected):
        """Non-string fields are dropped or stringified, never passed through."""
        assert parse_error_envelope(body) == expected

    @pytest.mark.parametrize("status, body, error_class", [
        (403, {"error": {"message": "nope", "type": 7}}, APIError),
        (400, {"error": {"message": ["bad"]}}, InvalidRequestError),
        (400, {"message": 42}, InvalidRequestError),
        (403, {"error": {"message": {"text": "x"}, "type": ["content_filter"]}}, APIError),
    ])
    def test_classifier_survives_wrongly_typed_fields(self, status, body, error_class):
        error = classify_error(status, {}, body)
        assert type(error) is error_class
        assert isinstance(error.message, str)


class TestHelpers:
    """Header and message helpers."""

    def test_parse_retry_after_case_insensitive(self):
        assert parse_retry_after({"RETRY-AFTER": " 5 "}) == 5

    def test_parse_retry_after_absent(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after({"content-type": "application/json"}) is None

    def test_extract_model_name(self):
        assert extract_model_name("The model 'foo-bar' is unknown") == "foo-bar"
        assert extract_model_name("no quotes here") == "unknown"

    def test_str_without_status(self):
        assert str(HAIError("plain")) == "plain"

    def test_repr(self):
        assert repr(HAIError("x", status_code=500)) == "HAIError(message='x', status_code=500)"


class TestRetryability:
    """Infrastructure vs semantic errors."""

    @pytest.mark.parametrize("error", [
        TooManyRequestsError(),
        ServiceUnavailableError(),
        TimeoutError(),
        ServerError(),
        APIConnectionError("refused", should_retry=True),
    ])
    def test_retryable(self, error):
        assert is_retryable_error(error)

    @pytest.mark.parametrize("error", [
        InvalidAPIKeyError(),
        InvalidRequestError("bad"),
        InvalidModelError("m"),
        APIError("odd"),
        APIConnectionError("broken"),
        StreamDecodeError("bad json", payload="{"),
        ValueError("not ours"),
    ])
    def test_not_retryable(self, error):
        assert not is_retryable_error(error)


class TestTransportTranslation:
    """httpx failures mapped onto the error taxonomy."""

    def test_timeout(self):
        with pytest.raises(TimeoutError) as exc_info:
            with translate_transport_errors():
                raise httpx.ReadTimeout("slow")
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    def test_connect_error_is_retryable(self):
        with pytest.raises(APIConnectionError) as exc_info:
            with translate_transport_errors():
                raise httpx.ConnectError("refused")
        assert exc_info.value.should_retry is True

    def test_other_transport_error(self):
        with pytest.raises(APIConnectionError) as exc_info:
            with translate_transport_errors("reading stream from"):
                raise httpx.RemoteProtocolError("peer closed")
        assert exc_info.value.should_retry is False
        assert "reading stream from" in str(exc_info.value)

    def test_other_exceptions_untouched(self):
        with pytest.raises(KeyError):
            with translate_transport_errors():
                raise KeyError("x")
