"""
错误分类测试
"""

import asyncio
from typing import Any

import httpx
import pytest

from completion_gateway.core.exceptions import (
    APIError,
    ErrorCode,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    UnauthorizedError,
)
from completion_gateway.services.error_classifier import ErrorClassifier, classify_error

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/completions")


def _status_error(status: int, body: Any = None, text: str | None = None) -> httpx.HTTPStatusError:
    if text is not None:
        response = httpx.Response(status, text=text, request=_REQUEST)
    elif body is not None:
        response = httpx.Response(status, json=body, request=_REQUEST)
    else:
        response = httpx.Response(status, request=_REQUEST)
    return httpx.HTTPStatusError(f"HTTP {status}", request=_REQUEST, response=response)


class TestHTTPStatusClassification:
    """测试带 HTTP 响应的失败"""

    def test_unauthorized(self) -> None:
        body = {"error": {"message": "Incorrect API key provided"}}
        error = classify_error(_status_error(401, body))

        assert isinstance(error, UnauthorizedError)
        assert error.code == ErrorCode.UNAUTHORIZED
        assert error.message == "Invalid API key"
        assert error.status == 401
        assert error.raw == body

    def test_rate_limit(self) -> None:
        error = classify_error(_status_error(429, {"error": {"message": "slow down"}}))

        assert isinstance(error, RateLimitError)
        assert error.code == ErrorCode.RATE_LIMIT
        assert error.message == "Rate limit exceeded"
        assert error.status == 429

    def test_server_error(self) -> None:
        error = classify_error(_status_error(500, {"error": {"message": "oops"}}))

        assert isinstance(error, ServerError)
        assert error.code == ErrorCode.SERVER_ERROR
        assert error.message == "Server error"
        assert error.raw == {"error": {"message": "oops"}}

    def test_other_status_uses_upstream_message(self) -> None:
        body = {"error": {"message": "max_tokens is too large", "type": "invalid_request_error"}}
        error = classify_error(_status_error(400, body))

        assert isinstance(error, APIError)
        assert error.code == ErrorCode.API_ERROR
        assert error.message == "max_tokens is too large"
        assert error.status == 400
        assert error.raw == body

    def test_503_is_api_error(self) -> None:
        error = classify_error(_status_error(503, {"message": "overloaded"}))

        assert error.code == ErrorCode.API_ERROR
        assert error.message == "overloaded"
        assert error.status == 503

    def test_other_status_without_message(self) -> None:
        error = classify_error(_status_error(404))

        assert error.code == ErrorCode.API_ERROR
        assert error.message == "Unknown error"
        assert error.status == 404
        assert error.raw is None

    def test_non_json_body_is_kept_as_text(self) -> None:
        error = classify_error(_status_error(502, text="<html>Bad Gateway</html>"))

        assert error.code == ErrorCode.API_ERROR
        assert error.message == "Unknown error"
        assert error.raw == "<html>Bad Gateway</html>"


class TestTransportClassification:
    """测试无 HTTP 响应的失败"""

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ReadTimeout("timed out"),
            httpx.ConnectTimeout("timed out"),
            httpx.PoolTimeout("timed out"),
            asyncio.TimeoutError(),
            TimeoutError(),
        ],
    )
    def test_timeout(self, exc: BaseException) -> None:
        error = classify_error(exc)

        assert isinstance(error, RequestTimeoutError)
        assert error.code == ErrorCode.TIMEOUT
        assert error.message == "Request timeout"
        assert error.status is None
        assert error.raw is None

    @pytest.mark.parametrize(
        "exc",
        [httpx.ConnectError("refused"), httpx.RemoteProtocolError("reset"), OSError("down")],
    )
    def test_network_error(self, exc: BaseException) -> None:
        error = classify_error(exc)

        assert isinstance(error, NetworkError)
        assert error.code == ErrorCode.NETWORK_ERROR
        assert error.message == "Network error"
        assert error.status is None


class TestClassifierProperties:
    def test_classification_is_repeatable(self) -> None:
        raw_error = _status_error(422, {"error": {"message": "bad prompt"}})

        first = ErrorClassifier.classify(raw_error)
        second = ErrorClassifier.classify(raw_error)

        assert first is not second
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_service_error_passes_through(self) -> None:
        malformed = MalformedResponseError(raw={"choices": []})
        assert ErrorClassifier.classify(malformed) is malformed

    def test_to_dict(self) -> None:
        error = classify_error(_status_error(429, {"error": {"message": "x"}}))

        assert error.to_dict() == {
            "code": "RATE_LIMIT",
            "message": "Rate limit exceeded",
            "status": 429,
            "raw": {"error": {"message": "x"}},
        }
