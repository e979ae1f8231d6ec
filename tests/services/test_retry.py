"""
重试控制测试
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from completion_gateway.services.retry import (
    AttemptState,
    RetryController,
    backoff_delay_ms,
    extract_status,
    is_retryable_status,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example.com/v1/completions")
    response = httpx.Response(status, json={"error": {"message": "boom"}}, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestBackoffDelay:
    """测试退避时间"""

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(1, 1000), (2, 2000), (3, 4000), (4, 8000), (5, 8000), (50, 8000)],
    )
    def test_schedule(self, attempt: int, expected: int) -> None:
        assert backoff_delay_ms(attempt) == expected

    def test_non_decreasing(self) -> None:
        delays = [backoff_delay_ms(k) for k in range(1, 12)]
        assert delays == sorted(delays)

    def test_invalid_attempt(self) -> None:
        with pytest.raises(ValueError):
            backoff_delay_ms(0)


class TestExtractStatus:
    def test_from_http_status_error(self) -> None:
        assert extract_status(_status_error(503)) == 503

    def test_from_status_code_attribute(self) -> None:
        error = RuntimeError("x")
        error.status_code = 429  # type: ignore[attr-defined]
        assert extract_status(error) == 429

    def test_timeout_has_no_status(self) -> None:
        assert extract_status(httpx.ReadTimeout("timed out")) is None

    def test_response_without_status(self) -> None:
        error = RuntimeError("x")
        error.response = SimpleNamespace()  # type: ignore[attr-defined]
        assert extract_status(error) is None

    def test_boolean_response_status_is_ignored(self) -> None:
        error = RuntimeError("x")
        error.response = SimpleNamespace(status_code=True)  # type: ignore[attr-defined]
        assert extract_status(error) is None


class TestShouldRetry:
    """测试重试判定"""

    @pytest.mark.parametrize("status", [429, 500, 503])
    def test_retryable_statuses(self, status: int) -> None:
        controller = RetryController(max_attempts=3)
        state = AttemptState(attempt=1, last_error=_status_error(status))
        assert controller.should_retry(state) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422, 502])
    @pytest.mark.parametrize("attempt", [1, 2])
    def test_non_retryable_statuses(self, status: int, attempt: int) -> None:
        controller = RetryController(max_attempts=3)
        state = AttemptState(attempt=attempt, last_error=_status_error(status))
        assert controller.should_retry(state) is False

    def test_no_retry_on_last_attempt(self) -> None:
        controller = RetryController(max_attempts=3)
        state = AttemptState(attempt=3, last_error=_status_error(429))
        assert controller.should_retry(state) is False

    def test_no_retry_without_status(self) -> None:
        controller = RetryController(max_attempts=3)
        state = AttemptState(attempt=1, last_error=httpx.ConnectError("refused"))
        assert controller.should_retry(state) is False

    def test_is_retryable_status(self) -> None:
        assert is_retryable_status(None) is False
        assert is_retryable_status(500) is True
        assert is_retryable_status(501) is False


class TestRetryControllerRun:
    """测试重试执行"""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self) -> None:
        sleep = AsyncMock()
        operation = AsyncMock(return_value={"ok": True})

        result = await RetryController(max_attempts=3, sleep=sleep).run(operation)

        assert result == {"ok": True}
        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self) -> None:
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[_status_error(429), _status_error(429), "third"])

        result = await RetryController(max_attempts=3, sleep=sleep).run(operation)

        assert result == "third"
        assert operation.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_last_failure(self) -> None:
        sleep = AsyncMock()
        errors = [_status_error(500), _status_error(503), _status_error(500)]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await RetryController(max_attempts=3, sleep=sleep).run(operation)

        assert exc_info.value is errors[2]
        assert operation.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self) -> None:
        sleep = AsyncMock()
        error = _status_error(401)
        operation = AsyncMock(side_effect=error)

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await RetryController(max_attempts=3, sleep=sleep).run(operation)

        assert exc_info.value is error
        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_single_attempt_ceiling(self) -> None:
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=_status_error(503))

        with pytest.raises(httpx.HTTPStatusError):
            await RetryController(max_attempts=1, sleep=sleep).run(operation)

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delays_plateau_at_ceiling(self) -> None:
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[_status_error(503)] * 5 + ["done"])

        result = await RetryController(max_attempts=6, sleep=sleep).run(operation)

        assert result == "done"
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0, 8.0, 8.0]

    def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryController(max_attempts=0)
