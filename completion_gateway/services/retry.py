"""
重试控制（RetryController）

对一次 Transport 调用做有界的顺序重试：
- 尝试编号 1..N，N 为配置的 max_retries（总尝试次数）
- 仅当尝试次数 < N 且失败带有 HTTP 状态码 429 / 500 / 503 时重试
- 无状态码（网络错误、超时）不重试
- 第 k 次失败后等待 min(1000 * 2^(k-1), 8000) 毫秒

只根据状态码做重试判定，不做错误分类；最终失败原样抛出，由 ErrorClassifier 处理。
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from completion_gateway.core.error_utils import describe_error
from completion_gateway.core.logger import logger

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})
BASE_BACKOFF_MS = 1000
MAX_BACKOFF_MS = 8000


class SleepFunc(Protocol):
    """可注入的 sleep 函数（测试中用于控制时间）"""

    async def __call__(self, seconds: float) -> None: ...


@dataclass
class AttemptState:
    """单次调用内的尝试状态，调用结束即丢弃"""

    attempt: int = 1  # 从 1 开始
    last_error: Exception | None = None


def backoff_delay_ms(attempt: int) -> int:
    """
    第 attempt 次尝试失败后的退避时间（毫秒）

    f(1)=1000, f(2)=2000, f(3)=4000, f(k>=4)=8000
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    # 限制指数，避免大 attempt 下构造超大整数
    exponent = min(attempt - 1, 16)
    return min(BASE_BACKOFF_MS * (2**exponent), MAX_BACKOFF_MS)


def extract_status(error: BaseException) -> int | None:
    """
    从失败中取出 HTTP 状态码

    兼容 httpx.HTTPStatusError（error.response.status_code）以及带整型
    status_code 属性的异常。没有响应时返回 None。
    """
    response = getattr(error, "response", None)
    if response is not None:
        status = getattr(response, "status_code", None)
        if isinstance(status, int) and not isinstance(status, bool):
            return status

    status = getattr(error, "status_code", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status
    return None


def is_retryable_status(status: int | None) -> bool:
    return status is not None and status in RETRYABLE_STATUS_CODES


class RetryController:
    """有界指数退避重试"""

    def __init__(
        self,
        max_attempts: int,
        sleep: SleepFunc | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self._sleep: Callable[[float], Awaitable[Any]] = sleep or asyncio.sleep

    def should_retry(self, state: AttemptState) -> bool:
        if state.attempt >= self.max_attempts:
            return False
        if state.last_error is None:
            return False
        return is_retryable_status(extract_status(state.last_error))

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        request_id: str | None = None,
    ) -> T:
        """
        执行 operation，必要时重试

        Args:
            operation: 无参协程函数，每次调用执行一次 Transport 请求
            request_id: 仅用于日志关联

        Returns:
            operation 的返回值

        Raises:
            最后一次失败的原始异常
        """
        state = AttemptState()
        while True:
            try:
                return await operation()
            except Exception as e:
                state.last_error = e

            status = extract_status(state.last_error)
            if not self.should_retry(state):
                logger.debug(
                    "  [{}] 第 {}/{} 次尝试失败，不再重试: {}",
                    request_id,
                    state.attempt,
                    self.max_attempts,
                    describe_error(state.last_error, status),
                )
                raise state.last_error

            delay_ms = backoff_delay_ms(state.attempt)
            logger.warning(
                "  [{}] 第 {}/{} 次尝试失败 (HTTP {})，{}ms 后重试",
                request_id,
                state.attempt,
                self.max_attempts,
                status,
                delay_ms,
            )
            await self._sleep(delay_ms / 1000)
            state.attempt += 1
