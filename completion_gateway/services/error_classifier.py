"""
错误分类器（纯分类，无副作用）

把 Transport 抛出的原始失败映射为唯一的 ServiceError。分类规则按顺序匹配：

1. HTTP 401 -> UNAUTHORIZED
2. HTTP 429 -> RATE_LIMIT
3. HTTP 500 -> SERVER_ERROR
4. 其他 HTTP 状态 -> API_ERROR（消息取上游 error.message，缺失时为 "Unknown error"）
5. 无响应且为超时 -> TIMEOUT
6. 其余无响应的失败 -> NETWORK_ERROR

有响应时 raw 保留上游原始错误体。
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from completion_gateway.core.error_utils import extract_upstream_message, read_error_payload
from completion_gateway.core.exceptions import (
    APIError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    ServiceError,
    UnauthorizedError,
)
from completion_gateway.services.retry import extract_status

_TIMEOUT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    TimeoutError,
    asyncio.TimeoutError,
)

# 状态码 -> (错误类型, 固定消息)
_STATUS_RULES: dict[int, tuple[type[ServiceError], str]] = {
    401: (UnauthorizedError, "Invalid API key"),
    429: (RateLimitError, "Rate limit exceeded"),
    500: (ServerError, "Server error"),
}


class ErrorClassifier:
    """错误分类器"""

    @staticmethod
    def is_timeout(error: BaseException) -> bool:
        return isinstance(error, _TIMEOUT_EXCEPTIONS)

    @staticmethod
    def classify(error: BaseException) -> ServiceError:
        """
        分类一个原始失败

        对同一个失败重复调用得到字段完全相同的 ServiceError。
        已经是 ServiceError 的失败原样返回。
        """
        if isinstance(error, ServiceError):
            return error

        status = extract_status(error)
        if status is not None:
            raw: Any = read_error_payload(getattr(error, "response", None))
            rule = _STATUS_RULES.get(status)
            if rule is not None:
                error_cls, message = rule
                return error_cls(message, status=status, raw=raw)
            return APIError(extract_upstream_message(raw), status=status, raw=raw)

        if ErrorClassifier.is_timeout(error):
            return RequestTimeoutError()
        return NetworkError()


def classify_error(error: BaseException) -> ServiceError:
    """ErrorClassifier.classify 的便捷函数"""
    return ErrorClassifier.classify(error)
