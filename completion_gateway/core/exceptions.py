"""
异常定义

对外只暴露两类错误：
- ConfigurationError: 配置校验失败（仅在 Pipeline 构造阶段抛出）
- ServiceError 及其子类: 单次调用的最终失败，每个子类对应一个固定的 ErrorCode

status / raw 只在来自 HTTP 响应的错误上有值（UNAUTHORIZED / RATE_LIMIT /
SERVER_ERROR / API_ERROR），TIMEOUT 与 NETWORK_ERROR 永远为 None。
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """错误码（封闭集合）"""

    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    API_ERROR = "API_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"


class ConfigurationError(ValueError):
    """配置缺失或非法"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ServiceError(Exception):
    """
    调用失败的统一错误

    由 ErrorClassifier 在失败离开 Pipeline 前创建一次，之后不再修改。
    """

    code: ErrorCode = ErrorCode.API_ERROR

    def __init__(
        self,
        message: str,
        status: int | None = None,
        raw: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.raw = raw  # 上游原始错误体，原样保留用于排查

    def to_dict(self) -> dict[str, Any]:
        """转换为字典（用于序列化）"""
        return {
            "code": self.code.value,
            "message": self.message,
            "status": self.status,
            "raw": self.raw,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServiceError):
            return NotImplemented
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.status))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code.value}, "
            f"message={self.message!r}, status={self.status})"
        )


class UnauthorizedError(ServiceError):
    """401 - API Key 无效"""

    code = ErrorCode.UNAUTHORIZED


class RateLimitError(ServiceError):
    """429 - 触发上游限流"""

    code = ErrorCode.RATE_LIMIT


class ServerError(ServiceError):
    """500 - 上游服务端错误"""

    code = ErrorCode.SERVER_ERROR


class APIError(ServiceError):
    """其他 HTTP 错误状态"""

    code = ErrorCode.API_ERROR


class MalformedResponseError(APIError):
    """上游返回 2xx，但响应体缺少 choices / usage"""

    def __init__(self, raw: Any = None):
        super().__init__("Malformed response", raw=raw)


class RequestTimeoutError(ServiceError):
    """请求超时（无 HTTP 响应）"""

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message)


class NetworkError(ServiceError):
    """网络错误（无 HTTP 响应）"""

    code = ErrorCode.NETWORK_ERROR

    def __init__(self, message: str = "Network error"):
        super().__init__(message)


__all__ = [
    "APIError",
    "ConfigurationError",
    "ErrorCode",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitError",
    "RequestTimeoutError",
    "ServerError",
    "ServiceError",
    "UnauthorizedError",
]
