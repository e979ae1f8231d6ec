"""
completion_gateway - 多厂商文本补全接口的统一调用层

使用方式:
    from completion_gateway import CompletionPipeline, ModelConfig, ServiceError, setup_logging

    setup_logging()  # 可选，开启本包日志

    pipeline = CompletionPipeline(ModelConfig(provider="openai", model="...", api_key="sk-..."))
    try:
        result = await pipeline.complete("Hello")
    except ServiceError as e:
        print(e.code, e.status)
"""

from completion_gateway.core.exceptions import (
    APIError,
    ConfigurationError,
    ErrorCode,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    ServiceError,
    UnauthorizedError,
)
from completion_gateway.core.logger import setup_logging
from completion_gateway.models import (
    CanonicalRequest,
    CompletionMetadata,
    CompletionResult,
    CompletionUsage,
    ModelConfig,
    RequestOptions,
    ResolvedConfig,
)
from completion_gateway.services import CompletionPipeline

__version__ = "0.1.0"

__all__ = [
    # 入口
    "CompletionPipeline",
    # 数据模型
    "CanonicalRequest",
    "CompletionMetadata",
    "CompletionResult",
    "CompletionUsage",
    "ModelConfig",
    "RequestOptions",
    "ResolvedConfig",
    # 日志
    "setup_logging",
    # 错误
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
