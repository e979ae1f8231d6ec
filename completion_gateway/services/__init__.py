"""
补全调用服务

- request_builder: 规范化请求构建（默认值补齐）
- retry: RetryController，有界指数退避重试（只看状态码）
- error_classifier: ErrorClassifier，错误分类（纯逻辑，无副作用）
- response_normalizer: 响应归一化
- pipeline: CompletionPipeline，组合以上组件
"""

from .error_classifier import ErrorClassifier, classify_error
from .pipeline import CompletionPipeline, Transport
from .request_builder import build_request
from .response_normalizer import normalize_response
from .retry import AttemptState, RetryController, backoff_delay_ms, extract_status

__all__ = [
    "AttemptState",
    "CompletionPipeline",
    "ErrorClassifier",
    "RetryController",
    "Transport",
    "backoff_delay_ms",
    "build_request",
    "classify_error",
    "extract_status",
    "normalize_response",
]
