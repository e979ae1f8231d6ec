from .completion import (
    CanonicalRequest,
    CompletionMetadata,
    CompletionResult,
    CompletionUsage,
    RequestOptions,
)
from .config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
    ModelConfig,
    ResolvedConfig,
    resolve_config,
)

__all__ = [
    "CanonicalRequest",
    "CompletionMetadata",
    "CompletionResult",
    "CompletionUsage",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT_MS",
    "ModelConfig",
    "RequestOptions",
    "ResolvedConfig",
    "resolve_config",
]
