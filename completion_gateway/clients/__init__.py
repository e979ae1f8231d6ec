from .http_client import (
    COMPLETIONS_PATH,
    PROVIDER_BASE_URLS,
    CompletionTransport,
    build_completions_url,
    redact_url_for_log,
)

__all__ = [
    "COMPLETIONS_PATH",
    "PROVIDER_BASE_URLS",
    "CompletionTransport",
    "build_completions_url",
    "redact_url_for_log",
]
