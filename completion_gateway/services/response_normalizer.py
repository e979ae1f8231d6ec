"""
响应归一化（ResponseNormalizer）

从上游原始响应中提取文本与 usage，附加耗时元数据。
model / provider 取自解析后的配置（上游响应可能缺省或使用别名）。
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from completion_gateway.core.exceptions import MalformedResponseError
from completion_gateway.models.completion import (
    CompletionMetadata,
    CompletionResult,
    CompletionUsage,
)
from completion_gateway.models.config import ResolvedConfig


def _extract_text(raw: dict[str, Any]) -> str | None:
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) else None


def normalize_response(
    raw: Any,
    config: ResolvedConfig,
    latency_ms: float,
) -> CompletionResult:
    """
    归一化上游响应

    Args:
        raw: 上游返回的 JSON 响应体
        config: 解析后的配置
        latency_ms: 从第一次尝试前到调用结束的墙钟耗时（含重试等待）

    Returns:
        CompletionResult

    Raises:
        MalformedResponseError: 缺少 choices[0].text 或 usage
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError(raw=raw)

    text = _extract_text(raw)
    if text is None:
        raise MalformedResponseError(raw=raw)

    try:
        # usage 原样复制，不校验 total = prompt + completion
        usage = CompletionUsage.model_validate(raw.get("usage"))
    except ValidationError as e:
        raise MalformedResponseError(raw=raw) from e

    return CompletionResult(
        content=text.strip(),
        usage=usage,
        metadata=CompletionMetadata(
            model=config.model,
            provider=config.provider,
            latency_ms=max(latency_ms, 0.0),
        ),
    )
