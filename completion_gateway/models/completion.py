"""
补全请求 / 响应数据模型
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RequestOptions(BaseModel):
    """
    单次调用的可选调参

    同时接受 snake_case 与 camelCase 字段名（如 max_tokens / maxTokens）。
    取值范围不做校验，交由上游判断。
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    stop: list[str] | None = None


class CanonicalRequest(BaseModel):
    """默认值已全部补齐的请求体（stop 可缺省）"""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    prompt: str
    temperature: float
    max_tokens: int
    top_p: float
    presence_penalty: float
    frequency_penalty: float
    stop: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        """转换为发往上游的 JSON 请求体（不含 provider，stop 缺省时不发送）"""
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
        }
        if self.stop is not None:
            payload["stop"] = list(self.stop)
        return payload


class CompletionUsage(BaseModel):
    """Token 使用统计（原样取自上游，不重新计算 total）"""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class CompletionMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    provider: str
    latency_ms: float


class CompletionResult(BaseModel):
    """归一化后的补全结果"""

    model_config = ConfigDict(frozen=True)

    content: str
    usage: CompletionUsage
    metadata: CompletionMetadata
