"""
请求构建（RequestBuilder）

把 prompt + 可选调参转换为 CanonicalRequest，逐字段补齐默认值。
model / provider 取自解析后的配置，不从调参中读取。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from completion_gateway.models.completion import CanonicalRequest, RequestOptions
from completion_gateway.models.config import ResolvedConfig

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 150
DEFAULT_TOP_P = 1.0
DEFAULT_PRESENCE_PENALTY = 0.0
DEFAULT_FREQUENCY_PENALTY = 0.0


def _coerce_options(options: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
    if options is None:
        return RequestOptions()
    if isinstance(options, RequestOptions):
        return options
    return RequestOptions.model_validate(dict(options))


def _fallback(value: Any, default: Any) -> Any:
    return default if value is None else value


def build_request(
    config: ResolvedConfig,
    prompt: str,
    options: RequestOptions | Mapping[str, Any] | None = None,
) -> CanonicalRequest:
    """
    构建规范化请求

    Args:
        config: 解析后的配置
        prompt: 用户输入
        options: 可选调参（RequestOptions 或等价字典）

    Returns:
        CanonicalRequest，除 stop 外所有调参字段均已补齐
    """
    opts = _coerce_options(options)
    return CanonicalRequest(
        provider=config.provider,
        model=config.model,
        prompt=prompt,
        temperature=_fallback(opts.temperature, DEFAULT_TEMPERATURE),
        max_tokens=_fallback(opts.max_tokens, DEFAULT_MAX_TOKENS),
        top_p=_fallback(opts.top_p, DEFAULT_TOP_P),
        presence_penalty=_fallback(opts.presence_penalty, DEFAULT_PRESENCE_PENALTY),
        frequency_penalty=_fallback(opts.frequency_penalty, DEFAULT_FREQUENCY_PENALTY),
        stop=opts.stop,
    )
