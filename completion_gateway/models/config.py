"""
模型配置与配置解析（ConfigResolver）

ModelConfig 是调用方传入的（可能不完整的）配置；resolve_config 逐字段补齐默认值并
校验必填项，产出不可变的 ResolvedConfig，由 Pipeline 在构造时解析一次并持有。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from completion_gateway.core.exceptions import ConfigurationError

DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_MS = 30000

_REQUIRED_FIELDS = ("provider", "model", "api_key")


class ModelConfig(BaseModel):
    """调用方配置（可缺省 base_url / max_retries / timeout）"""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    provider: str | None = None
    model: str | None = None
    api_key: str | None = Field(default=None, alias="apiKey", repr=False)
    base_url: str | None = Field(default=None, alias="baseUrl")
    max_retries: int | None = Field(default=None, alias="maxRetries")
    timeout: int | None = None  # 毫秒


@dataclass(frozen=True)
class ResolvedConfig:
    """解析后的完整配置，生命周期内不可变"""

    provider: str
    model: str
    api_key: str = field(repr=False)
    base_url: str | None = None
    max_retries: int = DEFAULT_MAX_RETRIES  # 总尝试次数，而非额外重试次数
    timeout: int = DEFAULT_TIMEOUT_MS  # 毫秒

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


def _read(source: Any, name: str, alias: str | None = None) -> Any:
    if isinstance(source, Mapping):
        if name in source:
            return source[name]
        if alias is not None:
            return source.get(alias)
        return None
    return getattr(source, name, None)


def _positive_int(value: Any, name: str, default: int) -> int:
    if value is None:
        return default
    # bool 是 int 的子类，需要单独排除
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}", field=name)
    return value


def resolve_config(partial: ModelConfig | ResolvedConfig | Mapping[str, Any]) -> ResolvedConfig:
    """
    补齐默认值并校验配置

    逐字段回退，不做对象展开合并，输入中的未知字段会被忽略。

    Args:
        partial: ModelConfig、ResolvedConfig 或等价的字典（支持 camelCase 键）

    Returns:
        ResolvedConfig

    Raises:
        ConfigurationError: 必填字段（provider / model / api_key）缺失或为空，
            或 max_retries / timeout 不是正整数
    """
    if isinstance(partial, ResolvedConfig):
        return partial

    values: dict[str, Any] = {}
    for name in _REQUIRED_FIELDS:
        value = _read(partial, name, "apiKey" if name == "api_key" else None)
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"Missing required config field: {name}", field=name)
        values[name] = value

    base_url = _read(partial, "base_url", "baseUrl")
    if base_url is not None and not isinstance(base_url, str):
        raise ConfigurationError(f"base_url must be a string, got {base_url!r}", field="base_url")

    return ResolvedConfig(
        provider=values["provider"],
        model=values["model"],
        api_key=values["api_key"],
        base_url=base_url or None,
        max_retries=_positive_int(
            _read(partial, "max_retries", "maxRetries"), "max_retries", DEFAULT_MAX_RETRIES
        ),
        timeout=_positive_int(_read(partial, "timeout"), "timeout", DEFAULT_TIMEOUT_MS),
    )
