"""
补全接口 HTTP 传输层

基于 httpx.AsyncClient，按解析后的配置构造一次：
- base_url: 配置值，缺省时按 provider 查默认地址
- 超时: 配置的毫秒数
- 请求头: Authorization: Bearer <api_key>、Content-Type: application/json

只负责发送与解码，非 2xx 响应以 httpx.HTTPStatusError 抛出，由上层决定重试与分类。
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from completion_gateway.config.settings import config as settings
from completion_gateway.core.exceptions import ConfigurationError, MalformedResponseError
from completion_gateway.core.logger import logger
from completion_gateway.models.config import ResolvedConfig

COMPLETIONS_PATH = "/v1/completions"

# provider -> 默认 base_url（OpenAI 兼容接口）
PROVIDER_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "deepseek": "https://api.deepseek.com/v1",
    "groq": "https://api.groq.com/openai/v1",
    "together": "https://api.together.xyz/v1",
    "mistral": "https://api.mistral.ai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "local": "http://127.0.0.1:8080/v1",
}

# URL 中需要脱敏的查询参数（正则模式）
_SENSITIVE_QUERY_PARAMS_PATTERN = re.compile(
    r"([?&])(key|api_key|apikey|token|secret|password|credential)=([^&]*)",
    re.IGNORECASE,
)


def redact_url_for_log(url: str) -> str:
    """
    对 URL 中的敏感查询参数进行脱敏，用于日志记录

    将 ?key=xxx 替换为 ?key=***
    """
    return _SENSITIVE_QUERY_PARAMS_PATTERN.sub(r"\1\2=***", url)


def resolve_base_url(resolved: ResolvedConfig) -> str:
    """
    确定上游 base_url

    Raises:
        ConfigurationError: 未配置 base_url 且 provider 没有默认地址
    """
    if resolved.base_url:
        return resolved.base_url
    default = PROVIDER_BASE_URLS.get(resolved.provider.strip().lower())
    if default is None:
        raise ConfigurationError(
            f"No default base_url for provider '{resolved.provider}', base_url is required",
            field="base_url",
        )
    return default


def build_completions_url(base_url: str, path: str = COMPLETIONS_PATH) -> str:
    """
    拼接补全接口 URL

    兼容用户填写的各种格式，避免拼接出 /v1/v1/completions：
    - https://api.example.com
    - https://api.example.com/
    - https://api.example.com/v1
    - https://api.example.com/v1/
    """
    base = base_url.rstrip("/")
    for suffix in ("/v1beta", "/v1", "/v2", "/v3"):
        if base.endswith(suffix) and path.startswith(suffix):
            base = base[: -len(suffix)]
            break
    return f"{base}{path}"


def build_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


class CompletionTransport:
    """
    补全接口传输客户端

    一个 Pipeline 持有一个实例，多次调用复用同一个连接池。
    """

    def __init__(
        self,
        resolved: ResolvedConfig,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any,
    ) -> None:
        self.base_url = resolve_base_url(resolved)
        self.url = build_completions_url(self.base_url)
        self.timeout = httpx.Timeout(resolved.timeout_seconds)
        self.headers = build_headers(resolved.api_key)
        self._owns_client = client is None

        if client is None:
            client_config: dict[str, Any] = {
                "http2": False,
                "timeout": self.timeout,
                "headers": self.headers,
                "limits": httpx.Limits(
                    max_connections=settings.http_max_connections,
                    max_keepalive_connections=settings.http_keepalive_connections,
                    keepalive_expiry=settings.http_keepalive_expiry,
                ),
                "follow_redirects": True,
            }
            client_config.update(client_kwargs)
            client = httpx.AsyncClient(**client_config)
            logger.debug("创建补全 HTTP 客户端: {}", redact_url_for_log(self.url))
        self._client = client

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def post_completion(self, body: dict[str, Any]) -> Any:
        """
        POST 请求体到补全接口

        Returns:
            解码后的 JSON 响应体

        Raises:
            httpx.HTTPStatusError: 非 2xx 响应
            httpx.TimeoutException: 超过配置的超时
            httpx.TransportError: 其他网络错误
            MalformedResponseError: 2xx 响应体不是合法 JSON
        """
        response = await self._client.post(
            self.url,
            json=body,
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            # 网关错误页等非 JSON 响应体，原样保留文本
            raise MalformedResponseError(raw=response.text) from e

    async def aclose(self) -> None:
        """关闭自建的 HTTP 客户端（外部传入的客户端由调用方管理）"""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("补全 HTTP 客户端已关闭: {}", redact_url_for_log(self.url))
