"""
补全调用编排（Pipeline）

构造时解析一次配置并创建 Transport；每次调用：
    构建请求 -> 受 RetryController 控制地执行（可能多次尝试，中间退避等待）
    -> 成功: 归一化并返回 CompletionResult
    -> 失败: 分类一次并抛出 ServiceError

除只读的配置与 Transport 外不保存跨调用状态，并发调用互不影响。
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any, Protocol
from uuid import uuid4

from completion_gateway.clients.http_client import CompletionTransport, redact_url_for_log
from completion_gateway.core.logger import logger
from completion_gateway.models.completion import CompletionResult, RequestOptions
from completion_gateway.models.config import ModelConfig, ResolvedConfig, resolve_config
from completion_gateway.services.error_classifier import ErrorClassifier
from completion_gateway.services.request_builder import build_request
from completion_gateway.services.response_normalizer import normalize_response
from completion_gateway.services.retry import RetryController, SleepFunc


class Transport(Protocol):
    """Pipeline 对 HTTP 传输层的最小要求"""

    async def post_completion(self, body: dict[str, Any]) -> Any: ...


class CompletionPipeline:
    """
    统一的文本补全入口

    用法:
        async with CompletionPipeline(ModelConfig(provider="openai", model="gpt-3.5-turbo-instruct",
                                                  api_key="sk-...")) as pipeline:
            result = await pipeline.complete("Say hi", RequestOptions(max_tokens=16))
    """

    def __init__(
        self,
        model_config: ModelConfig | ResolvedConfig | Mapping[str, Any],
        transport: Transport | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.config = resolve_config(model_config)
        self._owns_transport = transport is None
        self.transport: Transport = transport or CompletionTransport(self.config)
        self.retry_controller = RetryController(self.config.max_retries, sleep=sleep)

        base_url = getattr(self.transport, "base_url", None)
        logger.debug(
            "CompletionPipeline 初始化: provider={}, model={}, base_url={}, max_retries={}, timeout={}ms",
            self.config.provider,
            self.config.model,
            redact_url_for_log(base_url) if base_url else None,
            self.config.max_retries,
            self.config.timeout,
        )

    async def complete(
        self,
        prompt: str,
        options: RequestOptions | Mapping[str, Any] | None = None,
    ) -> CompletionResult:
        """
        执行一次补全调用

        Args:
            prompt: 输入文本
            options: 可选调参

        Returns:
            CompletionResult

        Raises:
            ServiceError: 最终失败（已分类），原始异常挂在 __cause__ 上
        """
        request_id = uuid4().hex[:8]
        request = build_request(self.config, prompt, options)
        payload = request.to_payload()

        logger.debug(
            "  [{}] 开始补全调用: provider={}, model={}, max_tokens={}",
            request_id,
            request.provider,
            request.model,
            request.max_tokens,
        )

        started = time.perf_counter()
        try:
            raw = await self.retry_controller.run(
                lambda: self.transport.post_completion(payload),
                request_id=request_id,
            )
            latency_ms = (time.perf_counter() - started) * 1000
            result = normalize_response(raw, self.config, latency_ms)
        except Exception as e:
            error = ErrorClassifier.classify(e)
            logger.warning(
                "  [{}] 补全调用失败: code={}, status={}, message={}",
                request_id,
                error.code.value,
                error.status,
                error.message,
            )
            if error is e:
                raise
            raise error from e

        logger.info(
            "  [{}] 补全调用成功: {:.0f}ms, tokens={}/{}/{}",
            request_id,
            result.metadata.latency_ms,
            result.usage.prompt_tokens,
            result.usage.completion_tokens,
            result.usage.total_tokens,
        )
        return result

    async def aclose(self) -> None:
        """释放自建的 Transport（外部注入的 Transport 由调用方管理）"""
        if not self._owns_transport:
            return
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "CompletionPipeline":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
