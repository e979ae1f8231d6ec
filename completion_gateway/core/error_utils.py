"""
错误消息处理工具函数
"""

from __future__ import annotations

import json
from typing import Any

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def read_error_payload(response: Any) -> Any:
    """
    读取上游错误响应体，用于原样保留在 ServiceError.raw 上

    优先解析为 JSON；解析失败时回退为文本；读取失败或为空时返回 None。

    Args:
        response: httpx.Response 或具有 json()/text 的兼容对象

    Returns:
        解析后的 JSON、原始文本或 None
    """
    if response is None:
        return None

    text = getattr(response, "text", None)
    if isinstance(text, str):
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    json_method = getattr(response, "json", None)
    if callable(json_method):
        try:
            return json_method()
        except ValueError:
            return None
    return None


def extract_upstream_message(payload: Any) -> str:
    """
    从上游错误体中提取错误消息

    兼容常见格式：
    - {"error": {"message": "..."}}  (OpenAI 风格)
    - {"error": "..."}
    - {"message": "..."}

    Args:
        payload: read_error_payload 的返回值

    Returns:
        上游错误消息，提取不到时返回 "Unknown error"
    """
    if not isinstance(payload, dict):
        return UNKNOWN_ERROR_MESSAGE

    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    elif isinstance(error, str) and error.strip():
        return error

    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message

    return UNKNOWN_ERROR_MESSAGE


def describe_error(error: BaseException, status_code: int | None = None) -> str:
    """
    构建用于日志的错误描述

    str 可能为空（如 httpx 超时异常），此时回退到 repr。
    """
    error_str = str(error) or repr(error)
    if status_code is not None:
        return f"HTTP {status_code}: {error_str}"
    return error_str
