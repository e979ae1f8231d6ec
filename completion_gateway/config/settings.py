"""
进程级配置

只覆盖与具体模型无关的运行参数（日志、HTTP 连接池），全部从环境变量读取一次。
模型相关配置（provider / model / api_key 等）由调用方通过 ModelConfig 显式传入，
不从环境变量加载。
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    """运行配置"""

    def __init__(self) -> None:
        # 日志
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        # 为空时不写文件日志
        self.log_file_dir = os.getenv("LOG_FILE_DIR", "").strip() or None

        # HTTP 连接池
        self.http_max_connections = _env_int("HTTP_MAX_CONNECTIONS", 100)
        self.http_keepalive_connections = _env_int("HTTP_KEEPALIVE_CONNECTIONS", 20)
        self.http_keepalive_expiry = _env_float("HTTP_KEEPALIVE_EXPIRY", 30.0)

    def __repr__(self) -> str:
        return (
            f"Config(log_level={self.log_level}, "
            f"log_file_dir={self.log_file_dir}, "
            f"http_max_connections={self.http_max_connections})"
        )


config = Config()
