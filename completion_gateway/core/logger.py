"""
统一日志系统 - 基于 loguru

日志级别策略:
- DEBUG: 调用开始、重试判定细节
- INFO:  调用成功（耗时、token 用量）
- WARNING: 重试、调用失败
- ERROR: 需要关注的故障

输出策略:
- 控制台: setup_logging() 时添加，级别由 LOG_LEVEL 控制（默认 INFO）
- 文件: 仅在设置 LOG_FILE_DIR 时启用，DEBUG 级别，按大小轮转 (100MB)

作为库使用时不改动宿主应用的 sink，本包日志默认关闭。

使用方式:
    from completion_gateway.core.logger import logger, setup_logging

    setup_logging()  # 应用入口处调用一次，开启本包日志

    logger.info("消息 {}", value)
    logger.warning("警告")
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from completion_gateway.config.settings import config

# ============================================================================
# 环境检测
# ============================================================================

IS_DOCKER = (
    os.path.exists("/.dockerenv")
    or os.environ.get("DOCKER_CONTAINER", "false").lower() == "true"
)

LOG_LEVEL = config.log_level

# ============================================================================
# 日志格式定义
# ============================================================================

CONSOLE_FORMAT_DEV = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{message}</cyan>"
)

CONSOLE_FORMAT_PROD = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"

# ============================================================================
# 日志配置
# ============================================================================

# 作为库被引入时不改动宿主应用已有的 sink，本包日志默认关闭，
# 由调用方显式 setup_logging() 或 logger.enable("completion_gateway") 开启
logger.disable("completion_gateway")


def setup_logging(
    level: str | None = None,
    log_file_dir: str | None = None,
) -> list[int]:
    """
    开启本包日志并添加输出 sink

    只追加 sink，不移除宿主应用已配置的 sink。

    Args:
        level: 控制台日志级别，缺省取 LOG_LEVEL
        log_file_dir: 文件日志目录，缺省取 LOG_FILE_DIR，为空时不写文件

    Returns:
        新增 sink 的 id 列表（可用于 logger.remove）
    """
    console_level = (level or LOG_LEVEL).upper()
    sink_ids: list[int] = []

    if IS_DOCKER:
        # 生产环境：禁用 backtrace 和 diagnose，减少日志噪音
        sink_ids.append(
            logger.add(
                sys.stdout,
                format=CONSOLE_FORMAT_PROD,
                level=console_level,
                filter="completion_gateway",
                colorize=False,
                backtrace=False,
                diagnose=False,
            )
        )
    else:
        sink_ids.append(
            logger.add(
                sys.stdout,
                format=CONSOLE_FORMAT_DEV,
                level=console_level,
                filter="completion_gateway",
                colorize=True,
            )
        )

    file_dir = log_file_dir or config.log_file_dir
    if file_dir:
        log_dir = Path(file_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # enqueue=False 使用同步模式，避免 multiprocessing 信号量泄漏
        file_log_config: dict[str, Any] = {
            "format": FILE_FORMAT,
            "filter": "completion_gateway",
            "rotation": "100 MB",
            "retention": "30 days",
            "compression": "gz",
            "enqueue": False,
            "encoding": "utf-8",
            "catch": True,
        }

        if IS_DOCKER:
            file_log_config["backtrace"] = False
            file_log_config["diagnose"] = False

        sink_ids.append(
            logger.add(  # type: ignore[call-overload]
                log_dir / "completion_gateway.log",
                level="DEBUG",
                **file_log_config,
            )
        )

    # 禁用第三方库噪音日志
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.enable("completion_gateway")
    return sink_ids


__all__ = ["logger", "setup_logging"]
