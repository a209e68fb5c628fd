"""Logging configuration with structlog integration.

两种日志：
1. loguru: 运行日志（抓取失败、缓存降级、同步错误等）
2. structlog: 业务事件（BusinessEvents），便于按 event_type 聚合统计
"""

import logging
import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure structlog and loguru; called once from the FastAPI lifespan."""
    level = settings.LOG_LEVEL.upper()
    _configure_structlog(logging.getLevelNamesMapping().get(level, logging.INFO))
    _configure_loguru(level)
    logger.info(f"Logging configured with level: {level}")


def _configure_structlog(level: int) -> None:
    # 本地开发输出可读格式，其他环境输出 JSON
    if settings.ENVIRONMENT == "local":
        renderer: Any = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=settings.ENVIRONMENT == "local",
    )

    if settings.LOG_DIR is not None:
        logger.add(
            settings.LOG_DIR / "newsdeck_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention=f"{settings.LOG_RETENTION_DAYS} days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


# ============================================================================
# 业务事件日志记录器
# ============================================================================


class BusinessEvents:
    """业务事件日志助手类。

    Usage:
        from src.core.infrastructure.logging import BusinessEvents

        BusinessEvents.aggregate_served(source_ids=["zhihu"], total=10, forced=False)
        BusinessEvents.sync_pushed(updated_time=1700000000000)
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def aggregate_served(
        cls,
        source_ids: list[str],
        total: int,
        forced: bool,
        **extra: Any,
    ) -> None:
        """记录聚合请求完成事件。"""
        cls._log.info(
            "aggregate_served",
            event_type="aggregate",
            source_ids=source_ids,
            source_count=len(source_ids),
            total=total,
            forced=forced,
            **extra,
        )

    @classmethod
    def source_fetch_failed(
        cls,
        source_id: str,
        error: str,
        degraded_to: str,
        **extra: Any,
    ) -> None:
        """记录源抓取失败并降级的事件。"""
        cls._log.warning(
            "source_fetch_failed",
            event_type="fetch_error",
            source_id=source_id,
            error=error,
            degraded_to=degraded_to,
            **extra,
        )

    @classmethod
    def background_task_failed(
        cls,
        queue: str,
        label: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录后台任务（如缓存回写）失败事件。"""
        cls._log.warning(
            "background_task_failed",
            event_type="background",
            queue=queue,
            label=label,
            error=error,
            **extra,
        )

    @classmethod
    def sync_pulled(
        cls,
        applied: bool,
        updated_time: int,
        **extra: Any,
    ) -> None:
        """记录拉取远端配置事件。"""
        cls._log.info(
            "sync_pulled",
            event_type="sync",
            applied=applied,
            updated_time=updated_time,
            **extra,
        )

    @classmethod
    def sync_pushed(
        cls,
        updated_time: int,
        **extra: Any,
    ) -> None:
        """记录推送本地配置事件。"""
        cls._log.info(
            "sync_pushed",
            event_type="sync",
            updated_time=updated_time,
            **extra,
        )

    @classmethod
    def sync_failed(
        cls,
        direction: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录同步失败事件（会触发凭证失效）。"""
        cls._log.warning(
            "sync_failed",
            event_type="sync_error",
            direction=direction,
            error=error,
            **extra,
        )

    @classmethod
    def sync_not_provisioned(
        cls,
        direction: str,
        **extra: Any,
    ) -> None:
        """记录远端未开通同步的事件（不视为错误）。"""
        cls._log.info(
            "sync_not_provisioned",
            event_type="sync",
            direction=direction,
            **extra,
        )

    @classmethod
    def view_mutated(
        cls,
        action: str,
        view_id: str,
        origin: str,
        **extra: Any,
    ) -> None:
        """记录聚合视图变更事件。"""
        cls._log.info(
            "view_mutated",
            event_type="view",
            action=action,
            view_id=view_id,
            origin=origin,
            **extra,
        )
