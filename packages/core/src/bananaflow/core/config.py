"""配置常量模块 -- 可通过环境变量覆盖

包含批次大小、输入图片上限、重试策略、Feed 时区、SSE 心跳等可配置项。
环境变量中的非法值一律记录 warning 并回退到默认值。
"""

import os
from datetime import UTC, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, Field, ValidationError

from .retry import RetryPolicy

log = structlog.get_logger()

# 扇出批次大小（固定）
BATCH_SIZE: int = 4

# 单次提交的输入图片上限
MAX_INPUT_IMAGES: int = 4

# 仅有图片、无提示词时实际下发的指令
DESCRIBE_IMAGES_PROMPT: str = "Describe what is in these images in detail."

# 失败异常没有消息时写入 Task.error 的兜底文案
GENERIC_FAILURE_MESSAGE: str = "An unknown error occurred during image generation."

# SSE 心跳间隔默认值（秒）
DEFAULT_SSE_HEARTBEAT_INTERVAL: float = 15.0


def get_feed_timezone() -> tzinfo:
    """获取 Feed 分组与日期标签使用的时区，无效值降级为 UTC"""
    name = os.environ.get("BANANAFLOW_FEED_TIMEZONE", "UTC")
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning(
            "invalid_feed_timezone",
            env_var="BANANAFLOW_FEED_TIMEZONE",
            value=name,
            fallback="UTC",
        )
        return UTC


class SchedulerConfig(BaseModel):
    """Scheduler 配置

    环境变量:
        BANANAFLOW_MAX_ATTEMPTS: 总尝试次数（默认 5）
        BANANAFLOW_BACKOFF_BASE_MS: 退避基数毫秒（默认 1000）
        BANANAFLOW_BACKOFF_JITTER_MS: 抖动上界毫秒（默认 1000）
        BANANAFLOW_MAX_IN_FLIGHT: 同时进行中的生成调用上限（默认不限）
    """

    retry: RetryPolicy = Field(default_factory=RetryPolicy, description="重试策略")
    max_in_flight: int | None = Field(
        default=None,
        ge=1,
        description="并发生成调用上限，None 表示不限",
    )


_RETRY_ENV_FIELDS = {
    "BANANAFLOW_MAX_ATTEMPTS": "max_attempts",
    "BANANAFLOW_BACKOFF_BASE_MS": "base_delay_ms",
    "BANANAFLOW_BACKOFF_JITTER_MS": "jitter_ms",
}

_SCHEDULER_ENV_FIELDS = {
    "BANANAFLOW_MAX_IN_FLIGHT": "max_in_flight",
}


def env_overrides(
    model: type[BaseModel],
    env_fields: dict[str, str],
    event: str,
) -> dict[str, Any]:
    """逐字段读取环境变量，按 model 的字段约束单独校验

    非法值（无法解析或超出约束）记录 warning 后跳过，字段保留默认值，不阻塞启动。

    Args:
        model: 目标配置模型
        env_fields: 环境变量名 -> 字段名
        event: warning 日志事件名
    """
    overrides: dict[str, Any] = {}
    for env_var, field in env_fields.items():
        val = os.environ.get(env_var)
        if not val:
            continue
        try:
            overrides[field] = getattr(model.model_validate({field: val}), field)
        except ValidationError as e:
            log.warning(
                event,
                env_var=env_var,
                value=val,
                reason=e.errors(include_url=False)[0]["msg"],
            )
    return overrides


class _HeartbeatSetting(BaseModel):
    interval: float = Field(default=DEFAULT_SSE_HEARTBEAT_INTERVAL, gt=0)


def get_sse_heartbeat_interval() -> float:
    """获取 SSE 心跳间隔（秒），非法值降级为默认值"""
    overrides = env_overrides(
        _HeartbeatSetting,
        {"BANANAFLOW_SSE_HEARTBEAT_INTERVAL": "interval"},
        "invalid_sse_config",
    )
    return overrides.get("interval", DEFAULT_SSE_HEARTBEAT_INTERVAL)


def load_scheduler_config() -> SchedulerConfig:
    """从环境变量加载 Scheduler 配置

    Returns:
        SchedulerConfig 实例
    """
    retry = RetryPolicy(
        **env_overrides(RetryPolicy, _RETRY_ENV_FIELDS, "invalid_scheduler_config")
    )
    return SchedulerConfig(
        retry=retry,
        **env_overrides(SchedulerConfig, _SCHEDULER_ENV_FIELDS, "invalid_scheduler_config"),
    )
