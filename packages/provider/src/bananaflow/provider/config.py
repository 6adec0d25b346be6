"""ProviderConfig -- Provider 配置加载

从环境变量加载 Echo 客户端的模拟参数。
"""

import os

import structlog
from pydantic import BaseModel, Field, ValidationError

from .echo_client import EchoGenerationClient

log = structlog.get_logger()


class ProviderConfig(BaseModel):
    """Provider 包配置 -- 从环境变量加载

    环境变量:
        BANANAFLOW_GENERATION_LATENCY_MS: 模拟延迟（毫秒，默认 0）
        BANANAFLOW_GENERATION_FAILURE_RATE: 模拟瞬时失败率（0~1，默认 0）
    """

    latency_ms: int = Field(default=0, ge=0, description="模拟延迟（毫秒）")
    failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="模拟瞬时失败率",
    )


_ENV_FIELDS = {
    "BANANAFLOW_GENERATION_LATENCY_MS": "latency_ms",
    "BANANAFLOW_GENERATION_FAILURE_RATE": "failure_rate",
}


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    每个字段单独按约束校验，非法值记录 warning 并使用默认值，不阻塞启动。
    """
    kwargs: dict = {}
    for env_var, field in _ENV_FIELDS.items():
        val = os.environ.get(env_var)
        if not val:
            continue
        try:
            kwargs[field] = getattr(ProviderConfig.model_validate({field: val}), field)
        except ValidationError as e:
            log.warning(
                "invalid_provider_config",
                env_var=env_var,
                value=val,
                reason=e.errors(include_url=False)[0]["msg"],
                fallback=ProviderConfig.model_fields[field].default,
            )

    return ProviderConfig(**kwargs)


def create_generation_client(config: ProviderConfig) -> EchoGenerationClient:
    """根据配置创建 GenerationClient"""
    return EchoGenerationClient(
        latency_ms=config.latency_ms,
        failure_rate=config.failure_rate,
    )
