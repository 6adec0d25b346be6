"""BananaFlow Provider -- 图像生成调用抽象层

packages/provider 的公开接口导出。
"""

# 配置
from .config import ProviderConfig, create_generation_client, load_provider_config

# 核心组件
from .echo_client import EchoGenerationClient

# 异常
from .exceptions import (
    GenerationError,
    GenerationNetworkError,
    InvalidApiKeyError,
    InvalidImageRefError,
    NoImageGeneratedError,
    normalize_generation_error,
)
from .images import parse_data_url, to_data_url
from .protocols import GenerationClient
from .scripted_client import GenerationCall, ScriptedGenerationClient

__all__ = [
    "GenerationClient",
    "EchoGenerationClient",
    "ScriptedGenerationClient",
    "GenerationCall",
    "ProviderConfig",
    "load_provider_config",
    "create_generation_client",
    "parse_data_url",
    "to_data_url",
    "GenerationError",
    "GenerationNetworkError",
    "InvalidApiKeyError",
    "InvalidImageRefError",
    "NoImageGeneratedError",
    "normalize_generation_error",
]
