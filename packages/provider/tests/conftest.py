"""packages/provider 测试配置 -- Provider 层 fixture"""

import pytest

_PROVIDER_ENV_VARS = [
    "BANANAFLOW_GENERATION_LATENCY_MS",
    "BANANAFLOW_GENERATION_FAILURE_RATE",
]


@pytest.fixture
def clean_provider_env(monkeypatch):
    """清理 Provider 相关环境变量"""
    for key in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
