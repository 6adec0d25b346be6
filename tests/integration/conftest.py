"""集成测试配置 -- Scheduler + TaskStore + GenerationClient 组装"""

import random

import pytest
from bananaflow.core.scheduler import Scheduler
from bananaflow.provider import ScriptedGenerationClient


@pytest.fixture
def scripted_client() -> ScriptedGenerationClient:
    """空脚本客户端，测试中按需 extend"""
    return ScriptedGenerationClient()


@pytest.fixture
def scheduler(task_store, scripted_client, fake_sleep, fixed_clock) -> Scheduler:
    """使用脚本客户端与记录型 sleep 的 Scheduler"""
    return Scheduler(
        task_store,
        scripted_client,
        rng=random.Random(42),
        sleep=fake_sleep,
        clock=fixed_clock,
    )
