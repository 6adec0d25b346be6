"""全局 pytest 配置 -- 共享 fixture：内存 TaskStore、记录型 sleep、固定时钟"""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from bananaflow.core.store import InMemoryTaskStore

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class RecordingSleep:
    """退避等待替身：记录每次等待的秒数，不真正挂起"""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    """提供记录型 sleep，驱动循环的重试等待立即返回"""
    return RecordingSleep()


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    """提供空的内存 TaskStore"""
    return InMemoryTaskStore()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """提供固定时间源"""
    return lambda: FIXED_NOW
