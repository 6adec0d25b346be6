"""packages/core 测试配置 -- 核心层 fixture"""

from datetime import UTC, datetime

import pytest
from bananaflow.core.models import Task, TaskStatus, View

PNG_REF = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def make_task():
    """Task 工厂：按需覆盖字段"""
    counter = iter(range(10_000))

    def _make(**overrides) -> Task:
        status = overrides.get("status", TaskStatus.PENDING)
        defaults: dict = {
            "task_id": f"task-{next(counter)}",
            "prompt": "a cat",
            "timestamp": datetime(2026, 10, 18, 9, 0, tzinfo=UTC),
            "view": View.CREATE,
        }
        if status == TaskStatus.COMPLETED:
            defaults["output_image_ref"] = PNG_REF
        elif status == TaskStatus.ERROR:
            defaults["error"] = "boom"
        defaults.update(overrides)
        return Task(**defaults)

    return _make
