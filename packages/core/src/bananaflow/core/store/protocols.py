"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
"""

import asyncio
from collections.abc import Callable
from typing import Protocol

from ..models.enums import TaskStatus, View
from ..models.event import TaskChange
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口

    append-only：任务只追加、按 id 更新，从不删除。
    """

    def append(self, task: Task) -> Task:
        """追加新任务"""
        ...

    def update_by_id(self, task_id: str, transform: Callable[[Task], Task]) -> Task:
        """读取最新快照并应用纯函数变换"""
        ...

    def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    def snapshot(self) -> tuple[Task, ...]:
        """按创建顺序返回全部任务的不可变快照"""
        ...

    def list_tasks(
        self,
        view: View | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """查询任务列表，支持按 view / status 筛选"""
        ...

    def subscribe(self) -> asyncio.Queue[TaskChange | None]:
        """订阅变更通知，收到 None 表示订阅已因积压失效"""
        ...

    def unsubscribe(self, queue: asyncio.Queue[TaskChange | None]) -> None:
        """取消订阅"""
        ...
