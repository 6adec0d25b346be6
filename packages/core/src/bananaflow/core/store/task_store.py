"""TaskStore 内存实现

会话级、append-only 的有序任务集合，是任务状态的唯一事实来源。
所有方法均为同步方法，内部没有 await：在单事件循环上天然串行化，
并发完成的多个任务各自读取最新快照再写回，不会丢失更新。
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from ..exceptions import DuplicateTaskIdError, InvalidTaskUpdateError, TaskNotFoundError
from ..models.enums import TaskChangeKind, TaskStatus, View, validate_transition
from ..models.event import TaskChange
from ..models.task import Task

log = structlog.get_logger()

# 创建后不可修改的字段
_IMMUTABLE_FIELDS = ("task_id", "prompt", "input_images", "view", "batch_id")


class InMemoryTaskStore:
    """TaskStore 的内存实现"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._tasks: list[Task] = []
        self._positions: dict[str, int] = {}
        self._seq = 0
        self._subscribers: set[asyncio.Queue[TaskChange | None]] = set()
        self._queue_maxsize = queue_maxsize

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def version(self) -> int:
        """最近一次变更的序号，未变更时为 0"""
        return self._seq

    def append(self, task: Task) -> Task:
        """追加新任务

        Raises:
            DuplicateTaskIdError: task_id 已存在
        """
        if task.task_id in self._positions:
            raise DuplicateTaskIdError(task.task_id)
        self._positions[task.task_id] = len(self._tasks)
        self._tasks.append(task)
        self._broadcast(TaskChangeKind.TASK_APPENDED, task)
        return task

    def update_by_id(self, task_id: str, transform: Callable[[Task], Task]) -> Task:
        """读取最新快照，应用纯函数变换并校验后写回

        Args:
            task_id: 任务 ID
            transform: 旧快照 -> 新快照 的纯函数

        Returns:
            写回后的 Task 快照

        Raises:
            TaskNotFoundError: 任务不存在
            InvalidTaskUpdateError: 变换结果违反 Task 不变量
        """
        position = self._positions.get(task_id)
        if position is None:
            raise TaskNotFoundError(task_id)

        current = self._tasks[position]
        updated = self._validated(current, transform(current))
        self._tasks[position] = updated
        self._broadcast(TaskChangeKind.TASK_UPDATED, updated)
        return updated

    def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        position = self._positions.get(task_id)
        if position is None:
            return None
        return self._tasks[position]

    def snapshot(self) -> tuple[Task, ...]:
        """按创建顺序返回全部任务"""
        return tuple(self._tasks)

    def list_tasks(
        self,
        view: View | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """查询任务列表，支持按 view / status 筛选，按创建顺序"""
        return [
            t
            for t in self._tasks
            if (view is None or t.view == view)
            and (status is None or t.status == status)
        ]

    def subscribe(self) -> asyncio.Queue[TaskChange | None]:
        """订阅变更通知

        Returns:
            asyncio.Queue 实例，新变更会被推送到此队列。
            队列积压已满时订阅被移除，队列中只剩一个 None 作为失效标记，
            订阅方收到后应重新订阅并以 snapshot() 重建状态。
        """
        queue: asyncio.Queue[TaskChange | None] = asyncio.Queue(
            maxsize=self._queue_maxsize
        )
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[TaskChange | None]) -> None:
        """取消订阅"""
        self._subscribers.discard(queue)

    @staticmethod
    def _validated(current: Task, updated: Task) -> Task:
        """校验 current -> updated 是否满足 Task 不变量"""
        task_id = current.task_id
        if current.is_terminal:
            raise InvalidTaskUpdateError(
                task_id, f"task is already in terminal state: {current.status}"
            )
        for field in _IMMUTABLE_FIELDS:
            if getattr(updated, field) != getattr(current, field):
                raise InvalidTaskUpdateError(task_id, f"field '{field}' is immutable")
        if updated.retry_count < current.retry_count:
            raise InvalidTaskUpdateError(task_id, "retry_count must not decrease")
        if not validate_transition(current.status, updated.status):
            raise InvalidTaskUpdateError(
                task_id, f"cannot transition from {current.status} to {updated.status}"
            )
        # model_copy 不触发校验，这里重新校验 outcome 不变量
        try:
            return Task.model_validate(updated.model_dump())
        except ValidationError as e:
            raise InvalidTaskUpdateError(task_id, str(e)) from e

    def _broadcast(self, kind: TaskChangeKind, task: Task) -> None:
        """向所有订阅者广播变更，已满的队列清空后写入 None 并移除"""
        self._seq += 1
        change = TaskChange(seq=self._seq, ts=datetime.now(UTC), kind=kind, task=task)

        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(change)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for q in dead_queues:
            self._subscribers.discard(q)
            # 积压的变更已无意义，订阅方将以快照重建
            while not q.empty():
                q.get_nowait()
            q.put_nowait(None)
            log.warning("task_change_subscriber_dropped", seq=self._seq)
