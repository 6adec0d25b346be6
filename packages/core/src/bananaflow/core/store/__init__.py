"""BananaFlow Core Store -- 会话级任务存储"""

from .protocols import TaskStore
from .task_store import InMemoryTaskStore

__all__ = [
    "TaskStore",
    "InMemoryTaskStore",
]
