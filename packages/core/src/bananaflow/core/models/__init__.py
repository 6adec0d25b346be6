"""BananaFlow Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    TaskChangeKind,
    TaskStatus,
    View,
    validate_transition,
)
from .event import TaskChange
from .feed import BatchGroup, DateGroup, aggregate_status
from .submission import (
    VIEW_IMAGE_LIMITS,
    SubmissionRequest,
    SubmissionSeed,
    is_image_ref,
)
from .task import Task

__all__ = [
    # 枚举
    "TaskStatus",
    "View",
    "TaskChangeKind",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "validate_transition",
    # Task
    "Task",
    "TaskChange",
    # 提交
    "SubmissionRequest",
    "SubmissionSeed",
    "VIEW_IMAGE_LIMITS",
    "is_image_ref",
    # Feed
    "BatchGroup",
    "DateGroup",
    "aggregate_status",
]
