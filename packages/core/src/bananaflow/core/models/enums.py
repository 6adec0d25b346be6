"""枚举定义 -- 任务状态机、生成模式（View）与变更类型

包含 TaskStatus 状态机、View 分类标签、TaskChangeKind，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态机

    pending 为唯一活跃状态（含重试等待中）；completed / error 为终态。
    """

    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


# 合法状态流转：pending -> pending 表示一次可恢复失败后的重试
VALID_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {
        TaskStatus.PENDING,
        TaskStatus.COMPLETED,
        TaskStatus.ERROR,
    },
    # 终态不可再流转
    TaskStatus.COMPLETED: set(),
    TaskStatus.ERROR: set(),
}

TERMINAL_STATES: set[TaskStatus] = {
    TaskStatus.COMPLETED,
    TaskStatus.ERROR,
}


class View(StrEnum):
    """生成模式分类标签 -- 仅用于路由与筛选，不参与编排逻辑"""

    CREATE = "create"
    MODEL = "model"
    TRY_ON = "try-on"
    POSTURE = "posture"
    BACKGROUND = "background"
    FUSION = "fusion"


class TaskChangeKind(StrEnum):
    """TaskStore 变更类型"""

    TASK_APPENDED = "TASK_APPENDED"
    TASK_UPDATED = "TASK_UPDATED"


def validate_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed
