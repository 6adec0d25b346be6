"""Core 异常体系"""


class OrchestrationError(Exception):
    """Core 包基础异常"""


class InvalidSubmissionError(OrchestrationError):
    """提交参数非法 -- 在创建任务前被拒绝，不进入重试流程"""

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        """
        Args:
            message: 错误描述
            errors: 逐字段的校验错误（pydantic errors() 格式）
        """
        super().__init__(message)
        self.errors = errors or []


class DuplicateTaskIdError(OrchestrationError):
    """task_id 已存在于 TaskStore"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} already exists")
        self.task_id = task_id


class TaskNotFoundError(OrchestrationError):
    """task_id 不存在"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class InvalidTaskUpdateError(OrchestrationError):
    """更新违反 Task 不变量（非法流转、修改不可变字段、retry_count 回退等）"""

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(f"Invalid update for task {task_id}: {reason}")
        self.task_id = task_id
        self.reason = reason


class TaskNotReusableError(OrchestrationError):
    """任务当前状态无法作为复用来源（例如尚无输出图片）"""

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(f"Task {task_id} cannot be reused: {reason}")
        self.task_id = task_id
        self.reason = reason


class InvalidGenerationResultError(OrchestrationError):
    """GenerationClient 返回值不是可用的图片引用 -- 按一次失败尝试处理"""

    def __init__(self, result: object) -> None:
        super().__init__("No image was generated in the response.")
        self.result_type = type(result).__name__
