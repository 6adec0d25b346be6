"""TaskChange Domain Model -- TaskStore 变更通知

store 每次 append / update 成功后广播一条 TaskChange。
seq 在 store 内严格单调递增，可用于订阅端判断是否漏收。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskChangeKind
from .task import Task


class TaskChange(BaseModel):
    """TaskChange 数据模型"""

    model_config = ConfigDict(frozen=True)

    seq: int = Field(description="store 内序号，严格单调递增")
    ts: datetime = Field(description="变更时间戳")
    kind: TaskChangeKind = Field(description="变更类型")
    task: Task = Field(description="变更后的 Task 快照")
