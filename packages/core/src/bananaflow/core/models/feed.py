"""Feed 展示分组模型

DateGroup 按日历日聚合，内部再按 batch_id 聚合为 BatchGroup。
"""

from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import TaskStatus
from .task import Task


def aggregate_status(tasks: Iterable[Task]) -> TaskStatus:
    """批次聚合状态：任一 error 即 error；全部 completed 才 completed；否则 pending"""
    statuses = [t.status for t in tasks]
    if TaskStatus.ERROR in statuses:
        return TaskStatus.ERROR
    if statuses and all(s == TaskStatus.COMPLETED for s in statuses):
        return TaskStatus.COMPLETED
    return TaskStatus.PENDING


class BatchGroup(BaseModel):
    """同一批次（或单个无批次任务）的展示分组"""

    model_config = ConfigDict(frozen=True)

    batch_id: str | None = Field(default=None, description="批次标识，单任务为 None")
    tasks: tuple[Task, ...] = Field(description="成员任务，保持批次原始顺序")

    @computed_field
    @property
    def key(self) -> str:
        return self.batch_id or self.tasks[0].task_id

    @computed_field
    @property
    def status(self) -> TaskStatus:
        return aggregate_status(self.tasks)


class DateGroup(BaseModel):
    """同一日历日的展示分组"""

    model_config = ConfigDict(frozen=True)

    day: date = Field(description="分组日期（Feed 时区）")
    label: str = Field(description="可读日期标签")
    groups: tuple[BatchGroup, ...] = Field(description="批次分组，按首次出现排序")

    @property
    def tasks(self) -> list[Task]:
        return [task for group in self.groups for task in group.tasks]
