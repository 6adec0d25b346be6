"""Task Domain Model -- 一次生成请求及其生命周期状态

Task 是不可变快照（frozen），状态推进通过 complete / fail / record_retry
生成新快照，由 TaskStore.update_by_id 统一落地。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import TaskStatus, View


class Task(BaseModel):
    """Task 数据模型

    不变量：
    - pending: output_image_ref 与 error 均为空
    - completed: 仅 output_image_ref 有值
    - error: 仅 error 有值
    """

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(description="唯一标识，ULID；批次成员追加 -<index> 后缀")
    prompt: str = Field(default="", description="用户原始提示词（展示用，可为空）")
    input_images: tuple[str, ...] = Field(
        default=(),
        max_length=4,
        description="输入图片引用，创建后不可变",
    )
    output_image_ref: str | None = Field(default=None, description="生成结果图片引用")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    error: str | None = Field(default=None, description="终态失败信息")
    retry_count: int = Field(default=0, ge=0, description="已失败的尝试次数")
    timestamp: datetime = Field(description="创建或最近一次完成的时间")
    view: View = Field(default=View.CREATE, description="生成模式分类")
    batch_id: str | None = Field(default=None, description="扇出批次标识")

    @model_validator(mode="after")
    def _check_outcome(self) -> "Task":
        has_output = self.output_image_ref is not None
        has_error = self.error is not None
        if self.status == TaskStatus.PENDING and (has_output or has_error):
            raise ValueError("pending task must not carry output or error")
        if self.status == TaskStatus.COMPLETED and (not has_output or has_error):
            raise ValueError("completed task must carry output_image_ref only")
        if self.status == TaskStatus.ERROR and (not has_error or has_output):
            raise ValueError("error task must carry error message only")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status != TaskStatus.PENDING

    def record_retry(self, attempt: int) -> "Task":
        """第 attempt 次尝试失败且仍可重试：保持 pending，retry_count = attempt"""
        return self.model_copy(update={"retry_count": attempt})

    def complete(self, output_image_ref: str, at: datetime) -> "Task":
        """成功完成：写入结果并刷新 timestamp"""
        return self.model_copy(
            update={
                "status": TaskStatus.COMPLETED,
                "output_image_ref": output_image_ref,
                "timestamp": at,
            }
        )

    def fail(self, message: str) -> "Task":
        """重试耗尽：进入 error 终态"""
        return self.model_copy(
            update={
                "status": TaskStatus.ERROR,
                "error": message,
            }
        )
