"""提交请求与复用种子模型

SubmissionRequest 在构造时完成全部输入校验：非法输入在进入 Scheduler
之前即被拒绝，不会创建任何 Task。
SubmissionSeed 是 insert / edit 复用流程产出的表单预填数据。
"""

import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import MAX_INPUT_IMAGES
from .enums import View

# data URL 或 http(s) URL
IMAGE_REF_PATTERN = re.compile(
    r"^(data:image/[a-zA-Z0-9.+-]+;base64,.+|https?://\S+)$",
    re.DOTALL,
)

# 各模式的输入图片数量约束 (min, max)，与表单一致
VIEW_IMAGE_LIMITS: dict[View, tuple[int, int]] = {
    View.CREATE: (0, MAX_INPUT_IMAGES),
    View.MODEL: (1, MAX_INPUT_IMAGES),
    View.TRY_ON: (2, 2),
    View.POSTURE: (1, 1),
    View.BACKGROUND: (1, 1),
    View.FUSION: (2, 2),
}


def is_image_ref(value: str) -> bool:
    """判断字符串是否为可接受的图片引用"""
    return bool(IMAGE_REF_PATTERN.match(value))


class SubmissionRequest(BaseModel):
    """一次用户提交 -- prompt + 0~4 张图片 + 模式 + 是否扇出"""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(default="", description="用户提示词，有图片时可为空")
    images: tuple[str, ...] = Field(default=(), description="输入图片引用")
    view: View = Field(default=View.CREATE, description="生成模式")
    fan_out: bool = Field(default=False, description="True 时生成 4 个同批次任务")

    @model_validator(mode="after")
    def _check_inputs(self) -> "SubmissionRequest":
        if len(self.images) > MAX_INPUT_IMAGES:
            raise ValueError(
                f"You can upload a maximum of {MAX_INPUT_IMAGES} images."
            )
        for index, ref in enumerate(self.images):
            if not is_image_ref(ref):
                raise ValueError(f"Invalid image reference at position {index}.")
        if not self.prompt.strip() and not self.images:
            raise ValueError("A prompt or at least one image is required.")

        low, high = VIEW_IMAGE_LIMITS[self.view]
        count = len(self.images)
        if count < low or count > high:
            expected = str(low) if low == high else f"{low}-{high}"
            raise ValueError(
                f"View '{self.view}' expects {expected} input image(s), got {count}."
            )
        return self


class SubmissionSeed(BaseModel):
    """表单预填种子 -- 不创建任务，仅做数据搬运"""

    model_config = ConfigDict(frozen=True)

    view: View
    prompt: str
    input_images: tuple[str, ...] = ()
