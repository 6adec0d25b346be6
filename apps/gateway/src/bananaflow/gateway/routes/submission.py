"""提交路由

POST /api/submissions: 接收一次生成提交，创建 1 个或 4 个任务后立即返回。
调用方不等待生成结果，只能通过 Feed / SSE 观察进度。
"""

from bananaflow.core.config import BATCH_SIZE
from bananaflow.core.exceptions import InvalidSubmissionError
from bananaflow.core.models import View
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_scheduler

router = APIRouter()


class SubmissionBody(BaseModel):
    """提交请求体"""

    prompt: str = Field(default="", description="提示词，有图片时可为空")
    images: list[str] = Field(default_factory=list, description="输入图片（data URL）")
    view: View = Field(default=View.CREATE, description="生成模式")
    fan_out: bool = Field(default=False, description="是否一次生成 4 张")


class SubmissionResponse(BaseModel):
    """提交受理响应"""

    accepted: bool
    task_count: int


@router.post("/api/submissions", status_code=202)
async def submit(
    body: SubmissionBody,
    scheduler=Depends(get_scheduler),
):
    """受理提交

    - 合法提交返回 202
    - 非法输入返回 422，不创建任务
    """
    try:
        scheduler.create_task(
            body.prompt,
            body.images,
            body.view,
            body.fan_out,
        )
    except InvalidSubmissionError as e:
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "INVALID_SUBMISSION",
                    "message": str(e),
                }
            },
        )

    return SubmissionResponse(
        accepted=True,
        task_count=BATCH_SIZE if body.fan_out else 1,
    )
