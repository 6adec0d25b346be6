"""任务查询与复用路由

GET  /api/tasks: 任务列表，支持 view / status 筛选。
GET  /api/tasks/{task_id}: 任务详情。
POST /api/tasks/{task_id}/rerun: 以相同输入重新提交（新任务/新批次）。
GET  /api/tasks/{task_id}/seed: 预填表单种子（insert）。
POST /api/tasks/{task_id}/edit-seed: 以输出图片为输入的编辑种子。
"""

from bananaflow.core import reuse
from bananaflow.core.exceptions import TaskNotReusableError
from bananaflow.core.models import TaskStatus, View
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_scheduler, get_task_store

router = APIRouter()


class EditSeedBody(BaseModel):
    """编辑种子请求体"""

    instruction: str = Field(default="", description="编辑指令，如 'Make the sky purple'")


def _task_not_found(task_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": {
                "code": "TASK_NOT_FOUND",
                "message": f"Task with id {task_id} does not exist",
            }
        },
    )


@router.get("/api/tasks")
async def list_tasks(
    view: View | None = Query(default=None, description="按模式筛选"),
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    store=Depends(get_task_store),
):
    """查询任务列表，按创建顺序"""
    tasks = store.list_tasks(view=view, status=status)
    return {"tasks": [t.model_dump(mode="json") for t in tasks]}


@router.get("/api/tasks/{task_id}")
async def get_task_detail(
    task_id: str,
    store=Depends(get_task_store),
):
    """查询任务详情"""
    task = store.get_task(task_id)
    if task is None:
        return _task_not_found(task_id)
    return {"task": task.model_dump(mode="json")}


@router.post("/api/tasks/{task_id}/rerun", status_code=202)
async def rerun_task(
    task_id: str,
    store=Depends(get_task_store),
    scheduler=Depends(get_scheduler),
):
    """以原任务输入重新提交；原任务保持不变"""
    task = store.get_task(task_id)
    if task is None:
        return _task_not_found(task_id)

    fan_out = reuse.batch_size(task, store.snapshot()) > 1
    scheduler.rerun(task)
    return {
        "accepted": True,
        "source_task_id": task_id,
        "fan_out": fan_out,
    }


@router.get("/api/tasks/{task_id}/seed")
async def get_insert_seed(
    task_id: str,
    store=Depends(get_task_store),
):
    """返回预填表单用的种子，不创建任务"""
    task = store.get_task(task_id)
    if task is None:
        return _task_not_found(task_id)
    return {"seed": reuse.insert(task).model_dump(mode="json")}


@router.post("/api/tasks/{task_id}/edit-seed")
async def get_edit_seed(
    task_id: str,
    body: EditSeedBody,
    store=Depends(get_task_store),
):
    """返回以任务输出图片为输入的编辑种子

    - 任务尚无输出返回 409
    """
    task = store.get_task(task_id)
    if task is None:
        return _task_not_found(task_id)

    try:
        seed = reuse.edit_seed(task, body.instruction)
    except TaskNotReusableError as e:
        return JSONResponse(
            status_code=409,
            content={
                "error": {
                    "code": "TASK_NOT_REUSABLE",
                    "message": str(e),
                }
            },
        )
    return {"seed": seed.model_dump(mode="json")}
