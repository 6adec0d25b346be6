"""Feed 路由

GET /api/feed?view=<view>: 当前模式下按日期、批次分组的任务视图。
"""

from bananaflow.core.config import get_feed_timezone
from bananaflow.core.feed import display_prompt, download_filename, group_for_display
from bananaflow.core.models import View
from fastapi import APIRouter, Depends, Query

from ..deps import get_task_store

router = APIRouter()


@router.get("/api/feed")
async def get_feed(
    view: View = Query(default=View.CREATE, description="生成模式"),
    store=Depends(get_task_store),
):
    """按日期倒序返回分组；每个批次分组附带聚合状态"""
    date_groups = group_for_display(store.snapshot(), view, tz=get_feed_timezone())

    return {
        "view": view.value,
        "dates": [
            {
                "date": group.day.isoformat(),
                "label": group.label,
                "groups": [
                    {
                        "key": batch.key,
                        "batch_id": batch.batch_id,
                        "status": batch.status.value,
                        "tasks": [
                            {
                                **task.model_dump(mode="json"),
                                "display_prompt": display_prompt(task),
                                "download_filename": download_filename(task),
                            }
                            for task in batch.tasks
                        ],
                    }
                    for batch in group.groups
                ],
            }
            for group in date_groups
        ],
    }
