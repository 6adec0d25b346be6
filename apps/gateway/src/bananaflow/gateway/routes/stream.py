"""SSE 变更流路由

GET /api/stream/tasks?view=<view>: SSE 实时推送 TaskStore 变更。
连接建立后先推送一次当前快照，再推送增量变更，空闲时发送心跳保活。
"""

import asyncio
import json
from collections.abc import AsyncIterator

import structlog
from bananaflow.core.config import get_sse_heartbeat_interval
from bananaflow.core.models import TaskChange, View
from bananaflow.core.store import TaskStore
from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from ..deps import get_task_store

router = APIRouter()
log = structlog.get_logger()


def _change_to_sse(change: TaskChange) -> dict:
    """将 TaskChange 转换为 SSE 消息"""
    return {
        "id": str(change.seq),
        "event": change.kind.value,
        "data": json.dumps(change.model_dump(mode="json"), ensure_ascii=False),
    }


def _snapshot_event(store: TaskStore, view: View | None) -> dict:
    tasks = [
        t.model_dump(mode="json")
        for t in store.snapshot()
        if view is None or t.view == view
    ]
    return {
        "event": "SNAPSHOT",
        "data": json.dumps({"tasks": tasks}, ensure_ascii=False),
    }


async def task_change_events(
    store: TaskStore,
    view: View | None = None,
    heartbeat_interval: float | None = None,
) -> AsyncIterator[dict]:
    """TaskStore 变更事件生成器

    1. 推送当前快照（event: SNAPSHOT）
    2. 推送后续变更（event: TASK_APPENDED / TASK_UPDATED）
    3. heartbeat_interval 秒无变更时推送心跳注释，默认读取环境变量配置
    4. 订阅因积压失效时重新订阅，并再次推送 SNAPSHOT
    """
    interval = heartbeat_interval or get_sse_heartbeat_interval()
    # 先订阅再取快照，避免两者之间的变更丢失
    queue = store.subscribe()
    try:
        yield _snapshot_event(store, view)

        while True:
            try:
                change = await asyncio.wait_for(queue.get(), timeout=interval)
            except TimeoutError:
                yield {"comment": "heartbeat"}
                continue
            if change is None:
                # 消费过慢被 TaskStore 移除：重新订阅并推送最新快照
                queue = store.subscribe()
                log.info("task_stream_resynced", view=str(view) if view else None)
                yield _snapshot_event(store, view)
                continue
            if view is not None and change.task.view != view:
                continue
            yield _change_to_sse(change)
    finally:
        store.unsubscribe(queue)


@router.get("/api/stream/tasks")
async def stream_task_changes(
    view: View | None = Query(default=None, description="仅推送该模式的任务"),
    store=Depends(get_task_store),
):
    """SSE 变更流端点"""
    return EventSourceResponse(task_change_events(store, view))
