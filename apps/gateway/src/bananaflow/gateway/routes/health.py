"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 TaskStore、Scheduler、GenerationClient 就绪状态。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心组件已初始化

    检查项：
    1. task_store: 已初始化，附带任务数
    2. scheduler: 已初始化，附带进行中的驱动循环数
    3. generation_client: 已初始化
    """
    state = request.app.state
    checks: dict = {}
    all_ok = True

    store = getattr(state, "task_store", None)
    if store is not None:
        checks["task_store"] = "ok"
        checks["task_count"] = len(store.snapshot())
    else:
        checks["task_store"] = "error: not initialized"
        all_ok = False

    scheduler = getattr(state, "scheduler", None)
    if scheduler is not None:
        checks["scheduler"] = "ok"
        checks["in_flight"] = scheduler.in_flight()
    else:
        checks["scheduler"] = "error: not initialized"
        all_ok = False

    if getattr(state, "generation_client", None) is not None:
        checks["generation_client"] = "ok"
    else:
        checks["generation_client"] = "error: not initialized"
        all_ok = False

    if not all_ok:
        log.warning("readiness_check_failed", checks=checks)

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
