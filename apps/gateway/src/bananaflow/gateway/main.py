"""FastAPI 应用主文件

app 创建 + lifespan 管理：TaskStore / GenerationClient / Scheduler 初始化，
关闭时取消未结束的任务驱动循环，并注册路由。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from bananaflow.core.config import load_scheduler_config
from bananaflow.core.scheduler import Scheduler
from bananaflow.core.store import InMemoryTaskStore
from bananaflow.provider import create_generation_client, load_provider_config
from fastapi import FastAPI

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import feed, health, stream, submission, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化编排组件，关闭时取消驱动循环"""
    store = InMemoryTaskStore()
    app.state.task_store = store

    provider_config = load_provider_config()
    app.state.provider_config = provider_config
    client = create_generation_client(provider_config)
    app.state.generation_client = client

    scheduler_config = load_scheduler_config()
    scheduler = Scheduler(store, client, scheduler_config)
    app.state.scheduler = scheduler

    log.info(
        "scheduler_initialized",
        max_attempts=scheduler_config.retry.max_attempts,
        max_in_flight=scheduler_config.max_in_flight,
        latency_ms=provider_config.latency_ms,
        failure_rate=provider_config.failure_rate,
    )

    yield

    await scheduler.aclose()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="BananaFlow Gateway",
        version="0.1.0",
        description="BananaFlow 图像生成任务编排 API",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()

    # 注册路由
    app.include_router(submission.router, tags=["submission"])
    app.include_router(feed.router, tags=["feed"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
