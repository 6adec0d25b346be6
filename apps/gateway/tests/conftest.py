"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient fixture

ASGITransport 不触发 lifespan，测试中手动初始化 app.state。
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from bananaflow.core.scheduler import Scheduler
from bananaflow.provider import EchoGenerationClient
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def app(task_store, fake_sleep):
    """创建测试用 FastAPI app 实例"""
    from bananaflow.gateway.middleware.logging_mw import LoggingMiddleware
    from bananaflow.gateway.routes import feed, health, stream, submission, tasks
    from fastapi import FastAPI

    application = FastAPI()
    application.add_middleware(LoggingMiddleware)
    application.include_router(submission.router)
    application.include_router(feed.router)
    application.include_router(tasks.router)
    application.include_router(stream.router)
    application.include_router(health.router)

    client = EchoGenerationClient()
    scheduler = Scheduler(task_store, client, sleep=fake_sleep)
    application.state.task_store = task_store
    application.state.generation_client = client
    application.state.scheduler = scheduler

    yield application

    await scheduler.aclose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
