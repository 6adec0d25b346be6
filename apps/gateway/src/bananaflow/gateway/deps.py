"""依赖注入模块 -- 通过 FastAPI Depends 注入 TaskStore / Scheduler

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from bananaflow.core.scheduler import Scheduler
from bananaflow.core.store import TaskStore
from fastapi import Request


def get_task_store(request: Request) -> TaskStore:
    """从 app.state 获取 TaskStore 实例"""
    return request.app.state.task_store


def get_scheduler(request: Request) -> Scheduler:
    """从 app.state 获取 Scheduler 实例"""
    return request.app.state.scheduler
