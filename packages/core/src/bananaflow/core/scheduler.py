"""Scheduler -- 任务创建、扇出与逐任务重试状态机

实现提交后的任务处理流程：
1. 构造 SubmissionRequest（非法输入在此被拒绝，不创建任务）
2. 追加 1 个或 4 个（同批次）pending 任务到 TaskStore
3. 为每个任务启动独立的后台驱动循环（fire-and-forget）
4. 驱动循环调用 GenerationClient，按有界重试 + 指数退避推进状态

调用方不会拿到 future，只能通过观察 TaskStore 获知进度。
"""

import asyncio
import random
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError
from ulid import ULID

from . import reuse
from .config import (
    BATCH_SIZE,
    DESCRIBE_IMAGES_PROMPT,
    GENERIC_FAILURE_MESSAGE,
    SchedulerConfig,
)
from .exceptions import InvalidGenerationResultError, InvalidSubmissionError
from .models.enums import View
from .models.submission import SubmissionRequest, is_image_ref
from .models.task import Task
from .retry import backoff_delay_ms
from .store.protocols import TaskStore

if TYPE_CHECKING:
    from bananaflow.provider import GenerationClient

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


def dispatched_prompt(prompt: str, images: Sequence[str]) -> str:
    """实际下发给 GenerationClient 的提示词

    有图片且提示词为空时替换为描述指令；Task 上仍保存用户原始提示词。
    """
    if images and not prompt.strip():
        return DESCRIBE_IMAGES_PROMPT
    return prompt


class Scheduler:
    """任务调度器 -- TaskStore 的唯一写入方"""

    def __init__(
        self,
        store: TaskStore,
        client: "GenerationClient",
        config: SchedulerConfig | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            store: 任务存储
            client: 图像生成客户端
            config: 调度配置，默认 5 次尝试、1000ms 基数、不限并发
            rng: 抖动随机源
            sleep: 退避等待函数（秒），测试时可替换为记录型假实现
            clock: 时间源
        """
        self._store = store
        self._client = client
        self._config = config or SchedulerConfig()
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock
        self._drives: dict[str, asyncio.Task[None]] = {}
        self._slots = (
            asyncio.Semaphore(self._config.max_in_flight)
            if self._config.max_in_flight
            else None
        )

    @property
    def store(self) -> TaskStore:
        return self._store

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    def create_task(
        self,
        prompt: str,
        input_images: Sequence[str] = (),
        view: View = View.CREATE,
        fan_out: bool = False,
    ) -> None:
        """创建任务（提交入口）

        Raises:
            InvalidSubmissionError: 输入非法，未创建任何任务
        """
        try:
            request = SubmissionRequest(
                prompt=prompt,
                images=tuple(input_images),
                view=view,
                fan_out=fan_out,
            )
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            # 去掉 pydantic 为 ValueError 添加的前缀
            message = errors[0]["msg"].removeprefix("Value error, ") if errors else str(e)
            log.info("submission_rejected", view=str(view), reason=message)
            raise InvalidSubmissionError(message, errors) from e

        self.submit(request)

    def submit(self, request: SubmissionRequest) -> None:
        """追加任务并启动后台驱动循环，不返回结果"""
        now = self._clock()
        base_id = str(ULID())

        if request.fan_out:
            batch_id: str | None = base_id
            task_ids = [f"{base_id}-{index}" for index in range(BATCH_SIZE)]
        else:
            batch_id = None
            task_ids = [base_id]

        prompt = dispatched_prompt(request.prompt, request.images)
        for task_id in task_ids:
            task = Task(
                task_id=task_id,
                prompt=request.prompt,
                input_images=request.images,
                timestamp=now,
                view=request.view,
                batch_id=batch_id,
            )
            self._store.append(task)
            log.info(
                "task_created",
                task_id=task_id,
                batch_id=batch_id,
                view=str(request.view),
                image_count=len(request.images),
            )
            self._start_drive(task_id, prompt, request.images)

    def rerun(self, task: Task) -> None:
        """以原任务的输入重新提交，创建全新的任务/批次"""
        self.submit(reuse.rerun_request(task, self._store.snapshot()))

    def in_flight(self) -> int:
        """尚未到达终态的驱动循环数"""
        return len(self._drives)

    async def wait_idle(self) -> None:
        """等待当前所有驱动循环结束（含期间新提交的任务）"""
        while self._drives:
            await asyncio.gather(*list(self._drives.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """进程关闭时取消所有未结束的驱动循环"""
        drives = list(self._drives.values())
        for drive in drives:
            drive.cancel()
        if drives:
            await asyncio.gather(*drives, return_exceptions=True)
            log.info("scheduler_closed", cancelled=len(drives))

    def _start_drive(self, task_id: str, prompt: str, images: tuple[str, ...]) -> None:
        drive = asyncio.create_task(
            self._run_drive(task_id, prompt, images),
            name=f"drive-{task_id}",
        )
        self._drives[task_id] = drive
        drive.add_done_callback(lambda _: self._drives.pop(task_id, None))

    async def _run_drive(self, task_id: str, prompt: str, images: tuple[str, ...]) -> None:
        """驱动循环外壳：任何未预期异常都被限制在本任务内"""
        try:
            await self._drive(task_id, prompt, images)
        except Exception:
            log.exception("task_drive_crashed", task_id=task_id)

    async def _drive(self, task_id: str, prompt: str, images: tuple[str, ...]) -> None:
        """单任务状态机：pending(attempt=n) -> completed | pending(n+1) | error"""
        policy = self._config.retry
        attempt = 1
        while True:
            try:
                image_ref = await self._generate(prompt, images)
            except Exception as e:
                message = str(e) or GENERIC_FAILURE_MESSAGE
                log.warning(
                    "generation_attempt_failed",
                    task_id=task_id,
                    attempt=attempt,
                    error_type=type(e).__name__,
                )
                if not policy.should_retry(attempt):
                    self._store.update_by_id(task_id, lambda t: t.fail(message))
                    log.error(
                        "task_failed",
                        task_id=task_id,
                        attempts=attempt,
                        error=message,
                    )
                    return

                failed_attempt = attempt
                self._store.update_by_id(
                    task_id, lambda t: t.record_retry(failed_attempt)
                )
                delay_ms = backoff_delay_ms(attempt, policy, self._rng)
                log.info(
                    "generation_retry_scheduled",
                    task_id=task_id,
                    next_attempt=attempt + 1,
                    delay_ms=round(delay_ms),
                )
                await self._sleep(delay_ms / 1000)
                attempt += 1
                continue

            completed_at = self._clock()
            self._store.update_by_id(
                task_id, lambda t: t.complete(image_ref, completed_at)
            )
            log.info("task_completed", task_id=task_id, attempts=attempt)
            return

    async def _generate(self, prompt: str, images: tuple[str, ...]) -> str:
        """调用 GenerationClient；返回值不是图片引用时视为本次尝试失败"""
        if self._slots is None:
            result = await self._client.generate(prompt, images)
        else:
            async with self._slots:
                result = await self._client.generate(prompt, images)
        if not isinstance(result, str) or not is_image_ref(result):
            raise InvalidGenerationResultError(result)
        return result
