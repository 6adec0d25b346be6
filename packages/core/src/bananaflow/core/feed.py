"""Feed 分组 -- 纯读侧函数，将 TaskStore 快照划分为日期分组与批次分组

不修改任何状态；每个输入任务（按 view 过滤后）恰好出现在一个输出分组中。
"""

import re
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta, tzinfo

from .models.enums import View
from .models.feed import BatchGroup, DateGroup, aggregate_status
from .models.task import Task

# 下载文件名中 slug 的最大长度
FILENAME_SLUG_MAX_LENGTH = 50

__all__ = [
    "aggregate_status",
    "date_label",
    "display_prompt",
    "download_filename",
    "group_for_display",
]


def date_label(day: date, today: date) -> str:
    """可读日期标签：Today / Yesterday / October 18, 2026"""
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%B} {day.day}, {day.year}"


def _group_batches(tasks: list[Task]) -> tuple[BatchGroup, ...]:
    """按 batch_id 聚合，保持首次出现顺序；无 batch_id 的任务单独成组"""
    order: list[str] = []
    members: dict[str, list[Task]] = {}
    batch_ids: dict[str, str | None] = {}
    for task in tasks:
        key = f"batch:{task.batch_id}" if task.batch_id else f"task:{task.task_id}"
        if key not in members:
            order.append(key)
            members[key] = []
            batch_ids[key] = task.batch_id
        members[key].append(task)
    return tuple(
        BatchGroup(batch_id=batch_ids[key], tasks=tuple(members[key])) for key in order
    )


def group_for_display(
    tasks: Iterable[Task],
    active_view: View,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> list[DateGroup]:
    """按日期 + 批次分组当前任务

    Args:
        tasks: TaskStore 快照
        active_view: 仅保留该模式的任务
        tz: 分组键与标签共用的时区，默认 UTC
        now: 计算 Today / Yesterday 的参考时间，默认当前时间

    Returns:
        日期分组列表，按各组首个任务的 timestamp 倒序
    """
    zone = tz or UTC
    today = (now or datetime.now(UTC)).astimezone(zone).date()

    by_day: dict[date, list[Task]] = {}
    for task in tasks:
        if task.view != active_view:
            continue
        day = task.timestamp.astimezone(zone).date()
        by_day.setdefault(day, []).append(task)

    ordered_days = sorted(
        by_day,
        key=lambda d: by_day[d][0].timestamp,
        reverse=True,
    )
    return [
        DateGroup(
            day=day,
            label=date_label(day, today),
            groups=_group_batches(by_day[day]),
        )
        for day in ordered_days
    ]


def display_prompt(task: Task) -> str:
    """卡片展示用提示词：有图片时带 [N image(s)] 前缀"""
    if not task.input_images:
        return task.prompt
    count = len(task.input_images)
    prefix = f"[{count} image{'s' if count > 1 else ''}]"
    if not task.prompt.strip():
        return f"{prefix} (describing images)"
    return f"{prefix} {task.prompt}"


def download_filename(task: Task) -> str:
    """由提示词生成下载文件名"""
    slug = re.sub(r"\s+", "-", task.prompt.lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)[:FILENAME_SLUG_MAX_LENGTH]
    return f"bananaflow-{slug or 'creation'}.jpeg"
