"""Feed 分组单元测试

测试内容：
1. 按 view 过滤、按日期分组、按批次聚合
2. 分组是输入的划分（无遗漏、无重复）
3. 日期标签与时区
4. 展示提示词与下载文件名
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from bananaflow.core.feed import (
    date_label,
    display_prompt,
    download_filename,
    group_for_display,
)
from bananaflow.core.models import TaskStatus, View

PNG_REF = "data:image/png;base64,iVBORw0KGgo="
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


def _at(days_ago: int, hour: int = 9) -> datetime:
    return (NOW - timedelta(days=days_ago)).replace(hour=hour)


class TestGroupForDisplay:
    """group_for_display"""

    def test_empty(self):
        assert group_for_display([], View.CREATE, now=NOW) == []

    def test_filters_by_view(self, make_task):
        tasks = [
            make_task(task_id="a", view=View.CREATE),
            make_task(task_id="b", view=View.MODEL, input_images=(PNG_REF,)),
        ]
        groups = group_for_display(tasks, View.MODEL, now=NOW)
        assert [t.task_id for g in groups for t in g.tasks] == ["b"]

    def test_groups_by_day_newest_first(self, make_task):
        tasks = [
            make_task(task_id="old", timestamp=_at(3)),
            make_task(task_id="yesterday", timestamp=_at(1)),
            make_task(task_id="today-1", timestamp=_at(0, hour=8)),
            make_task(task_id="today-2", timestamp=_at(0, hour=10)),
        ]
        groups = group_for_display(tasks, View.CREATE, tz=UTC, now=NOW)

        assert [g.label for g in groups] == ["Today", "Yesterday", "October 15, 2026"]
        assert [g.day for g in groups] == [
            date(2026, 10, 18),
            date(2026, 10, 17),
            date(2026, 10, 15),
        ]
        assert [t.task_id for t in groups[0].tasks] == ["today-1", "today-2"]

    def test_batches_grouped_in_first_appearance_order(self, make_task):
        tasks = [
            make_task(task_id="solo-1"),
            make_task(task_id="b1-0", batch_id="b1"),
            make_task(task_id="b1-1", batch_id="b1"),
            make_task(task_id="solo-2"),
            make_task(task_id="b1-2", batch_id="b1"),
        ]
        [day] = group_for_display(tasks, View.CREATE, now=NOW)

        assert [g.key for g in day.groups] == ["solo-1", "b1", "solo-2"]
        assert [t.task_id for t in day.groups[1].tasks] == ["b1-0", "b1-1", "b1-2"]
        assert day.groups[0].batch_id is None

    def test_is_partition_of_filtered_input(self, make_task):
        tasks = [
            make_task(task_id=f"b{n // 4}-{n % 4}", batch_id=f"b{n // 4}", timestamp=_at(n % 3))
            for n in range(12)
        ] + [
            make_task(task_id="m", view=View.MODEL, input_images=(PNG_REF,)),
            make_task(task_id="s", timestamp=_at(5)),
        ]
        groups = group_for_display(tasks, View.CREATE, now=NOW)

        ids = [t.task_id for day in groups for batch in day.groups for t in batch.tasks]
        assert len(ids) == len(set(ids))
        assert set(ids) == {t.task_id for t in tasks if t.view == View.CREATE}

    def test_batch_status_failure_dominates(self, make_task):
        tasks = [
            make_task(task_id="b-0", batch_id="b", status=TaskStatus.COMPLETED),
            make_task(task_id="b-1", batch_id="b", status=TaskStatus.COMPLETED),
            make_task(task_id="b-2", batch_id="b", status=TaskStatus.COMPLETED),
            make_task(task_id="b-3", batch_id="b", status=TaskStatus.ERROR),
        ]
        [day] = group_for_display(tasks, View.CREATE, now=NOW)
        assert day.groups[0].status == TaskStatus.ERROR

    def test_timezone_shifts_day_and_label(self, make_task):
        """分组键与标签使用同一时区"""
        pacific = timezone(timedelta(hours=-7))
        task = make_task(timestamp=datetime(2026, 10, 18, 2, 0, tzinfo=UTC))

        [utc_day] = group_for_display([task], View.CREATE, tz=UTC, now=NOW)
        [local_day] = group_for_display([task], View.CREATE, tz=pacific, now=NOW)

        assert (utc_day.day, utc_day.label) == (date(2026, 10, 18), "Today")
        assert (local_day.day, local_day.label) == (date(2026, 10, 17), "Yesterday")


class TestDateLabel:
    @pytest.mark.parametrize(
        "day,label",
        [
            (date(2026, 10, 18), "Today"),
            (date(2026, 10, 17), "Yesterday"),
            (date(2026, 10, 16), "October 16, 2026"),
            (date(2025, 1, 5), "January 5, 2025"),
        ],
    )
    def test_labels(self, day: date, label: str):
        assert date_label(day, date(2026, 10, 18)) == label


class TestDisplayHelpers:
    def test_display_prompt_plain(self, make_task):
        assert display_prompt(make_task(prompt="a cat")) == "a cat"

    def test_display_prompt_with_images(self, make_task):
        task = make_task(prompt="a cat", input_images=(PNG_REF, PNG_REF))
        assert display_prompt(task) == "[2 images] a cat"

    def test_display_prompt_image_only(self, make_task):
        task = make_task(prompt="", input_images=(PNG_REF,))
        assert display_prompt(task) == "[1 image] (describing images)"

    def test_download_filename_slug(self, make_task):
        task = make_task(prompt="A Cat, on   Mars!")
        assert download_filename(task) == "bananaflow-a-cat-on-mars.jpeg"

    def test_download_filename_truncated(self, make_task):
        task = make_task(prompt="x" * 80)
        assert download_filename(task) == f"bananaflow-{'x' * 50}.jpeg"

    def test_download_filename_empty_prompt(self, make_task):
        task = make_task(prompt="", input_images=(PNG_REF,))
        assert download_filename(task) == "bananaflow-creation.jpeg"
