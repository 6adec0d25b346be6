"""Domain Models 单元测试

测试内容：
1. Task outcome 不变量
2. Task 状态推进方法
3. SubmissionRequest 输入校验
4. Feed 聚合状态
"""

from datetime import UTC, datetime

import pytest
from bananaflow.core.models import (
    BatchGroup,
    SubmissionRequest,
    Task,
    TaskStatus,
    View,
    aggregate_status,
    is_image_ref,
)
from pydantic import ValidationError

PNG_REF = "data:image/png;base64,iVBORw0KGgo="

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class TestTaskModel:
    """Task 模型测试"""

    def test_defaults(self):
        task = Task(task_id="t1", timestamp=NOW)
        assert task.status == TaskStatus.PENDING
        assert task.prompt == ""
        assert task.input_images == ()
        assert task.output_image_ref is None
        assert task.error is None
        assert task.retry_count == 0
        assert task.view == View.CREATE
        assert task.batch_id is None
        assert task.is_terminal is False

    def test_frozen(self):
        """Task 是不可变快照"""
        task = Task(task_id="t1", timestamp=NOW)
        with pytest.raises(ValidationError):
            task.status = TaskStatus.COMPLETED

    @pytest.mark.parametrize(
        "fields",
        [
            {"status": TaskStatus.PENDING, "output_image_ref": PNG_REF},
            {"status": TaskStatus.PENDING, "error": "boom"},
            {"status": TaskStatus.COMPLETED},
            {"status": TaskStatus.COMPLETED, "output_image_ref": PNG_REF, "error": "boom"},
            {"status": TaskStatus.ERROR},
            {"status": TaskStatus.ERROR, "output_image_ref": PNG_REF, "error": "boom"},
        ],
    )
    def test_outcome_invariant_rejected(self, fields: dict):
        """终态必须恰好携带 output_image_ref 或 error 之一；pending 两者皆无"""
        with pytest.raises(ValidationError):
            Task(task_id="t1", timestamp=NOW, **fields)

    def test_negative_retry_count_rejected(self):
        with pytest.raises(ValidationError):
            Task(task_id="t1", timestamp=NOW, retry_count=-1)

    def test_too_many_input_images_rejected(self):
        with pytest.raises(ValidationError):
            Task(task_id="t1", timestamp=NOW, input_images=(PNG_REF,) * 5)

    def test_record_retry(self, make_task):
        task = make_task()
        retried = task.record_retry(2)
        assert retried.retry_count == 2
        assert retried.status == TaskStatus.PENDING
        assert task.retry_count == 0

    def test_complete_refreshes_timestamp(self, make_task):
        task = make_task()
        later = datetime(2026, 10, 18, 12, 5, tzinfo=UTC)
        done = task.complete(PNG_REF, later)
        assert done.status == TaskStatus.COMPLETED
        assert done.output_image_ref == PNG_REF
        assert done.error is None
        assert done.timestamp == later
        assert done.is_terminal is True

    def test_fail_keeps_timestamp(self, make_task):
        task = make_task(retry_count=4)
        failed = task.fail("quota exceeded")
        assert failed.status == TaskStatus.ERROR
        assert failed.error == "quota exceeded"
        assert failed.output_image_ref is None
        assert failed.timestamp == task.timestamp
        assert failed.retry_count == 4

    def test_json_round_trip(self, make_task):
        task = make_task(input_images=(PNG_REF,), batch_id="b1")
        restored = Task.model_validate_json(task.model_dump_json())
        assert restored == task


class TestSubmissionRequest:
    """SubmissionRequest 校验测试"""

    def test_prompt_only(self):
        req = SubmissionRequest(prompt="a cat")
        assert req.view == View.CREATE
        assert req.fan_out is False
        assert req.images == ()

    def test_image_only_allowed(self):
        req = SubmissionRequest(prompt="  ", images=(PNG_REF,))
        assert req.prompt == "  "

    def test_http_image_ref_allowed(self):
        req = SubmissionRequest(prompt="x", images=("https://example.com/a.png",))
        assert len(req.images) == 1

    def test_blank_prompt_without_images_rejected(self):
        with pytest.raises(ValidationError, match="A prompt or at least one image is required."):
            SubmissionRequest(prompt="   ")

    def test_more_than_four_images_rejected(self):
        with pytest.raises(ValidationError, match="You can upload a maximum of 4 images."):
            SubmissionRequest(prompt="x", images=(PNG_REF,) * 5)

    def test_invalid_image_ref_rejected(self):
        with pytest.raises(ValidationError, match="Invalid image reference at position 1."):
            SubmissionRequest(prompt="x", images=(PNG_REF, "not-an-image"))

    @pytest.mark.parametrize(
        "view,count",
        [
            (View.MODEL, 0),
            (View.TRY_ON, 1),
            (View.TRY_ON, 3),
            (View.POSTURE, 2),
            (View.BACKGROUND, 0),
            (View.FUSION, 1),
        ],
    )
    def test_view_image_count_rejected(self, view: View, count: int):
        """各模式的输入图片数量约束"""
        with pytest.raises(ValidationError, match=f"View '{view}' expects"):
            SubmissionRequest(prompt="x", images=(PNG_REF,) * count, view=view)

    @pytest.mark.parametrize(
        "view,count",
        [
            (View.CREATE, 0),
            (View.CREATE, 4),
            (View.MODEL, 1),
            (View.TRY_ON, 2),
            (View.POSTURE, 1),
            (View.BACKGROUND, 1),
            (View.FUSION, 2),
        ],
    )
    def test_view_image_count_accepted(self, view: View, count: int):
        req = SubmissionRequest(prompt="x", images=(PNG_REF,) * count, view=view)
        assert len(req.images) == count

    def test_is_image_ref(self):
        assert is_image_ref(PNG_REF) is True
        assert is_image_ref("http://example.com/x.jpg") is True
        assert is_image_ref("data:text/plain;base64,aGk=") is False
        assert is_image_ref("") is False


class TestAggregateStatus:
    """批次聚合状态测试"""

    def test_error_dominates(self, make_task):
        tasks = [
            make_task(status=TaskStatus.COMPLETED),
            make_task(status=TaskStatus.PENDING),
            make_task(status=TaskStatus.ERROR),
        ]
        assert aggregate_status(tasks) == TaskStatus.ERROR

    def test_all_completed(self, make_task):
        tasks = [make_task(status=TaskStatus.COMPLETED) for _ in range(4)]
        assert aggregate_status(tasks) == TaskStatus.COMPLETED

    def test_any_pending_without_error(self, make_task):
        tasks = [make_task(status=TaskStatus.COMPLETED), make_task()]
        assert aggregate_status(tasks) == TaskStatus.PENDING

    def test_empty_is_pending(self):
        assert aggregate_status([]) == TaskStatus.PENDING

    def test_batch_group_key(self, make_task):
        single = make_task(task_id="solo")
        assert BatchGroup(tasks=(single,)).key == "solo"
        member = make_task(task_id="b1-0", batch_id="b1")
        group = BatchGroup(batch_id="b1", tasks=(member,))
        assert group.key == "b1"
        assert group.model_dump()["status"] == TaskStatus.PENDING
