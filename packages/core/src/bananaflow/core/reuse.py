"""复用桥 -- 从历史任务提取输入，用于预填表单（insert）或原样重跑（rerun）

全部为纯函数：不读写 TaskStore，不创建任务。
"""

from collections.abc import Iterable

from .exceptions import TaskNotReusableError
from .models.enums import View
from .models.submission import VIEW_IMAGE_LIMITS, SubmissionRequest, SubmissionSeed
from .models.task import Task


def insert(task: Task) -> SubmissionSeed:
    """生成预填种子 {view, prompt, input_images}"""
    return SubmissionSeed(
        view=task.view,
        prompt=task.prompt,
        input_images=task.input_images,
    )


def batch_size(task: Task, tasks: Iterable[Task]) -> int:
    """task 所在批次在 tasks 中的成员数，无批次时为 1"""
    if task.batch_id is None:
        return 1
    return sum(1 for t in tasks if t.batch_id == task.batch_id)


def rerun_request(task: Task, tasks: Iterable[Task]) -> SubmissionRequest:
    """构造与原任务输入一致的新提交

    原任务所在批次成员数 > 1 时以扇出方式重跑。

    Args:
        task: 原任务
        tasks: 当前 TaskStore 快照，用于判断批次规模
    """
    return SubmissionRequest(
        prompt=task.prompt,
        images=task.input_images,
        view=task.view,
        fan_out=batch_size(task, tasks) > 1,
    )


def edit_seed(task: Task, instruction: str = "") -> SubmissionSeed:
    """以任务的输出图片作为唯一输入，生成编辑种子

    原模式可接受单张输入时沿用原模式，否则（try-on / fusion 需要两张）
    降级为 create 模式。

    Raises:
        TaskNotReusableError: 任务尚无输出图片
    """
    if task.output_image_ref is None:
        raise TaskNotReusableError(task.task_id, "task has no output image")
    low, _ = VIEW_IMAGE_LIMITS[task.view]
    return SubmissionSeed(
        view=task.view if low <= 1 else View.CREATE,
        prompt=instruction,
        input_images=(task.output_image_ref,),
    )
