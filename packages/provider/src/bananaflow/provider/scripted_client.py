"""ScriptedGenerationClient -- 按脚本依次返回结果或抛出异常

每次 generate 消费脚本中的下一项：字符串视为成功返回的图片引用，
异常实例则原样抛出。用于测试与演示重试路径。
"""

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .exceptions import GenerationError


@dataclass(frozen=True)
class GenerationCall:
    """一次 generate 调用记录"""

    prompt: str
    images: tuple[str, ...]


class ScriptedGenerationClient:
    """脚本驱动的 GenerationClient 实现"""

    def __init__(self, outcomes: Iterable[str | Exception] = ()) -> None:
        self._outcomes: deque[str | Exception] = deque(outcomes)
        self.calls: list[GenerationCall] = []

    def extend(self, outcomes: Iterable[str | Exception]) -> None:
        """追加脚本项"""
        self._outcomes.extend(outcomes)

    @property
    def remaining(self) -> int:
        return len(self._outcomes)

    async def generate(self, prompt: str, images: Sequence[str] = ()) -> str:
        self.calls.append(GenerationCall(prompt=prompt, images=tuple(images)))
        if not self._outcomes:
            raise GenerationError("No scripted outcome left.", recoverable=False)
        outcome = self._outcomes.popleft()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
