"""EchoGenerationClient -- Echo 模式图像生成

不调用任何远端模型，直接把提示词渲染进一张 SVG 占位图并以 data URL 返回。
可配置模拟延迟与瞬时失败率，用于本地联调重试与 Feed 展示。
"""

import asyncio
import random
import time
from collections.abc import Sequence
from html import escape

import structlog

from .exceptions import (
    GenerationError,
    GenerationNetworkError,
    normalize_generation_error,
)
from .images import parse_data_url, to_data_url

log = structlog.get_logger()

_SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="512" height="512">'
    '<rect width="100%" height="100%" fill="#fde68a"/>'
    '<text x="24" y="48" font-size="20">Echo ({image_count} input image(s))</text>'
    '<text x="24" y="88" font-size="16">{prompt}</text>'
    "</svg>"
)

# SVG 中保留的提示词最大长度
PROMPT_PREVIEW_LENGTH = 120


class EchoGenerationClient:
    """Echo 模式 GenerationClient 实现"""

    def __init__(
        self,
        latency_ms: int = 0,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        """
        Args:
            latency_ms: 每次调用的模拟延迟（毫秒）
            failure_rate: 模拟瞬时失败的概率，0~1
            rng: 随机源
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self._latency_ms = latency_ms
        self._failure_rate = failure_rate
        self._rng = rng or random.Random()

    async def generate(self, prompt: str, images: Sequence[str] = ()) -> str:
        """通过 Echo 模式生成占位图

        行为:
            1. 校验输入图片（data URL 需可解析）
            2. 模拟延迟，并按 failure_rate 抛出 GenerationNetworkError
            3. 返回包含提示词预览的 SVG data URL
        """
        start_time = time.monotonic()
        try:
            for ref in images:
                if ref.startswith("data:"):
                    parse_data_url(ref)

            if self._latency_ms:
                await asyncio.sleep(self._latency_ms / 1000)

            if self._failure_rate and self._rng.random() < self._failure_rate:
                raise GenerationNetworkError()

            svg = _SVG_TEMPLATE.format(
                image_count=len(images),
                prompt=escape(prompt[:PROMPT_PREVIEW_LENGTH]),
            )
            result = to_data_url("image/svg+xml", svg.encode("utf-8"))
        except GenerationError:
            raise
        except Exception as e:
            raise normalize_generation_error(e) from e

        log.debug(
            "echo_generation_completed",
            image_count=len(images),
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )
        return result
