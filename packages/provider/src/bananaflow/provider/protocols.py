"""GenerationClient Protocol 接口定义

文生图（images 为空）与图(+文)生图（images 非空）统一为同一个 generate 操作，
由具体客户端决定调用哪个后端入口。
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationClient(Protocol):
    """图像生成客户端接口"""

    async def generate(self, prompt: str, images: Sequence[str] = ()) -> str:
        """生成图片

        Args:
            prompt: 下发给模型的提示词
            images: 输入图片引用，0 张为文生图

        Returns:
            生成图片的引用（data URL 或 URI）

        Raises:
            GenerationError: 生成失败
        """
        ...
