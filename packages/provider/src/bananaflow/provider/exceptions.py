"""Provider 异常体系

所有 GenerationClient 失败统一以 GenerationError 子类抛出，
消息文案面向最终用户（会被写入 Task.error）。
"""


class GenerationError(Exception):
    """Provider 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class InvalidApiKeyError(GenerationError):
    """API key 无效 -- 重试无法恢复"""

    def __init__(self) -> None:
        super().__init__(
            "API key is invalid. Please check it in Settings.",
            recoverable=False,
        )


class GenerationNetworkError(GenerationError):
    """网络层失败（连接中断、超时等）"""

    def __init__(self, original_error: Exception | None = None) -> None:
        super().__init__(
            "A network error occurred. Please check your connection and try again.",
            recoverable=True,
        )
        self.original_error = original_error


class NoImageGeneratedError(GenerationError):
    """调用成功但响应中没有图片"""

    def __init__(self, message: str = "No image was generated in the response.") -> None:
        super().__init__(message, recoverable=True)


class InvalidImageRefError(GenerationError):
    """输入图片引用格式非法"""

    def __init__(self, ref_preview: str = "") -> None:
        super().__init__("Invalid image data URL format.", recoverable=False)
        self.ref_preview = ref_preview


UNKNOWN_GENERATION_ERROR = "An unknown error occurred during image generation."


def normalize_generation_error(error: BaseException) -> GenerationError:
    """将后端原始异常归一化为面向用户的 GenerationError

    - 已是 GenerationError：原样返回
    - 消息含 "API key not valid"：InvalidApiKeyError
    - 消息含 "xhr error" 或为连接/超时类异常：GenerationNetworkError
    - 其他有消息的异常：保留原消息并加前缀
    - 无消息：通用兜底文案
    """
    if isinstance(error, GenerationError):
        return error

    message = str(error)
    if "API key not valid" in message:
        return InvalidApiKeyError()
    if "xhr error" in message or isinstance(error, (ConnectionError, TimeoutError)):
        return GenerationNetworkError(error if isinstance(error, Exception) else None)
    if message:
        return GenerationError(f"Generation API Error: {message}")
    return GenerationError(UNKNOWN_GENERATION_ERROR)
