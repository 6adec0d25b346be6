"""图片 data URL 解析与构造"""

import base64
import re

from .exceptions import InvalidImageRefError

DATA_URL_PATTERN = re.compile(
    r"^data:(image/[a-zA-Z0-9.+-]+);base64,(.+)$",
    re.DOTALL,
)


def parse_data_url(ref: str) -> tuple[str, str]:
    """解析 data URL

    Returns:
        (mime_type, base64_payload) 元组

    Raises:
        InvalidImageRefError: 不是 image data URL
    """
    match = DATA_URL_PATTERN.match(ref)
    if not match:
        raise InvalidImageRefError(ref[:32])
    return match.group(1), match.group(2)


def to_data_url(mime_type: str, payload: bytes) -> str:
    """构造 base64 data URL"""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
