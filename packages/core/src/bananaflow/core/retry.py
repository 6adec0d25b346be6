"""重试策略 -- 有界重试 + 指数退避 + 随机抖动

第 n 次尝试失败后（n < max_attempts），等待
    base_delay_ms * 2**n + U[0, jitter_ms)
毫秒再发起第 n+1 次尝试。
"""

import random

from pydantic import BaseModel, Field


class RetryPolicy(BaseModel):
    """重试策略配置"""

    max_attempts: int = Field(default=5, ge=1, description="总尝试次数上限（含首次）")
    base_delay_ms: int = Field(default=1000, ge=0, description="退避基数（毫秒）")
    jitter_ms: int = Field(default=1000, ge=0, description="随机抖动上界（毫秒，开区间）")

    def should_retry(self, attempt: int) -> bool:
        """第 attempt 次尝试失败后是否还可重试"""
        return attempt < self.max_attempts


def delay_bounds_ms(attempt: int, policy: RetryPolicy) -> tuple[float, float]:
    """第 attempt 次失败后的退避区间 [low, high)"""
    low = float(policy.base_delay_ms * 2**attempt)
    return low, low + policy.jitter_ms


def backoff_delay_ms(
    attempt: int,
    policy: RetryPolicy,
    rng: random.Random | None = None,
) -> float:
    """计算第 attempt 次失败后的退避时长（毫秒）

    Args:
        attempt: 已失败的尝试序号，从 1 开始
        policy: 重试策略
        rng: 随机源，测试时可注入固定种子

    Returns:
        落在 [base * 2**attempt, base * 2**attempt + jitter) 内的毫秒数
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    low, _ = delay_bounds_ms(attempt, policy)
    source = rng or random
    return low + source.random() * policy.jitter_ms
