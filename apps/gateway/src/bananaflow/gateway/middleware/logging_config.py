"""structlog 配置

BANANAFLOW_LOG_FORMAT=json 输出单行 JSON（异常转为结构化 traceback），
否则使用开发用彩色控制台输出。structlog 与标准库 logging 共用同一处理链，
uvicorn 等第三方日志也按相同格式渲染。
"""

import logging
import os

import structlog

# 第三方库的噪声日志降到 WARNING
_QUIET_LOGGERS = ("uvicorn.access", "sse_starlette.sse", "httpx")


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _renderer(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog + 标准库 logging

    Args:
        log_format: "json" 或 "dev"，默认读取 BANANAFLOW_LOG_FORMAT
        log_level: 日志级别名，默认读取 BANANAFLOW_LOG_LEVEL（INFO）
    """
    log_format = log_format or os.environ.get("BANANAFLOW_LOG_FORMAT", "dev")
    level = _resolve_level(log_level or os.environ.get("BANANAFLOW_LOG_LEVEL", "INFO"))

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderer(log_format),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
