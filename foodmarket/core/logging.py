"""
日志配置
structlog 输出结构化日志：调试模式下为控制台格式，其它情况为JSON
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(debug: bool = False, log_level: str = "INFO") -> None:
    """配置标准库日志与 structlog"""
    level = "DEBUG" if debug else log_level.upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(**kwargs: Any) -> None:
    """绑定本次请求的上下文（请求ID、用户等）"""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
