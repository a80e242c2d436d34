"""
统一错误处理模块
所有错误都渲染为 {"error": message}，调试模式下附带请求方法和路径

主要功能：
- 应用异常按自身状态码输出
- 请求体验证错误映射为缺失字段(400)或非法字段(422)
- 未知异常统一返回500和通用消息，并记录日志
"""

import traceback
from typing import Any, Dict, Optional

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import BaseApplicationError, InvalidFieldError, MissingFieldError

logger = structlog.get_logger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"

# 视为"缺少字段"的 pydantic 错误类型
MISSING_ERROR_TYPES = {"missing", "string_too_short", "json_invalid"}


class ErrorResponse:
    """标准错误响应格式"""

    def __init__(self, message: str, http_status: int = 400,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.http_status = http_status
        self.details = details or {}

    def to_dict(self, request: Request = None, debug: bool = False) -> Dict[str, Any]:
        content = {"error": self.message}
        if debug and request is not None:
            content["method"] = request.method
            content["path"] = request.url.path
            content.update(self.details)
        return content

    def to_json_response(self, request: Request = None, debug: bool = False) -> JSONResponse:
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict(request, debug)
        )


class ErrorHandler:
    """全局错误处理器"""

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError) -> ErrorResponse:
        return ErrorResponse(error.message, error.status_code, error.details)

    @classmethod
    def handle_http_exception(cls, error: StarletteHTTPException) -> ErrorResponse:
        """处理框架抛出的HTTP异常（路由不存在、方法不允许等）"""
        message = str(error.detail)
        if error.status_code == 404 and message == "Not Found":
            message = "Endpoint not found"
        return ErrorResponse(message, error.status_code)

    @classmethod
    def handle_validation_error(cls, error: RequestValidationError) -> ErrorResponse:
        """处理请求参数验证错误"""
        errors = error.errors()
        if any(e.get("type") in MISSING_ERROR_TYPES for e in errors):
            app_error = MissingFieldError()
        else:
            loc = errors[0].get("loc", ()) if errors else ()
            field = str(loc[-1]) if loc else "request"
            app_error = InvalidFieldError(field)
        return ErrorResponse(
            app_error.message,
            app_error.status_code,
            {"validation_errors": [{"loc": list(e.get("loc", ())), "type": e.get("type")} for e in errors]}
        )

    @classmethod
    def handle_unknown_error(cls, request: Request, error: Exception) -> ErrorResponse:
        """处理未知异常"""
        error_details = {
            "type": type(error).__name__,
            "message": str(error),
            "method": request.method,
            "path": request.url.path,
            "traceback": traceback.format_exception(type(error), error, error.__traceback__),
        }
        logger.error("unhandled_error", error_type=error_details["type"],
                     error=error_details["message"], path=error_details["path"])
        cls._log_system_error(request, error_details)

        return ErrorResponse(UNKNOWN_ERROR_MESSAGE, 500, {"error_type": type(error).__name__})

    @classmethod
    def _log_system_error(cls, request: Request, error_details: Dict[str, Any]):
        """记录系统错误到数据库"""
        db = getattr(request.app.state, "db", None)
        if db is None:
            return
        try:
            db.log_action("system_error", error_details)
        except BaseApplicationError as e:
            # 数据库日志写入失败时只能输出到日志
            logger.error("system_error_log_failed", error=e.message)


def _is_debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.debug)


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """应用异常处理"""
    if exc.status_code >= 500:
        logger.error("application_error", error=exc.message, path=request.url.path)
    else:
        logger.info("request_rejected", status=exc.status_code, error=exc.message,
                    path=request.url.path)
    return ErrorHandler.handle_application_error(exc).to_json_response(request, _is_debug(request))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTP异常处理"""
    return ErrorHandler.handle_http_exception(exc).to_json_response(request, _is_debug(request))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """验证异常处理"""
    return ErrorHandler.handle_validation_error(exc).to_json_response(request, _is_debug(request))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理"""
    return ErrorHandler.handle_unknown_error(request, exc).to_json_response(request, _is_debug(request))
