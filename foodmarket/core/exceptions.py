"""
自定义异常类
每个异常携带错误消息和对应的HTTP状态码，由统一错误处理器渲染为 {"error": message}
"""

from typing import Any, Dict, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.error_code = self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class CustomError(BaseApplicationError):
    """通用业务规则错误，状态码由调用方指定（通常为403）"""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message, status_code)


class MissingFieldError(BaseApplicationError):
    """400: 请求缺少必填字段"""
    status_code = 400

    def __init__(self, message: str = "A required field is missing"):
        super().__init__(message)


class UnauthorizedError(BaseApplicationError):
    """401: 未认证，或调用方与目标资源不存在所属关系"""
    status_code = 401

    def __init__(self, client: str = None, item: str = None, message: str = None):
        if message is None:
            message = f"{client} does not have access to the {item}"
        super().__init__(message)


class NotFoundError(BaseApplicationError):
    """404: 资源不存在"""
    status_code = 404

    def __init__(self, item: str):
        super().__init__(f"{item} not found")


class AlreadyExistsError(BaseApplicationError):
    """409: 违反唯一性约束"""
    status_code = 409

    def __init__(self, item: str):
        super().__init__(f"{item} already exists")


class InvalidFieldError(BaseApplicationError):
    """422: 字段格式或取值非法"""
    status_code = 422

    def __init__(self, item: str):
        super().__init__(f"Invalid {item}")


class DatabaseError(BaseApplicationError):
    """数据库相关异常"""
    status_code = 500
