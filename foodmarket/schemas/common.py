from typing import Annotated, Optional
from pydantic import BaseModel, Field, StringConstraints

from ..models.base import CamelModel

# 必填字符串：去除首尾空白后不能为空，否则按缺少字段处理
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MessageResponse(BaseModel):
    """操作结果消息"""
    message: str = Field(description="结果说明")


class ErrorResponse(BaseModel):
    """错误响应格式"""
    error: str = Field(description="错误消息")

    class Config:
        json_schema_extra = {
            "example": {"error": "Buyer does not have access to the cart"}
        }


class LogEntry(CamelModel):
    """操作日志条目"""
    log_id: int
    user_id: Optional[str] = None
    actor_id: Optional[str] = None
    action: str
    detail_json: Optional[str] = None
    created_at: str
