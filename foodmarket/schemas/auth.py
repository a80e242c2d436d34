"""
认证相关的请求模式
"""

from pydantic import Field
from ..models.base import CamelModel
from .common import RequiredStr


class SignUpRequest(CamelModel):
    """注册请求"""
    email: RequiredStr = Field(description="登录邮箱", examples=["buyer@example.com"])
    password: RequiredStr = Field(description="密码")


class LogInRequest(CamelModel):
    """登录请求"""
    email: RequiredStr = Field(description="登录邮箱")
    password: RequiredStr = Field(description="密码")
