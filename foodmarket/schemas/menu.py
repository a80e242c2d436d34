"""
菜品相关的请求模式
"""

from pydantic import Field
from typing import Optional
from ..models.base import CamelModel
from .common import RequiredStr


class MenuItemRequest(CamelModel):
    """创建/整体替换菜品"""
    name: RequiredStr = Field(description="名称")
    price: float = Field(..., gt=0, description="价格，必须为正数")
    category: RequiredStr = Field(description="分类")
    description: Optional[str] = Field(None, description="描述")
    availability: bool = Field(..., description="是否可售")
