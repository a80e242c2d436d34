"""
菜品数据模型
"""

from pydantic import Field
from typing import Optional
from .base import BaseEntity


class MenuItem(BaseEntity):
    """菜品（软删除使用的 expire_at 不对外输出）"""
    name: str = Field(..., description="名称")
    price: float = Field(..., gt=0, description="价格")
    available: bool = Field(..., description="是否可售")
    category: str = Field(..., description="分类")
    description: Optional[str] = Field(None, description="描述")
