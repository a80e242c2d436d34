"""
购物车相关的请求模式
数量的取值规则在 CartService 中校验
"""

from pydantic import Field
from typing import List
from ..models.base import CamelModel
from .common import RequiredStr


class CartItemEntry(CamelModel):
    """购物车中的一项"""
    item_id: RequiredStr = Field(description="菜品ID")
    quantity: int = Field(..., description="数量")


class CreateCartRequest(CamelModel):
    """创建购物车"""
    vendor_id: RequiredStr = Field(description="商家ID")
    items: List[CartItemEntry] = Field(..., description="菜品及数量")


class ReplaceCartItemsRequest(CamelModel):
    """整体替换购物车内容"""
    items: List[CartItemEntry] = Field(..., description="菜品及数量")


class UpsertCartItemRequest(CamelModel):
    """新增/修改/移除单个菜品，数量为0表示移除"""
    item_id: RequiredStr = Field(description="菜品ID")
    quantity: int = Field(..., description="数量")
