"""
购物车数据模型
购物车中的商家与菜品引用在查询时展开
"""

from pydantic import Field
from typing import List
from .base import BaseEntity, CamelModel


class VendorSummary(BaseEntity):
    """展开后的商家引用"""
    vendor_name: str


class MenuItemSummary(BaseEntity):
    """展开后的菜品引用"""
    name: str
    price: float


class CartLine(CamelModel):
    """购物车中的一项"""
    item: MenuItemSummary
    quantity: int = Field(..., gt=0, description="数量，始终为正整数")


class Cart(BaseEntity):
    """购物车：一个买家对一个商家最多一个"""
    vendor: VendorSummary
    items: List[CartLine] = Field(default_factory=list)
    saved_for_later: bool = False
