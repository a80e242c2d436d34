"""
订单相关数据模型
"""

from pydantic import Field
from datetime import datetime
from enum import IntEnum
from .base import BaseEntity
from .cart import Cart


class OrderStatus(IntEnum):
    """订单状态；除接单/拒单外，状态只能单调递增"""
    PENDING = 0       # 待处理
    IN_PROGRESS = 1   # 已接单，制作中
    READY = 2         # 待取餐
    COMPLETED = 3     # 已完成
    CANCELLED = 4     # 已拒单/已取消

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


class Order(BaseEntity):
    """订单（总价在下单时确定，之后不再变化）"""
    buyer_id: str = Field(..., description="买家ID")
    cart: Cart = Field(..., description="来源购物车（已展开）")
    total_price: float = Field(..., description="总价")
    date: datetime = Field(..., description="下单时间")
    status: OrderStatus = Field(..., description="状态码")
