"""
订单相关的请求模式
"""

from pydantic import Field
from ..models.base import CamelModel
from .common import RequiredStr


class PlaceOrderRequest(CamelModel):
    """下单请求"""
    cart_id: RequiredStr = Field(description="购物车ID")


class ProcessOrderRequest(CamelModel):
    """商家接单/拒单"""
    is_accept: bool = Field(..., description="true 接单，false 拒单")


class OrderStatusRequest(CamelModel):
    """商家推进订单状态"""
    status: int = Field(..., description="新的状态码，必须大于当前状态")
