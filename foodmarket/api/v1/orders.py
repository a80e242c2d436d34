"""
订单路由模块
买家：下单、查询、取消；商家：接单/拒单、查询、推进状态
"""

from typing import List

from fastapi import APIRouter, Depends, status

from ...core.database import DatabaseManager, get_db
from ...core.security import require_buyer, require_vendor
from ...models.order import Order
from ...schemas.common import MessageResponse
from ...schemas.order import OrderStatusRequest, PlaceOrderRequest, ProcessOrderRequest
from ...services.order_service import OrderService

router = APIRouter()


def get_order_service(db: DatabaseManager = Depends(get_db)) -> OrderService:
    return OrderService(db)


# ---- 买家 ----

@router.get("/buyer", response_model=List[Order])
def list_buyer_orders(buyer_id: str = Depends(require_buyer),
                      service: OrderService = Depends(get_order_service)):
    """获取当前买家的全部订单"""
    return service.list_buyer_orders(buyer_id)


@router.get("/buyer/{order_id}", response_model=Order)
def get_buyer_order(order_id: str,
                    buyer_id: str = Depends(require_buyer),
                    service: OrderService = Depends(get_order_service)):
    return service.get_buyer_order(buyer_id, order_id)


@router.post("/buyer", response_model=Order, status_code=status.HTTP_201_CREATED)
def place_order(req: PlaceOrderRequest,
                buyer_id: str = Depends(require_buyer),
                service: OrderService = Depends(get_order_service)):
    """
    由购物车下单

    购物车从买家的有效购物车列表中移除，作为订单的来源记录保留
    """
    return service.place_order(buyer_id, req.cart_id)


@router.patch("/buyer/{order_id}/cancel", response_model=MessageResponse)
def cancel_order(order_id: str,
                 buyer_id: str = Depends(require_buyer),
                 service: OrderService = Depends(get_order_service)):
    """取消待处理订单"""
    service.cancel_order(buyer_id, order_id)
    return MessageResponse(message="Order cancelled successfully")


# ---- 商家 ----

@router.get("/vendor", response_model=List[Order])
def list_vendor_orders(vendor_id: str = Depends(require_vendor),
                       service: OrderService = Depends(get_order_service)):
    """获取当前商家已接受的订单"""
    return service.list_vendor_orders(vendor_id)


@router.get("/vendor/{order_id}", response_model=Order)
def get_vendor_order(order_id: str,
                     vendor_id: str = Depends(require_vendor),
                     service: OrderService = Depends(get_order_service)):
    return service.get_vendor_order(vendor_id, order_id)


@router.patch("/vendor/{order_id}/process", response_model=Order)
def process_order(order_id: str, req: ProcessOrderRequest,
                  vendor_id: str = Depends(require_vendor),
                  service: OrderService = Depends(get_order_service)):
    """接单（状态变为制作中）或拒单（状态变为已取消）"""
    return service.process_order(vendor_id, order_id, req.is_accept)


@router.patch("/vendor/{order_id}/status", response_model=Order)
def update_order_status(order_id: str, req: OrderStatusRequest,
                        vendor_id: str = Depends(require_vendor),
                        service: OrderService = Depends(get_order_service)):
    """推进订单状态，新状态必须大于当前状态"""
    return service.update_order_status(vendor_id, order_id, req.status)
