"""
购物车路由模块
所有接口要求买家档案，购物车只能由其所属买家访问
"""

from typing import List, Union

from fastapi import APIRouter, Depends, status

from ...core.database import DatabaseManager, get_db
from ...core.security import require_buyer
from ...models.cart import Cart
from ...schemas.cart import CreateCartRequest, ReplaceCartItemsRequest, UpsertCartItemRequest
from ...schemas.common import MessageResponse
from ...services.cart_service import CartService

router = APIRouter()


def get_cart_service(db: DatabaseManager = Depends(get_db)) -> CartService:
    return CartService(db)


@router.get("", response_model=List[Cart])
def list_carts(buyer_id: str = Depends(require_buyer),
               service: CartService = Depends(get_cart_service)):
    """获取当前买家的全部购物车"""
    return service.list_carts(buyer_id)


@router.delete("", response_model=MessageResponse)
def empty_carts(buyer_id: str = Depends(require_buyer),
                service: CartService = Depends(get_cart_service)):
    service.empty_carts(buyer_id)
    return MessageResponse(message="Carts emptied successfully")


@router.get("/cart/{cart_id}", response_model=Cart)
def get_cart(cart_id: str,
             buyer_id: str = Depends(require_buyer),
             service: CartService = Depends(get_cart_service)):
    return service.get_cart(buyer_id, cart_id)


@router.post("/cart", response_model=Cart, status_code=status.HTTP_201_CREATED)
def create_cart(req: CreateCartRequest,
                buyer_id: str = Depends(require_buyer),
                service: CartService = Depends(get_cart_service)):
    """
    创建某个商家的购物车

    每个买家对同一商家只能有一个购物车；菜品必须在商家菜单中且不能重复
    """
    entries = [(entry.item_id, entry.quantity) for entry in req.items]
    return service.create_cart(buyer_id, req.vendor_id, entries)


@router.put("/cart/{cart_id}", response_model=Cart)
def replace_cart_items(cart_id: str, req: ReplaceCartItemsRequest,
                       buyer_id: str = Depends(require_buyer),
                       service: CartService = Depends(get_cart_service)):
    """整体替换购物车内容"""
    entries = [(entry.item_id, entry.quantity) for entry in req.items]
    return service.replace_items(buyer_id, cart_id, entries)


@router.patch("/cart/{cart_id}/item", response_model=Union[Cart, MessageResponse])
def upsert_cart_item(cart_id: str, req: UpsertCartItemRequest,
                     buyer_id: str = Depends(require_buyer),
                     service: CartService = Depends(get_cart_service)):
    """
    新增、修改或移除单个菜品

    Returns:
        更新后的购物车；最后一个菜品被移除时购物车随之删除，返回提示消息
    """
    cart = service.upsert_item(buyer_id, cart_id, req.item_id, req.quantity)
    if cart is None:
        return MessageResponse(message="Cart is empty and has been deleted")
    return cart


@router.patch("/cart/{cart_id}/savedForLater", response_model=Cart)
def toggle_saved_for_later(cart_id: str,
                           buyer_id: str = Depends(require_buyer),
                           service: CartService = Depends(get_cart_service)):
    return service.toggle_saved_for_later(buyer_id, cart_id)


@router.delete("/cart/{cart_id}", response_model=MessageResponse)
def empty_cart(cart_id: str,
               buyer_id: str = Depends(require_buyer),
               service: CartService = Depends(get_cart_service)):
    service.empty_cart(buyer_id, cart_id)
    return MessageResponse(message="Cart emptied successfully")
