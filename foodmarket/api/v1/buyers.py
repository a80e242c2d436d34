"""
买家档案路由模块
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status

from ...core.database import DatabaseManager, get_db
from ...core.security import require_auth, require_buyer
from ...models.user import Buyer, Vendor
from ...schemas.user import BuyerRequest, SavedVendorRequest
from ...services.buyer_service import BuyerService

router = APIRouter()


def get_buyer_service(db: DatabaseManager = Depends(get_db)) -> BuyerService:
    return BuyerService(db)


@router.get("", response_model=Buyer)
def get_buyer(buyer_id: str = Depends(require_buyer),
              service: BuyerService = Depends(get_buyer_service)):
    """获取当前买家档案"""
    return service.get_buyer(buyer_id)


@router.post("", response_model=Buyer, status_code=status.HTTP_201_CREATED)
def create_buyer(req: BuyerRequest, request: Request,
                 user_id: str = Depends(require_auth),
                 service: BuyerService = Depends(get_buyer_service)):
    """为当前用户创建买家档案，并写入会话"""
    buyer = service.create_buyer(user_id, req.buyer_name, req.address, req.phone_number)
    request.session["buyer_id"] = buyer.id
    return buyer


@router.patch("", response_model=Buyer)
def update_buyer(req: BuyerRequest,
                 buyer_id: str = Depends(require_buyer),
                 service: BuyerService = Depends(get_buyer_service)):
    return service.update_buyer(buyer_id, req.buyer_name, req.address, req.phone_number)


@router.get("/savedVendors", response_model=List[Vendor])
def get_saved_vendors(buyer_id: str = Depends(require_buyer),
                      service: BuyerService = Depends(get_buyer_service)):
    return service.get_saved_vendors(buyer_id)


@router.patch("/savedVendor", response_model=List[Vendor])
def toggle_saved_vendor(req: SavedVendorRequest,
                        buyer_id: str = Depends(require_buyer),
                        service: BuyerService = Depends(get_buyer_service)):
    """收藏/取消收藏商家，返回切换后的收藏列表"""
    return service.toggle_saved_vendor(buyer_id, req.vendor_id)
