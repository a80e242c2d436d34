"""
商家档案路由模块
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status

from ...core.database import DatabaseManager, get_db
from ...core.security import require_auth, require_vendor
from ...models.user import Vendor
from ...schemas.user import CuisineRequest, VendorRequest
from ...services.vendor_service import VendorService

router = APIRouter()


def get_vendor_service(db: DatabaseManager = Depends(get_db)) -> VendorService:
    return VendorService(db)


@router.get("/all", response_model=List[Vendor])
def list_vendors(service: VendorService = Depends(get_vendor_service)):
    """获取全部商家（无需登录）"""
    return service.list_vendors()


@router.get("", response_model=Vendor)
def get_vendor(vendor_id: str = Depends(require_vendor),
               service: VendorService = Depends(get_vendor_service)):
    return service.get_vendor(vendor_id)


@router.post("", response_model=Vendor, status_code=status.HTTP_201_CREATED)
def create_vendor(req: VendorRequest, request: Request,
                  user_id: str = Depends(require_auth),
                  service: VendorService = Depends(get_vendor_service)):
    """为当前用户创建商家档案，并写入会话"""
    vendor = service.create_vendor(
        user_id, req.vendor_name, req.address, req.price_range,
        req.phone_number, req.description
    )
    request.session["vendor_id"] = vendor.id
    return vendor


@router.patch("", response_model=Vendor)
def update_vendor(req: VendorRequest,
                  vendor_id: str = Depends(require_vendor),
                  service: VendorService = Depends(get_vendor_service)):
    return service.update_vendor(
        vendor_id, req.vendor_name, req.address, req.price_range,
        req.phone_number, req.description
    )


@router.patch("/cuisine", response_model=List[str])
def toggle_cuisine(req: CuisineRequest,
                   vendor_id: str = Depends(require_vendor),
                   service: VendorService = Depends(get_vendor_service)):
    """添加/移除菜系，返回切换后的菜系列表"""
    return service.toggle_cuisine(vendor_id, req.cuisine)
