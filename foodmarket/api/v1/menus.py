"""
菜单路由模块
查询接口公开；修改接口限定当前商家自己的菜单
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status

from ...core.database import DatabaseManager, get_db
from ...core.security import require_vendor
from ...models.menu import MenuItem
from ...schemas.common import MessageResponse
from ...schemas.menu import MenuItemRequest
from ...services.menu_service import MenuService

router = APIRouter()


def get_menu_service(request: Request,
                     db: DatabaseManager = Depends(get_db)) -> MenuService:
    return MenuService(db, request.app.state.settings.menu_item_retention_days)


@router.get("/item/{menu_item_id}", response_model=MenuItem)
def get_menu_item(menu_item_id: str, service: MenuService = Depends(get_menu_service)):
    return service.get_menu_item(menu_item_id)


@router.post("/item", response_model=MenuItem, status_code=status.HTTP_201_CREATED)
def create_menu_item(req: MenuItemRequest,
                     vendor_id: str = Depends(require_vendor),
                     service: MenuService = Depends(get_menu_service)):
    """新建菜品并追加到当前商家菜单"""
    return service.create_menu_item(
        vendor_id, req.name, req.price, req.category, req.availability, req.description
    )


@router.put("/item/{menu_item_id}", response_model=MenuItem)
def update_menu_item(menu_item_id: str, req: MenuItemRequest,
                     vendor_id: str = Depends(require_vendor),
                     service: MenuService = Depends(get_menu_service)):
    """整体替换菜品内容"""
    return service.update_menu_item(
        vendor_id, menu_item_id, req.name, req.price, req.category,
        req.availability, req.description
    )


@router.patch("/item/{menu_item_id}/availability", response_model=MenuItem)
def toggle_availability(menu_item_id: str,
                        vendor_id: str = Depends(require_vendor),
                        service: MenuService = Depends(get_menu_service)):
    return service.toggle_availability(vendor_id, menu_item_id)


@router.delete("/item/{menu_item_id}", response_model=MessageResponse)
def delete_menu_item(menu_item_id: str,
                     vendor_id: str = Depends(require_vendor),
                     service: MenuService = Depends(get_menu_service)):
    """软删除：立即从菜单移除，记录到期后由后台任务清理"""
    service.delete_menu_item(vendor_id, menu_item_id)
    return MessageResponse(message="Menu item deleted successfully")


@router.get("/{vendor_id}", response_model=List[MenuItem])
def get_menu(vendor_id: str, service: MenuService = Depends(get_menu_service)):
    """获取商家菜单（无需登录）"""
    return service.get_menu(vendor_id)
