"""
API routes and endpoints.
"""

from fastapi import APIRouter
from ..schemas.common import ErrorResponse
from .v1 import buyers, carts, logs, menus, orders, users, vendors

# 所有错误统一为 {"error": message}
ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 422, 500)
}

api_router = APIRouter(responses=ERROR_RESPONSES)

# 包含所有v1路由
api_router.include_router(users.router, prefix="/users", tags=["用户"])
api_router.include_router(buyers.router, prefix="/buyers", tags=["买家"])
api_router.include_router(vendors.router, prefix="/vendors", tags=["商家"])
api_router.include_router(menus.router, prefix="/menus", tags=["菜单"])
api_router.include_router(carts.router, prefix="/carts", tags=["购物车"])
api_router.include_router(orders.router, prefix="/orders", tags=["订单"])
api_router.include_router(logs.router, prefix="/logs", tags=["日志"])
