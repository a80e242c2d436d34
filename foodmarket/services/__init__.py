"""
Business logic services.
Contains service layer implementations for core business operations.
"""

from .buyer_service import BuyerService
from .cart_service import CartService
from .menu_service import MenuService
from .order_service import OrderService
from .user_service import UserService
from .vendor_service import VendorService

__all__ = [
    "BuyerService",
    "CartService",
    "MenuService",
    "OrderService",
    "UserService",
    "VendorService",
]
