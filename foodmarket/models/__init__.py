from .base import BaseEntity, CamelModel, PaginatedResponse, PaginationParams
from .cart import Cart, CartLine, MenuItemSummary, VendorSummary
from .menu import MenuItem
from .order import Order, OrderStatus
from .user import Buyer, User, Vendor

__all__ = [
    "BaseEntity", "CamelModel", "PaginatedResponse", "PaginationParams",
    "Cart", "CartLine", "MenuItemSummary", "VendorSummary",
    "MenuItem", "Order", "OrderStatus", "Buyer", "User", "Vendor",
]
