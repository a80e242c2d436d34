"""
引用展开查询
每种关系的展开需求是固定的：购物车展开商家和菜品，订单展开来源购物车
"""

from typing import Dict, List, Optional, Sequence

from ..core.database import DatabaseManager
from ..models.cart import Cart, CartLine, MenuItemSummary, VendorSummary
from ..models.menu import MenuItem
from ..models.order import Order
from ..models.user import Buyer, User, Vendor


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


def _in_order(ids: Sequence[str], by_id: Dict[str, object]) -> list:
    """按引用列表顺序返回，跳过已不存在的文档"""
    return [by_id[i] for i in ids if i in by_id]


def load_user(db: DatabaseManager, user_id: str) -> Optional[User]:
    row = db.fetch_dict(
        "SELECT id, email, google_id, github_id, buyer_id, vendor_id FROM users WHERE id=?",
        [user_id]
    )
    return User(**row) if row else None


def load_buyer(db: DatabaseManager, buyer_id: str) -> Optional[Buyer]:
    row = db.fetch_dict(
        "SELECT id, buyer_name, address, phone_number FROM buyers WHERE id=?",
        [buyer_id]
    )
    return Buyer(**row) if row else None


def load_vendors(db: DatabaseManager, vendor_ids: Sequence[str] = None) -> List[Vendor]:
    """
    加载商家档案及其菜系列表

    Args:
        vendor_ids: 需要加载的商家ID；为 None 时加载全部商家（按创建时间）
    """
    if vendor_ids is not None and not vendor_ids:
        return []

    query = "SELECT id, vendor_name, address, price_range, phone_number, description FROM vendors"
    params: list = []
    if vendor_ids is not None:
        query += f" WHERE id IN ({_placeholders(vendor_ids)})"
        params = list(vendor_ids)
    query += " ORDER BY created_at"
    rows = db.fetch_dicts(query, params)
    if not rows:
        return []

    ids = [row["id"] for row in rows]
    cuisines: Dict[str, List[str]] = {i: [] for i in ids}
    for vendor_id, cuisine in db.execute_query(
        f"SELECT vendor_id, cuisine FROM vendor_cuisines WHERE vendor_id IN ({_placeholders(ids)}) ORDER BY position",
        ids
    ):
        cuisines[vendor_id].append(cuisine)

    vendors = {row["id"]: Vendor(**row, cuisine_types=cuisines[row["id"]]) for row in rows}
    return list(vendors.values()) if vendor_ids is None else _in_order(vendor_ids, vendors)


def load_vendor(db: DatabaseManager, vendor_id: str) -> Optional[Vendor]:
    vendors = load_vendors(db, [vendor_id])
    return vendors[0] if vendors else None


def load_menu_items(db: DatabaseManager, item_ids: Sequence[str]) -> List[MenuItem]:
    if not item_ids:
        return []
    rows = db.fetch_dicts(
        f"SELECT id, name, price, available, category, description FROM menu_items WHERE id IN ({_placeholders(item_ids)})",
        list(item_ids)
    )
    return _in_order(item_ids, {row["id"]: MenuItem(**row) for row in rows})


def load_carts(db: DatabaseManager, cart_ids: Sequence[str]) -> List[Cart]:
    """加载购物车，并展开商家（名称）和菜品（名称、价格）"""
    if not cart_ids:
        return []
    params = list(cart_ids)
    cart_rows = db.fetch_dicts(
        f"""
        SELECT c.id, c.saved_for_later, v.id AS vendor_id, v.vendor_name
        FROM carts c JOIN vendors v ON v.id = c.vendor_id
        WHERE c.id IN ({_placeholders(params)})
        """,
        params
    )
    lines: Dict[str, List[CartLine]] = {row["id"]: [] for row in cart_rows}
    item_rows = db.fetch_dicts(
        f"""
        SELECT ci.cart_id, ci.quantity, m.id AS item_id, m.name, m.price
        FROM cart_items ci JOIN menu_items m ON m.id = ci.menu_item_id
        WHERE ci.cart_id IN ({_placeholders(params)})
        ORDER BY ci.position
        """,
        params
    )
    for row in item_rows:
        lines[row["cart_id"]].append(CartLine(
            item=MenuItemSummary(id=row["item_id"], name=row["name"], price=row["price"]),
            quantity=row["quantity"],
        ))

    carts = {
        row["id"]: Cart(
            id=row["id"],
            vendor=VendorSummary(id=row["vendor_id"], vendor_name=row["vendor_name"]),
            items=lines[row["id"]],
            saved_for_later=row["saved_for_later"],
        )
        for row in cart_rows
    }
    return _in_order(cart_ids, carts)


def load_orders(db: DatabaseManager, order_ids: Sequence[str]) -> List[Order]:
    """加载订单，并展开来源购物车"""
    if not order_ids:
        return []
    rows = db.fetch_dicts(
        f"SELECT id, buyer_id, cart_id, total_price, date, status FROM orders WHERE id IN ({_placeholders(order_ids)})",
        list(order_ids)
    )
    carts = {cart.id: cart for cart in load_carts(db, [row["cart_id"] for row in rows])}
    orders = {
        row["id"]: Order(
            id=row["id"],
            buyer_id=row["buyer_id"],
            cart=carts[row["cart_id"]],
            total_price=row["total_price"],
            date=row["date"],
            status=row["status"],
        )
        for row in rows
        if row["cart_id"] in carts
    }
    return _in_order(order_ids, orders)
