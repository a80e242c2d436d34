"""
购物车服务
提供买家购物车的查询、创建、修改和清空

业务规则：
- 每个买家对同一商家最多只有一个有效购物车
- 购物车中的菜品必须属于该商家当前菜单，且不能重复
- 数量必须为正整数；数量变为0的菜品直接移除，不保留0数量记录
- 购物车被清空（最后一个菜品移除）时整个购物车删除
- 归属检查：购物车必须在买家的购物车列表中，不存在与不属于统一返回401
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import (
    AlreadyExistsError,
    CustomError,
    InvalidFieldError,
    MissingFieldError,
    NotFoundError,
    UnauthorizedError,
)
from ..core.validators import assert_valid_id, has_duplicates
from ..models.cart import Cart
from .queries import load_carts

logger = structlog.get_logger(__name__)

# (菜品ID, 数量)
CartEntry = Tuple[str, int]


def _is_quantity(value, allow_zero: bool = False) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value >= 0 if allow_zero else value > 0


class CartService:
    """购物车服务类，封装所有购物车相关的业务逻辑"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def list_carts(self, buyer_id: str) -> List[Cart]:
        """获取买家的全部购物车，商家和菜品已展开"""
        return load_carts(self.db, self.db.list_links("buyer_carts", buyer_id))

    def get_cart(self, buyer_id: str, cart_id: str) -> Cart:
        """
        获取买家自己的购物车

        Raises:
            InvalidFieldError: 购物车ID格式非法
            UnauthorizedError: 购物车不存在或不属于该买家
        """
        self._find_owned_cart(buyer_id, cart_id)
        return load_carts(self.db, [cart_id])[0]

    def create_cart(self, buyer_id: str, vendor_id: str, items: Sequence[CartEntry]) -> Cart:
        """
        为买家创建某个商家的购物车

        Args:
            buyer_id: 当前买家ID
            vendor_id: 商家ID
            items: (菜品ID, 数量) 列表

        Returns:
            Cart: 展开后的新购物车

        Raises:
            InvalidFieldError: 商家ID、菜品ID格式非法，或数量不是正整数
            NotFoundError: 商家不存在
            AlreadyExistsError: 买家已有该商家的购物车
            MissingFieldError: 菜品列表为空
            CustomError: 菜品重复 (403)
            UnauthorizedError: 菜品不在该商家菜单中
        """
        assert_valid_id(vendor_id, "vendor")
        cart_id = self.db.new_id()
        with self.db.transaction() as conn:
            if not conn.execute("SELECT 1 FROM vendors WHERE id=?", [vendor_id]).fetchone():
                raise NotFoundError("Vendor")
            if self._has_cart_for_vendor(buyer_id, vendor_id):
                raise AlreadyExistsError("Cart for this vendor")

            entries = self._validate_entries(vendor_id, items)
            conn.execute(
                "INSERT INTO carts(id, vendor_id, saved_for_later) VALUES (?, ?, FALSE)",
                [cart_id, vendor_id]
            )
            self._insert_entries(conn, cart_id, entries)
            self.db.add_link("buyer_carts", buyer_id, cart_id)

        logger.info("cart_created", buyer_id=buyer_id, cart_id=cart_id, vendor_id=vendor_id,
                    item_count=len(entries))
        return load_carts(self.db, [cart_id])[0]

    def replace_items(self, buyer_id: str, cart_id: str, items: Sequence[CartEntry]) -> Cart:
        """整体替换购物车内容，校验规则与创建时相同"""
        with self.db.transaction() as conn:
            self._find_owned_cart(buyer_id, cart_id)
            vendor_id = self._cart_vendor(cart_id)
            entries = self._validate_entries(vendor_id, items)
            conn.execute("DELETE FROM cart_items WHERE cart_id=?", [cart_id])
            self._insert_entries(conn, cart_id, entries)

        return load_carts(self.db, [cart_id])[0]

    def upsert_item(self, buyer_id: str, cart_id: str, item_id: str,
                    quantity: int) -> Optional[Cart]:
        """
        新增、修改或移除购物车中的单个菜品

        - 不存在且数量>0：加入
        - 已存在且数量>0：更新数量
        - 已存在且数量为0：移除；若购物车因此为空则删除整个购物车
        - 不存在且数量为0：不做任何修改

        Returns:
            更新后的购物车；购物车被删除时返回 None

        Raises:
            InvalidFieldError: 数量为负数或非整数，菜品ID格式非法
            UnauthorizedError: 购物车不属于买家，或菜品不在商家菜单中
        """
        with self.db.transaction() as conn:
            self._find_owned_cart(buyer_id, cart_id)
            assert_valid_id(item_id, "menu item")
            if not _is_quantity(quantity, allow_zero=True):
                raise InvalidFieldError("quantity")

            existing = conn.execute(
                "SELECT quantity FROM cart_items WHERE cart_id=? AND menu_item_id=?",
                [cart_id, item_id]
            ).fetchone()

            if quantity == 0:
                if existing is not None:
                    conn.execute(
                        "DELETE FROM cart_items WHERE cart_id=? AND menu_item_id=?",
                        [cart_id, item_id]
                    )
                    remaining = conn.execute(
                        "SELECT COUNT(*) FROM cart_items WHERE cart_id=?", [cart_id]
                    ).fetchone()[0]
                    if remaining == 0:
                        self._delete_carts(conn, buyer_id, [cart_id])
                        logger.info("cart_emptied", buyer_id=buyer_id, cart_id=cart_id)
                        return None
            else:
                self._assert_on_menu(self._cart_vendor(cart_id), [item_id])
                if existing is not None:
                    conn.execute(
                        "UPDATE cart_items SET quantity=? WHERE cart_id=? AND menu_item_id=?",
                        [quantity, cart_id, item_id]
                    )
                else:
                    conn.execute(
                        "INSERT INTO cart_items(cart_id, menu_item_id, quantity) VALUES (?, ?, ?)",
                        [cart_id, item_id, quantity]
                    )

        return load_carts(self.db, [cart_id])[0]

    def toggle_saved_for_later(self, buyer_id: str, cart_id: str) -> Cart:
        """切换"稍后购买"标记"""
        with self.db.transaction() as conn:
            self._find_owned_cart(buyer_id, cart_id)
            conn.execute(
                "UPDATE carts SET saved_for_later = NOT saved_for_later WHERE id=?",
                [cart_id]
            )
        return load_carts(self.db, [cart_id])[0]

    def empty_cart(self, buyer_id: str, cart_id: str):
        """删除一个购物车并从买家列表中移除"""
        with self.db.transaction() as conn:
            self._find_owned_cart(buyer_id, cart_id)
            self._delete_carts(conn, buyer_id, [cart_id])
        logger.info("cart_deleted", buyer_id=buyer_id, cart_id=cart_id)

    def empty_carts(self, buyer_id: str) -> int:
        """删除买家的全部购物车，返回删除数量"""
        with self.db.transaction() as conn:
            cart_ids = self.db.list_links("buyer_carts", buyer_id)
            self._delete_carts(conn, buyer_id, cart_ids)
        logger.info("carts_deleted", buyer_id=buyer_id, count=len(cart_ids))
        return len(cart_ids)

    # ---- 内部方法 ----

    def _find_owned_cart(self, buyer_id: str, cart_id: str) -> str:
        assert_valid_id(cart_id, "cart")
        if self.db.find_owned("buyer_carts", buyer_id, cart_id) is None:
            raise UnauthorizedError("Buyer", "cart")
        return cart_id

    def _cart_vendor(self, cart_id: str) -> str:
        return self.db.execute_one("SELECT vendor_id FROM carts WHERE id=?", [cart_id])[0]

    def _has_cart_for_vendor(self, buyer_id: str, vendor_id: str) -> bool:
        row = self.db.execute_one(
            """
            SELECT 1 FROM buyer_carts bc JOIN carts c ON c.id = bc.cart_id
            WHERE bc.buyer_id=? AND c.vendor_id=?
            LIMIT 1
            """,
            [buyer_id, vendor_id]
        )
        return row is not None

    def _validate_entries(self, vendor_id: str, items: Sequence[CartEntry]) -> List[CartEntry]:
        """校验菜品列表：非空、不重复、ID合法、属于商家菜单、数量为正整数"""
        entries = [(item_id, quantity) for item_id, quantity in items or []]
        if not entries:
            raise MissingFieldError()
        item_ids = [item_id for item_id, _ in entries]
        if has_duplicates(item_ids):
            raise CustomError("Duplicate items are not allowed", 403)
        for item_id in item_ids:
            assert_valid_id(item_id, "menu item")
        self._assert_on_menu(vendor_id, item_ids)
        for _, quantity in entries:
            if not _is_quantity(quantity):
                raise InvalidFieldError("quantity")
        return entries

    def _assert_on_menu(self, vendor_id: str, item_ids: Iterable[str]):
        menu = set(self.db.list_links("vendor_menu", vendor_id))
        for item_id in item_ids:
            if item_id not in menu:
                raise UnauthorizedError("Vendor", "menu item")

    @staticmethod
    def _insert_entries(conn, cart_id: str, entries: Sequence[CartEntry]):
        for item_id, quantity in entries:
            conn.execute(
                "INSERT INTO cart_items(cart_id, menu_item_id, quantity) VALUES (?, ?, ?)",
                [cart_id, item_id, quantity]
            )

    def _delete_carts(self, conn, buyer_id: str, cart_ids: Sequence[str]):
        for cart_id in cart_ids:
            self.db.remove_link("buyer_carts", buyer_id, cart_id)
            conn.execute("DELETE FROM cart_items WHERE cart_id=?", [cart_id])
            conn.execute("DELETE FROM carts WHERE id=?", [cart_id])
