"""
订单服务模块
提供订单相关的核心业务逻辑，包括下单、取消、商家处理和状态推进

主要功能：
- 由购物车下单（计算总价，购物车转为订单的来源记录）
- 买家取消待处理订单
- 商家接单/拒单
- 商家推进订单状态

业务规则：
- 订单状态：0 待处理、1 制作中、2 待取餐、3 已完成、4 已取消/已拒绝
- 接单和拒单只能在待处理状态下进行一次
- 之后的状态推进必须严格递增
- 只有待处理订单可由买家取消，取消即删除订单及其购物车
- 原子性事务保证数据一致性
"""

from datetime import datetime
from typing import List, Tuple

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import CustomError, InvalidFieldError, NotFoundError, UnauthorizedError
from ..core.validators import assert_valid_id
from ..models.order import Order, OrderStatus
from .queries import load_orders

logger = structlog.get_logger(__name__)

TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class OrderService:
    """订单服务类，封装所有订单相关的业务逻辑"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    # ---- 买家 ----

    def list_buyer_orders(self, buyer_id: str) -> List[Order]:
        """获取买家的全部订单，来源购物车已展开"""
        return load_orders(self.db, self.db.list_links("buyer_orders", buyer_id))

    def get_buyer_order(self, buyer_id: str, order_id: str) -> Order:
        self._find_owned_order("buyer_orders", buyer_id, order_id, "Buyer")
        return load_orders(self.db, [order_id])[0]

    def place_order(self, buyer_id: str, cart_id: str) -> Order:
        """
        由购物车下单

        Args:
            buyer_id: 当前买家ID
            cart_id: 买家有效购物车ID

        Returns:
            Order: 新订单（状态为待处理）

        Raises:
            InvalidFieldError: 购物车ID格式非法
            UnauthorizedError: 购物车不存在或不属于该买家
            CustomError: 购物车中没有可下单的菜品 (403)
        """
        assert_valid_id(cart_id, "cart")
        order_id = self.db.new_id()
        with self.db.transaction() as conn:
            if self.db.find_owned("buyer_carts", buyer_id, cart_id) is None:
                raise UnauthorizedError("Buyer", "cart")
            item_count, total_price = self._cart_total(cart_id)
            if item_count == 0:
                raise CustomError("Cart has no items", 403)

            conn.execute(
                """
                INSERT INTO orders(id, buyer_id, cart_id, total_price, date, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [order_id, buyer_id, cart_id, total_price, datetime.now(),
                 int(OrderStatus.PENDING)]
            )
            self.db.add_link("buyer_orders", buyer_id, order_id)
            self.db.remove_link("buyer_carts", buyer_id, cart_id)
            self.db.log_action(
                "order_placed",
                {"order_id": order_id, "cart_id": cart_id, "total_price": total_price},
                user_id=buyer_id, actor_id=buyer_id
            )

        logger.info("order_placed", buyer_id=buyer_id, order_id=order_id, total_price=total_price)
        return load_orders(self.db, [order_id])[0]

    def cancel_order(self, buyer_id: str, order_id: str):
        """
        买家取消订单，删除订单、来源购物车及其菜品

        Raises:
            UnauthorizedError: 订单不存在或不属于该买家
            CustomError: 订单不在待处理状态 (403)
        """
        with self.db.transaction() as conn:
            self._find_owned_order("buyer_orders", buyer_id, order_id, "Buyer")
            cart_id, status = conn.execute(
                "SELECT cart_id, status FROM orders WHERE id=?", [order_id]
            ).fetchone()
            if status != OrderStatus.PENDING:
                raise CustomError("Order is not in 'pending' status", 403)

            self.db.remove_link("buyer_orders", buyer_id, order_id)
            conn.execute("DELETE FROM orders WHERE id=?", [order_id])
            conn.execute("DELETE FROM cart_items WHERE cart_id=?", [cart_id])
            conn.execute("DELETE FROM carts WHERE id=?", [cart_id])
            self.db.log_action(
                "order_cancelled", {"order_id": order_id, "cart_id": cart_id},
                user_id=buyer_id, actor_id=buyer_id
            )

        logger.info("order_cancelled", buyer_id=buyer_id, order_id=order_id)

    # ---- 商家 ----

    def list_vendor_orders(self, vendor_id: str) -> List[Order]:
        """获取商家已接受的订单"""
        return load_orders(self.db, self.db.list_links("vendor_orders", vendor_id))

    def get_vendor_order(self, vendor_id: str, order_id: str) -> Order:
        self._find_owned_order("vendor_orders", vendor_id, order_id, "Vendor")
        return load_orders(self.db, [order_id])[0]

    def process_order(self, vendor_id: str, order_id: str, is_accept: bool) -> Order:
        """
        商家接单或拒单

        Raises:
            InvalidFieldError: 订单ID格式非法
            NotFoundError: 订单不存在
            UnauthorizedError: 订单不属于该商家
            CustomError: 订单不在待处理状态 (403)
        """
        assert_valid_id(order_id, "order")
        new_status = OrderStatus.IN_PROGRESS if is_accept else OrderStatus.CANCELLED
        action = "order_accepted" if is_accept else "order_rejected"
        with self.db.transaction() as conn:
            row = self.db.fetch_dict(
                """
                SELECT o.buyer_id, o.status, c.vendor_id
                FROM orders o JOIN carts c ON c.id = o.cart_id
                WHERE o.id=?
                """,
                [order_id]
            )
            if row is None:
                raise NotFoundError("Order")
            if row["vendor_id"] != vendor_id:
                raise UnauthorizedError("Vendor", "order")
            if row["status"] != OrderStatus.PENDING:
                raise CustomError("Order is not in 'pending' status", 403)

            conn.execute("UPDATE orders SET status=? WHERE id=?", [int(new_status), order_id])
            if is_accept:
                self.db.add_link("vendor_orders", vendor_id, order_id)
            self.db.log_action(action, {"order_id": order_id},
                               user_id=row["buyer_id"], actor_id=vendor_id)

        logger.info(action, vendor_id=vendor_id, order_id=order_id)
        return load_orders(self.db, [order_id])[0]

    def update_order_status(self, vendor_id: str, order_id: str, status: int) -> Order:
        """
        推进订单状态，新状态必须严格大于当前状态
        已完成和已取消为终态，不能再变更

        Raises:
            UnauthorizedError: 订单不在商家已接受列表中
            InvalidFieldError: 状态不是合法状态码，未严格递增，或订单已处于终态
        """
        with self.db.transaction() as conn:
            self._find_owned_order("vendor_orders", vendor_id, order_id, "Vendor")
            try:
                new_status = OrderStatus(status)
            except ValueError:
                raise InvalidFieldError("status")

            buyer_id, current = conn.execute(
                "SELECT buyer_id, status FROM orders WHERE id=?", [order_id]
            ).fetchone()
            if current in TERMINAL_STATUSES or new_status <= current:
                raise InvalidFieldError("status")

            conn.execute("UPDATE orders SET status=? WHERE id=?", [int(new_status), order_id])
            self.db.log_action(
                "order_status_updated",
                {"order_id": order_id, "from": current, "to": int(new_status)},
                user_id=buyer_id, actor_id=vendor_id
            )

        logger.info("order_status_updated", vendor_id=vendor_id, order_id=order_id,
                    status=new_status.label)
        return load_orders(self.db, [order_id])[0]

    # ---- 内部方法 ----

    def _find_owned_order(self, link_table: str, owner_id: str, order_id: str, client: str):
        assert_valid_id(order_id, "order")
        if self.db.find_owned(link_table, owner_id, order_id) is None:
            raise UnauthorizedError(client, "order")

    def _cart_total(self, cart_id: str) -> Tuple[int, float]:
        """购物车菜品数与总价 = Σ 单价 × 数量"""
        row = self.db.execute_one(
            """
            SELECT COUNT(*), COALESCE(SUM(m.price * ci.quantity), 0)
            FROM cart_items ci JOIN menu_items m ON m.id = ci.menu_item_id
            WHERE ci.cart_id=?
            """,
            [cart_id]
        )
        return row[0], round(float(row[1]), 2)
