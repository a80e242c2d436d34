"""
菜单服务
菜品的增删改查均限定在当前商家自己的菜单内

删除为软删除：菜品立即从商家菜单中移除，记录设置 expire_at，
由 purge_expired_items（启动时及后台周期任务）在到期后物理删除
"""

from datetime import datetime, timedelta
from typing import List, Optional

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import NotFoundError, UnauthorizedError
from ..core.validators import assert_valid_id
from ..models.menu import MenuItem
from .queries import load_menu_items

logger = structlog.get_logger(__name__)

DEFAULT_RETENTION_DAYS = 30


class MenuService:
    """菜单服务"""

    def __init__(self, db: DatabaseManager, retention_days: int = DEFAULT_RETENTION_DAYS):
        self.db = db
        self.retention_days = retention_days

    def get_menu(self, vendor_id: str) -> List[MenuItem]:
        """按菜单顺序获取商家当前在售菜单（公开）"""
        assert_valid_id(vendor_id, "vendor")
        if not self.db.execute_one("SELECT 1 FROM vendors WHERE id=?", [vendor_id]):
            raise NotFoundError("Vendor")
        return load_menu_items(self.db, self.db.list_links("vendor_menu", vendor_id))

    def get_menu_item(self, item_id: str) -> MenuItem:
        """获取单个菜品（公开）"""
        assert_valid_id(item_id, "menu item")
        items = load_menu_items(self.db, [item_id])
        if not items:
            raise NotFoundError("Menu item")
        return items[0]

    def create_menu_item(self, vendor_id: str, name: str, price: float, category: str,
                         available: bool, description: Optional[str] = None) -> MenuItem:
        """新建菜品并追加到商家菜单末尾"""
        self._assert_vendor(vendor_id)
        item_id = self.db.new_id()
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO menu_items(id, name, price, available, category, description)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [item_id, name, price, available, category, description]
            )
            self.db.add_link("vendor_menu", vendor_id, item_id)

        logger.info("menu_item_created", vendor_id=vendor_id, item_id=item_id)
        return self.get_menu_item(item_id)

    def update_menu_item(self, vendor_id: str, item_id: str, name: str, price: float,
                         category: str, available: bool,
                         description: Optional[str] = None) -> MenuItem:
        """整体替换菜品内容"""
        self._find_owned_item(vendor_id, item_id)
        self.db.execute_query(
            """
            UPDATE menu_items SET name=?, price=?, category=?, description=?, available=?
            WHERE id=?
            """,
            [name, price, category, description, available, item_id]
        )
        return self.get_menu_item(item_id)

    def toggle_availability(self, vendor_id: str, item_id: str) -> MenuItem:
        self._find_owned_item(vendor_id, item_id)
        self.db.execute_query(
            "UPDATE menu_items SET available = NOT available WHERE id=?",
            [item_id]
        )
        return self.get_menu_item(item_id)

    def delete_menu_item(self, vendor_id: str, item_id: str, now: datetime = None) -> datetime:
        """
        软删除菜品

        Returns:
            记录的过期时间
        """
        self._find_owned_item(vendor_id, item_id)
        expire_at = (now or datetime.now()) + timedelta(days=self.retention_days)
        with self.db.transaction() as conn:
            self.db.remove_link("vendor_menu", vendor_id, item_id)
            conn.execute("UPDATE menu_items SET expire_at=? WHERE id=?", [expire_at, item_id])

        logger.info("menu_item_deleted", vendor_id=vendor_id, item_id=item_id,
                    expire_at=expire_at.isoformat())
        return expire_at

    def purge_expired_items(self, now: datetime = None) -> int:
        """物理删除已到期的软删除菜品"""
        return self.db.purge_expired_menu_items(now)

    def _assert_vendor(self, vendor_id: str):
        if not self.db.execute_one("SELECT 1 FROM vendors WHERE id=?", [vendor_id]):
            raise NotFoundError("Vendor profile")

    def _find_owned_item(self, vendor_id: str, item_id: str) -> str:
        """菜品必须在当前商家的菜单中；不存在与不属于统一视为无权访问"""
        assert_valid_id(item_id, "menu item")
        self._assert_vendor(vendor_id)
        if self.db.find_owned("vendor_menu", vendor_id, item_id) is None:
            raise UnauthorizedError("Vendor", "menu item")
        return item_id
