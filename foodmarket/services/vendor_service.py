"""
商家服务
商家档案的创建、查询、更新，以及菜系的切换
"""

from typing import List, Optional

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import AlreadyExistsError, NotFoundError
from ..core.validators import assert_defined, assert_price_range
from ..models.user import Vendor
from .queries import load_user, load_vendor, load_vendors

logger = structlog.get_logger(__name__)


class VendorService:
    """商家服务"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def list_vendors(self) -> List[Vendor]:
        """获取全部商家（公开）"""
        return load_vendors(self.db)

    def get_vendor(self, vendor_id: str) -> Vendor:
        vendor = load_vendor(self.db, vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor profile")
        return vendor

    def create_vendor(self, user_id: str, vendor_name: str, address: str, price_range: str,
                      phone_number: Optional[str] = None,
                      description: Optional[str] = None) -> Vendor:
        """
        为用户创建商家档案，每个用户最多一个

        Raises:
            NotFoundError: 用户不存在
            AlreadyExistsError: 用户已有商家档案，或商家名称已被占用
            InvalidFieldError: 价位不在 $ / $$ / $$$ 之中
        """
        user = load_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User")
        if user.vendor_id:
            raise AlreadyExistsError("User's vendor profile")
        assert_price_range(price_range)
        self._assert_name_available(vendor_name)

        vendor_id = self.db.new_id()
        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO vendors(id, vendor_name, address, price_range, phone_number, description)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [vendor_id, vendor_name, address, price_range, phone_number, description]
            )
            conn.execute("UPDATE users SET vendor_id=? WHERE id=?", [vendor_id, user_id])

        logger.info("vendor_created", user_id=user_id, vendor_id=vendor_id)
        return self.get_vendor(vendor_id)

    def update_vendor(self, vendor_id: str, vendor_name: str, address: str, price_range: str,
                      phone_number: Optional[str] = None,
                      description: Optional[str] = None) -> Vendor:
        """整体更新商家档案"""
        self.get_vendor(vendor_id)
        assert_price_range(price_range)
        self._assert_name_available(vendor_name, exclude_id=vendor_id)

        self.db.execute_query(
            """
            UPDATE vendors
            SET vendor_name=?, address=?, price_range=?, phone_number=?, description=?
            WHERE id=?
            """,
            [vendor_name, address, price_range, phone_number, description, vendor_id]
        )
        return self.get_vendor(vendor_id)

    def toggle_cuisine(self, vendor_id: str, cuisine: str) -> List[str]:
        """
        切换菜系：已存在则移除，否则追加

        Returns:
            切换后的菜系列表
        """
        assert_defined(cuisine)
        self.get_vendor(vendor_id)
        self.db.toggle_link("vendor_cuisines", vendor_id, cuisine.strip())
        return self.db.list_links("vendor_cuisines", vendor_id)

    def _assert_name_available(self, vendor_name: str, exclude_id: str = None):
        row = self.db.execute_one(
            "SELECT id FROM vendors WHERE vendor_name=? AND id IS DISTINCT FROM ?",
            [vendor_name, exclude_id]
        )
        if row:
            raise AlreadyExistsError("Vendor with this name")
