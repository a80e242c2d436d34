"""
买家服务
买家档案的创建、查询、更新，以及收藏商家的切换
"""

from typing import List, Optional

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import AlreadyExistsError, NotFoundError
from ..core.validators import assert_valid_id
from ..models.user import Buyer, Vendor
from .queries import load_buyer, load_user, load_vendors

logger = structlog.get_logger(__name__)


class BuyerService:
    """买家服务"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def get_buyer(self, buyer_id: str) -> Buyer:
        buyer = load_buyer(self.db, buyer_id)
        if buyer is None:
            raise NotFoundError("Buyer profile")
        return buyer

    def create_buyer(self, user_id: str, buyer_name: str, address: str,
                     phone_number: Optional[str] = None) -> Buyer:
        """
        为用户创建买家档案，每个用户最多一个

        Raises:
            NotFoundError: 用户不存在
            AlreadyExistsError: 用户已有买家档案
        """
        user = load_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User")
        if user.buyer_id:
            raise AlreadyExistsError("User's buyer profile")

        buyer_id = self.db.new_id()
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO buyers(id, buyer_name, address, phone_number) VALUES (?, ?, ?, ?)",
                [buyer_id, buyer_name, address, phone_number]
            )
            conn.execute("UPDATE users SET buyer_id=? WHERE id=?", [buyer_id, user_id])

        logger.info("buyer_created", user_id=user_id, buyer_id=buyer_id)
        return self.get_buyer(buyer_id)

    def update_buyer(self, buyer_id: str, buyer_name: str, address: str,
                     phone_number: Optional[str] = None) -> Buyer:
        """整体更新买家档案"""
        self.get_buyer(buyer_id)
        self.db.execute_query(
            "UPDATE buyers SET buyer_name=?, address=?, phone_number=? WHERE id=?",
            [buyer_name, address, phone_number, buyer_id]
        )
        return self.get_buyer(buyer_id)

    def get_saved_vendors(self, buyer_id: str) -> List[Vendor]:
        self.get_buyer(buyer_id)
        return load_vendors(self.db, self.db.list_links("buyer_saved_vendors", buyer_id))

    def toggle_saved_vendor(self, buyer_id: str, vendor_id: str) -> List[Vendor]:
        """
        切换收藏商家：已收藏则移除，否则加入；重复调用两次恢复原状

        Raises:
            InvalidFieldError: 商家ID格式非法
            NotFoundError: 商家不存在
        """
        assert_valid_id(vendor_id, "vendor")
        if not self.db.execute_one("SELECT 1 FROM vendors WHERE id=?", [vendor_id]):
            raise NotFoundError("Vendor")
        self.get_buyer(buyer_id)

        self.db.toggle_link("buyer_saved_vendors", buyer_id, vendor_id)
        return self.get_saved_vendors(buyer_id)
