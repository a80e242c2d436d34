"""
用户服务
处理注册、登录和当前用户查询
"""

from typing import Any, Dict

import structlog

from ..core.database import DatabaseManager
from ..core.exceptions import AlreadyExistsError, InvalidFieldError, NotFoundError
from ..core.security import SecurityManager
from ..models.user import User
from .queries import load_user

logger = structlog.get_logger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: DatabaseManager, security: SecurityManager):
        self.db = db
        self.security = security

    def get_user(self, user_id: str) -> User:
        """获取当前登录用户"""
        user = load_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User")
        return user

    def sign_up(self, email: str, password: str) -> User:
        """
        使用邮箱和密码注册新用户

        Raises:
            AlreadyExistsError: 邮箱已被注册
        """
        email = email.strip().lower()
        if self.db.execute_one("SELECT 1 FROM users WHERE email=?", [email]):
            raise AlreadyExistsError("User with this email")

        user_id = self.db.new_id()
        self.db.execute_query(
            "INSERT INTO users(id, email, password) VALUES (?, ?, ?)",
            [user_id, email, self.security.hash_password(password)]
        )
        logger.info("user_signed_up", user_id=user_id)
        return self.get_user(user_id)

    def log_in(self, email: str, password: str) -> User:
        """
        校验邮箱和密码

        Raises:
            InvalidFieldError: 邮箱不存在或密码错误（两者不作区分）
        """
        row = self.db.fetch_dict(
            "SELECT id, password FROM users WHERE email=?",
            [email.strip().lower()]
        )
        if row is None or not self.security.verify_password(password, row["password"]):
            raise InvalidFieldError("credentials")
        return self.get_user(row["id"])

    @staticmethod
    def session_payload(user: User) -> Dict[str, Any]:
        """写入会话的身份信息"""
        return {"id": user.id, "buyer_id": user.buyer_id, "vendor_id": user.vendor_id}
