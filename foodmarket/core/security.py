"""
安全相关功能
- bcrypt 密码哈希与校验
- 基于 Cookie 会话的身份信息读写（SessionMiddleware 负责签名与过期）
- 路由级依赖：require_auth / require_buyer / require_vendor
"""

from typing import Any, Dict, Optional

import bcrypt
from fastapi import Request

from .exceptions import UnauthorizedError

# bcrypt 只使用前72字节
BCRYPT_MAX_BYTES = 72

SESSION_KEYS = ("user_id", "buyer_id", "vendor_id")


class SecurityManager:
    """安全管理器"""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """生成密码哈希"""
        raw = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify_password(self, password: str, hashed: Optional[str]) -> bool:
        """校验密码；第三方登录账户没有密码，一律校验失败"""
        if not hashed:
            return False
        raw = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.checkpw(raw, hashed.encode("utf-8"))

    @staticmethod
    def start_session(request: Request, user: Dict[str, Any]):
        """把用户及其买家、商家档案ID写入会话"""
        request.session["user_id"] = user["id"]
        request.session["buyer_id"] = user.get("buyer_id")
        request.session["vendor_id"] = user.get("vendor_id")

    @staticmethod
    def end_session(request: Request):
        request.session.clear()


def get_security_manager(request: Request) -> SecurityManager:
    """从应用状态获取安全管理器"""
    return request.app.state.security


async def require_auth(request: Request) -> str:
    """要求已登录，返回用户ID"""
    user_id = request.session.get("user_id")
    if not user_id:
        raise UnauthorizedError(message="User not authenticated")
    return user_id


async def require_buyer(request: Request) -> str:
    """要求拥有买家档案，返回买家ID"""
    buyer_id = request.session.get("buyer_id")
    if not buyer_id:
        raise UnauthorizedError(message="User does not have a buyer profile")
    return buyer_id


async def require_vendor(request: Request) -> str:
    """要求拥有商家档案，返回商家ID"""
    vendor_id = request.session.get("vendor_id")
    if not vendor_id:
        raise UnauthorizedError(message="User does not have a vendor profile")
    return vendor_id
