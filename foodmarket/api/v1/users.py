"""
用户认证路由模块
邮箱密码注册、登录、登出以及当前用户查询
会话由 SessionMiddleware 写入签名 Cookie
"""

from fastapi import APIRouter, Depends, Request, status

from ...core.database import DatabaseManager, get_db
from ...core.security import SecurityManager, get_security_manager, require_auth
from ...models.user import User
from ...schemas.auth import LogInRequest, SignUpRequest
from ...schemas.common import MessageResponse
from ...services.user_service import UserService

router = APIRouter()


def get_user_service(
    db: DatabaseManager = Depends(get_db),
    security: SecurityManager = Depends(get_security_manager),
) -> UserService:
    return UserService(db, security)


@router.get("", response_model=User)
def get_current_user(
    user_id: str = Depends(require_auth),
    service: UserService = Depends(get_user_service),
):
    """获取当前登录用户"""
    return service.get_user(user_id)


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
def sign_up(req: SignUpRequest, request: Request,
            service: UserService = Depends(get_user_service)):
    """
    邮箱注册并建立会话

    Returns:
        User: 新注册的用户（尚无买家、商家档案）
    """
    user = service.sign_up(req.email, req.password)
    SecurityManager.start_session(request, service.session_payload(user))
    return user


@router.post("/login", response_model=User)
def log_in(req: LogInRequest, request: Request,
           service: UserService = Depends(get_user_service)):
    """邮箱密码登录，会话中写入用户及档案ID"""
    user = service.log_in(req.email, req.password)
    SecurityManager.start_session(request, service.session_payload(user))
    return user


@router.post("/logout", response_model=MessageResponse)
def log_out(request: Request, user_id: str = Depends(require_auth)):
    SecurityManager.end_session(request)
    return MessageResponse(message="Logged out successfully")
