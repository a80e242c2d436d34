"""
外卖点餐平台后端服务 - 主应用入口
提供买家、商家、菜单、购物车和订单的完整后端API服务

主要功能模块：
- 邮箱注册登录与 Cookie 会话
- 买家、商家档案管理
- 商家菜单管理（软删除 + 定期清理）
- 买家购物车
- 订单下单、取消与商家处理
- 操作日志记录

技术栈：FastAPI + DuckDB + Cookie 会话 + structlog
"""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .api import api_router
from .config import Settings, get_settings
from .core.database import DatabaseManager
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import BaseApplicationError
from .core.logging import bind_request_context, clear_request_context, configure_logging
from .core.security import SecurityManager

logger = structlog.get_logger(__name__)


async def _purge_periodically(db: DatabaseManager, interval: int):
    """后台任务：定期物理删除已过期的软删除菜品"""
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(db.purge_expired_menu_items)
        except BaseApplicationError as e:
            logger.error("menu_item_purge_failed", error=e.message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db

    # 启动时初始化数据库并清理一次过期菜品
    db.init_database()
    db.purge_expired_menu_items()

    purge_task = None
    if settings.purge_interval_seconds > 0:
        purge_task = asyncio.create_task(
            _purge_periodically(db, settings.purge_interval_seconds)
        )

    yield

    if purge_task is not None:
        purge_task.cancel()
        with suppress(asyncio.CancelledError):
            await purge_task
    if app.state.owns_db:
        db.close()
    logger.info("application_shutdown")


def create_app(settings: Settings = None, db: DatabaseManager = None) -> FastAPI:
    """
    创建FastAPI应用

    Args:
        settings: 应用配置，默认按 FOODMARKET_ENV 选择
        db: 数据库管理器，默认按 settings.database_url 创建

    Returns:
        FastAPI: 配置完成的应用实例
    """
    settings = settings or get_settings()
    configure_logging(settings.debug, settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="外卖点餐平台API",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.owns_db = db is None
    app.state.db = db or DatabaseManager(settings.database_url)
    app.state.security = SecurityManager(settings.bcrypt_rounds)

    # 会话中间件需在 CORS 之内
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """记录每个请求的方法、路径、状态码和耗时"""
        clear_request_context()
        bind_request_context(request_id=uuid.uuid4().hex[:12])
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    # 注册异常处理器
    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # 注册路由
    app.include_router(api_router, prefix=settings.api_prefix)

    # 健康检查
    @app.get("/health")
    def health_check():
        try:
            app.state.db.execute_one("SELECT 1")
            return {
                "status": "healthy",
                "version": settings.api_version,
                "database": "connected"
            }
        except BaseApplicationError as e:
            return {
                "status": "unhealthy",
                "version": settings.api_version,
                "database": f"error: {e.message}"
            }

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": "外卖点餐平台API"
        }

    return app


if __name__ == "__main__":
    import uvicorn

    app_settings = get_settings()
    uvicorn.run(create_app(app_settings), host="0.0.0.0", port=app_settings.port or 5000)
