from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./foodmarket/data/foodmarket.duckdb"

    # 会话配置
    session_secret: str = "change-me-session-secret"
    session_cookie: str = "connect.sid"
    session_max_age: int = 60 * 60  # 1小时，每次请求续期
    session_https_only: bool = False

    # 前端地址（CORS）
    frontend_url: str = "http://localhost:3000"

    # 密码哈希
    bcrypt_rounds: int = 10

    # 菜单软删除保留天数与清理周期
    menu_item_retention_days: int = 30
    purge_interval_seconds: int = 60 * 60

    # API配置
    api_title: str = "Food Market API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api"

    # 开发模式
    debug: bool = False
    log_level: str = "INFO"

    # 监听端口（仅供 uvicorn 启动脚本使用）
    port: Optional[int] = 5000

    class Config:
        env_file = ".env"
        case_sensitive = False
