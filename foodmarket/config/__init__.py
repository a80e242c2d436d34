import os

from .settings import Settings
from .environments import DevelopmentSettings, TestingSettings

_ENVIRONMENTS = {
    "development": DevelopmentSettings,
    "testing": TestingSettings,
}


def get_settings(environment: str = None) -> Settings:
    """按环境名构造配置，未指定时读取 FOODMARKET_ENV；每次调用返回新实例"""
    environment = environment or os.getenv("FOODMARKET_ENV", "")
    settings_class = _ENVIRONMENTS.get(environment.lower())
    if settings_class is None:
        return Settings()
    return settings_class()


__all__ = ["Settings", "get_settings", "DevelopmentSettings", "TestingSettings"]
