from ..settings import Settings

class TestingSettings(Settings):
    debug: bool = True
    database_url: str = "duckdb://:memory:"
    session_secret: str = "test-session-secret"
    bcrypt_rounds: int = 4
    # 测试中不启动后台清理任务
    purge_interval_seconds: int = 0
