from ..settings import Settings

class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"
    database_url: str = "duckdb://./foodmarket/data/foodmarket_dev.duckdb"
    session_secret: str = "dev-session-secret"
