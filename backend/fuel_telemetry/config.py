from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./fuel_tanks.db"
    create_tables_on_startup: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 3002
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["*"]

    # Readings
    reading_interval_minutes: int = 30
    reading_retention_days: int = 30
    initialize_tanks_on_startup: bool = True

    # Live updates
    event_queue_size: int = 100
    event_keepalive_seconds: float = 15.0

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
