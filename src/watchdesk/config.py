from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application store (read-write: reports, cache, desks)
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "watchdesk"
    db_password: str = "watchdesk"
    db_name: str = "watchdesk"
    app_pool_size: int = 20

    # Frigate store (read-only analytics source)
    frigate_db_host: str = "localhost"
    frigate_db_port: int = 5433
    frigate_db_user: str = "frigate"
    frigate_db_password: str = "frigate"
    frigate_db_name: str = "frigate_db"
    frigate_pool_size: int = 10

    pool_timeout_seconds: float = 2.0  # connection acquisition, fail fast on pool exhaustion
    redis_url: str = "redis://localhost:6379/0"

    api_base_url: str = "http://localhost:8000"
    frigate_media_url: str = "http://localhost:5000"
    reports_dir: str = "reports"

    cache_ttl_seconds: int = 3600
    default_window_hours: int = 24
    sweep_interval_seconds: int = 300
    sweep_in_process: bool = True
    auto_create_tables: bool = True

    debug: bool = False
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def frigate_database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.frigate_db_user}:{self.frigate_db_password}"
            f"@{self.frigate_db_host}:{self.frigate_db_port}/{self.frigate_db_name}"
        )

    class Config:
        env_file = ".env"


settings = Settings()
