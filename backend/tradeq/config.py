from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./data.db"
    sql_echo: bool = False
    sqlite_busy_timeout_ms: int = 5000  # How long a blocked SQLite writer waits for the lock

    # Worker
    poll_interval_seconds: float = 0.1
    worker_skip_locked: bool = False  # Only honored by engines with row locks (PostgreSQL)
    run_worker_in_api: bool = False  # Start an embedded worker alongside the API

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8080

    log_level: str = "INFO"

    @field_validator("poll_interval_seconds")
    @classmethod
    def non_negative_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("poll_interval_seconds must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    class Config:
        env_file = ".env"
        case_sensitive = False


def database_url_from_path(db_path: str) -> str:
    """Turn a bare SQLite file path (the --db flag) into an async SQLAlchemy URL"""
    if "://" in db_path:
        return db_path
    return f"sqlite+aiosqlite:///{db_path}"


settings = Settings()
