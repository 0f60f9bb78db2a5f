from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration using Pydantic Settings.

    Values come from environment variables or a local .env file:
    1. Storage backend (SQLite by default, PostgreSQL via asyncpg)
    2. Optional Redis cache used for read models and update fan-out
    3. Validation limits for user fields
    4. Undo/redo history capacity
    """

    # Application
    app_name: str = "Social Graph Network"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/network.db"
    database_pool_size: int = 10
    database_max_overflow: int = 20

    # Redis (optional - the graph works without it)
    redis_url: Optional[str] = None
    redis_cache_ttl: int = 60  # seconds

    # User validation
    username_max_length: int = 50
    age_min: int = 1
    age_max: int = 150

    # Undo/redo
    undo_history_limit: int = 50

    # Seed Alice/Bob/Charlie into an empty database during lifecycle startup()
    seed_default_graph: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"  # Allow extra fields from .env


# Global settings instance
settings = Settings()
