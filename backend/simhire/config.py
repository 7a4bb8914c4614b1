from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/simhire.db"
    secret_key: str = "dev-secret-key-change-in-production"
    token_expire_days: int = 7

    # Base URL the REST client talks to
    api_base_url: str = "http://localhost:5000/api"

    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"

    # Leaderboards
    leaderboard_limit: int = 100
    leaderboard_preview_size: int = 10  # per category on /leaderboards

    # Simulasi results at or above this percentage earn a badge
    badge_threshold: int = 80

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
