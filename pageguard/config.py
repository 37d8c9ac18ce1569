from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # API Configuration
    APP_NAME: str = "PageGuard"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Database (trusted domains, options, last result per site)
    DATABASE_URL: str = "sqlite:///./pageguard.db"

    # Trusted domains seeded on first run
    DEFAULT_TRUSTED_DOMAINS: List[str] = [
        "tiktok.com",
        "facebook.com",
        "instagram.com",
        "twitter.com",
        "x.com",
        "linkedin.com",
        "youtube.com",
    ]

    # Alerts
    MAX_ALERTS_PER_ID: int = 2

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
