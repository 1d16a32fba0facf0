import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_KEY = "secret-api-key-123"
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"


def _split_origins(raw: str | None) -> list[str]:
    # Allow all origins unless CORS_ORIGINS narrows it down.
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    api_key: str = DEFAULT_API_KEY
    environment: str = "production"
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allow_credentials(self) -> bool:
        return "*" not in self.cors_origins


def load_settings() -> Settings:
    return Settings(
        port=int(os.getenv("PORT", "3000")),
        api_key=os.getenv("API_KEY", DEFAULT_API_KEY),
        environment=os.getenv("APP_ENV", "production"),
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
