import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, cast

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from catalogdb.db.session import build_database_url

_ENV_FILE = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    SERVICE_NAME: str = "catalog-service"
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    DATABASE_URL: str = Field(default_factory=build_database_url)
    JWT_SECRET: str
    JWT_EXPIRE_MINUTES: int = Field(default=60, gt=0)
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:5173"]

    # Single admin account used by /auth/login; login is disabled without a hash.
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD_HASH: str | None = None

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                raise ValueError("CORS_ORIGINS cannot be empty.")
            try:
                parsed = json.loads(raw) if raw.startswith("[") else raw.split(",")
            except json.JSONDecodeError:
                parsed = raw.split(",")
            value = parsed

        if not isinstance(value, list):
            raise ValueError("CORS_ORIGINS must be a list or comma-separated string.")

        normalized: list[str] = []
        for origin in value:
            if not isinstance(origin, str):
                raise ValueError("CORS_ORIGINS entries must be strings.")
            cleaned = origin.strip().strip('[]"\'').rstrip("/")
            if cleaned:
                normalized.append(cleaned)

        if not normalized:
            raise ValueError("CORS_ORIGINS must include at least one origin.")

        # Keep order while removing duplicates.
        return list(dict.fromkeys(normalized))

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        if len(value.encode("utf-8")) < 32:
            raise ValueError("JWT_SECRET must be at least 32 bytes for HS256.")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class _LazySettings:
    def __getattr__(self, item: str) -> Any:
        return getattr(get_settings(), item)


settings = cast(Settings, _LazySettings())
