import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    database_url: str = "sqlite:///./jobjourney.db"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    debug: bool = False

    # Auth
    jwt_secret: str = "dev-only-secret-change-me-before-deploying"
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 60
    refresh_token_ttl_days: int = 7
    bcrypt_rounds: int = 12

    # Rate limiting (slowapi limit strings)
    rate_limit_enabled: bool = True
    rate_limit: str = "100/15minutes"
    auth_rate_limit: str = "30/15minutes"

    # Uploads
    max_upload_size_mb: int = 10

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, raw):
        """Accept CORS_ORIGINS as comma-separated string or JSON list."""
        if not isinstance(raw, str):
            return raw
        if raw.startswith("["):
            return json.loads(raw)
        return [o.strip() for o in raw.split(",") if o.strip()]


settings = Settings()
