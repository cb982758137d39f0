from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv
import os


load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)

    jwt_key: str = os.getenv("JWT_KEY", "change-me")
    jwt_timeout_seconds: int = Field(int(os.getenv("JWT_TIMEOUT_SECONDS", "3600")), gt=0)  # access token, 1 hour
    jwt_refresh_multiplier: int = Field(int(os.getenv("JWT_REFRESH_MULTIPLIER", "10")), ge=1)
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./msgboard.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
