# File: app/core/config.py

import os
from enum import Enum
from functools import lru_cache
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator


class LeadTaskScope(str, Enum):
    """How far a Team Lead's task create/update/delete rights reach."""

    GLOBAL = "global"
    TEAM = "team"


class Settings(BaseModel):
    # env values arrive as strings; run them through the validators below
    model_config = ConfigDict(validate_default=True)

    # Basic app info
    PROJECT_NAME: str = "Taskboard API"
    VERSION: str = "0.1.0"

    api_v1_prefix: str = "/api/v1"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS (the dashboard dev server)
    backend_cors_origins: List[str] = os.getenv(
        "BACKEND_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    )

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./taskboard.db")

    # Security / auth
    secret_key: str = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30))  # 30 days
    )
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    auth_cookie_name: str = os.getenv("AUTH_COOKIE_NAME", "jwt")
    auth_cookie_secure: bool = os.getenv("AUTH_COOKIE_SECURE", "false").lower() == "true"

    # Authorization
    lead_task_scope: LeadTaskScope = os.getenv("LEAD_TASK_SCOPE", LeadTaskScope.GLOBAL.value)

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
