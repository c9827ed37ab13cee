# backend/app/config.py
from __future__ import annotations

import json
from typing import List

from pydantic import Field, field_validator
from pydantic.functional_validators import BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated


def _clean_str(v: str | None) -> str | None:
    if v is None:
        return None
    s = str(v).strip().strip('"').strip("'").rstrip("\r")
    return s


def _to_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v or "").strip().strip('"').strip("'").strip()
    s = s.lower().rstrip("\r")
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off", ""}:
        return False
    # anything else non-empty counts as enabled
    return bool(s)


def parse_cors_env(v) -> List[str]:
    if v is None:
        return ["*"]
    if isinstance(v, list):
        return v
    s = str(v).strip()
    if s.startswith("["):
        try:
            return [str(x).strip() for x in json.loads(s)]
        except json.JSONDecodeError:
            pass
    return [x.strip() for x in s.split(",") if x.strip()]


class Settings(BaseSettings):
    """
    Runtime configuration, read from the environment and `.env`.

    - DATABASE_URL wins over the DB_* parts when set; a bare `postgresql://`
      scheme is rewritten to the psycopg driver.
    - SITE_NAME scopes every query to one tenant of a shared database.
    - ASSIGNED_FROM_DISTRIBUTION switches per-reviewer progress from the
      total applicant count to the persisted assignment count.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # --- database ---

    DB_HOST: Annotated[str, BeforeValidator(_clean_str)] = "localhost"
    DB_PORT: int = 5432
    DB_NAME: Annotated[str, BeforeValidator(_clean_str)] = "reviewdb"
    DB_USER: Annotated[str, BeforeValidator(_clean_str)] = "reviewuser"
    DB_PASSWORD: Annotated[str, BeforeValidator(_clean_str)] = "reviewpassword"

    DATABASE_URL: str | None = None

    RUN_IN_DOCKER: Annotated[bool, BeforeValidator(_to_bool)] = False

    @property
    def db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        host = "review_postgres" if self.RUN_IN_DOCKER else self.DB_HOST
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{host}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_db_url(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("postgresql://"):
                return "postgresql+psycopg://" + v[len("postgresql://"):]
            if v.startswith("postgres://"):
                return "postgresql+psycopg://" + v[len("postgres://"):]
        return v

    # --- application ---

    DEBUG: Annotated[bool, BeforeValidator(_to_bool)] = False
    LOG_LEVEL: Annotated[str, BeforeValidator(_clean_str)] = "INFO"
    SERVICE_NAME: str = Field(default="residency-review-backend")
    SITE_NAME: Annotated[str, BeforeValidator(_clean_str)] = "urology_review"

    ASSIGNED_FROM_DISTRIBUTION: Annotated[bool, BeforeValidator(_to_bool)] = False
    AUTO_CREATE_TABLES: Annotated[bool, BeforeValidator(_to_bool)] = False
    SEED_ON_STARTUP: Annotated[bool, BeforeValidator(_to_bool)] = False

    CORS_ALLOW_ORIGINS: Annotated[List[str] | str,
                                  BeforeValidator(parse_cors_env)] = ["*"]


settings = Settings()
