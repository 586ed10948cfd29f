"""Runtime settings read from the environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from quiz_portal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_portal.constants.quiz_constants import DEFAULT_TEACHER_PASSWORD


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUIZ_PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    auth_mode: Literal["password", "role"] = "password"
    teacher_password: str = Field(default=DEFAULT_TEACHER_PASSWORD, min_length=1)
    admin_identities: str = ""

    seed_quiz_file: Path | None = None

    def admin_identity_list(self) -> list[str]:
        return [item.strip() for item in self.admin_identities.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
