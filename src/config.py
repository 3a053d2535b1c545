# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration.

    Values are read from environment variables (case-insensitive) or a
    local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = "sqlite:///./console.db"
    session_expiry_days: int = 7
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Value returned in place of any secret field outside a disclosure request
    secret_mask: str = "••••••••••••"

    # Failed audit appends kept in memory for later retry
    audit_retry_limit: int = 1000


settings = Settings()
