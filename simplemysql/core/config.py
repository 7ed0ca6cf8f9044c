"""
Library settings (pydantic-settings).

Values come from the environment or a local ``.env`` file. They are defaults
only: every builder and client accepts explicit overrides.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Raise TypeMismatch / ArgumentCountMismatch instead of coercing.
    STRICT_TYPES: bool = False
    TEMPLATE_CACHE_SIZE: int = Field(default=512, ge=0)

    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = Field(default=3306, ge=1, le=65535)
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_DATABASE: str | None = None
    MYSQL_CHARSET: str = "utf8mb4"
    MYSQL_CONNECT_TIMEOUT: int = Field(default=10, ge=1)

    LOG_ERRORS: bool = False
    LOG_FILE: str | None = None
    LOG_BACKTRACE: bool = True
    LOG_STACK_VARS: bool = True


settings = Settings()
