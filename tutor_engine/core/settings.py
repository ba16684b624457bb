import logging
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ROOT_ENV = PROJECT_ROOT / ".env"
ROOT_ENV_LOCAL = PROJECT_ROOT / ".env.local"


class Settings(BaseSettings):
    """
    Tutor Engine - Global Configuration Registry
    Centralizes all environment variables using Pydantic Settings.
    """

    model_config = SettingsConfigDict(
        env_file=(str(ROOT_ENV), str(ROOT_ENV_LOCAL)),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Infrastructure
    SUPABASE_URL: Optional[str] = Field(
        None, validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
    )
    SUPABASE_SERVICE_KEY: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
    )

    # Security
    TUTOR_SERVICE_SECRET: str = "development-secret"

    # AI Models & Services
    GEMINI_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    TEACHER_PROVIDER: str = "gemini"  # auto | gemini | groq
    ARCHIVIST_PROVIDER: str = "auto"

    # API Config
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    APP_ENV: str = "local"
    RUNNING_IN_DOCKER: bool = False

    # Tutoring turn controls
    TUTOR_HISTORY_MAX_MESSAGES: int = 20
    TUTOR_MAX_INPUT_CHARS: int = 5000

    # Archivist worker controls
    SUMMARY_WORKER_CONCURRENCY: int = 2
    SUMMARY_TRANSCRIPT_MAX_CHARS: int = 30000

    @field_validator("APP_ENV", "ENVIRONMENT", mode="before")
    @classmethod
    def _normalize_environment_labels(cls, value: str | None) -> str:
        return str(value or "").strip().lower()

    @field_validator("TEACHER_PROVIDER", "ARCHIVIST_PROVIDER", mode="before")
    @classmethod
    def _normalize_provider(cls, value: str | None) -> str:
        return str(value or "auto").strip().lower()

    @property
    def is_deployed_environment(self) -> bool:
        app_env = self.APP_ENV or self.ENVIRONMENT
        if app_env in {"staging", "production", "prod"}:
            return True
        return bool(self.RUNNING_IN_DOCKER and app_env not in {"", "local", "development", "dev"})

    @model_validator(mode="after")
    def _enforce_worker_limits(self) -> "Settings":
        if self.SUMMARY_WORKER_CONCURRENCY < 1:
            logger.warning(
                "SUMMARY_WORKER_CONCURRENCY below 1 is not allowed; forcing 1",
                extra={"configured": self.SUMMARY_WORKER_CONCURRENCY},
            )
            self.SUMMARY_WORKER_CONCURRENCY = 1
        if self.TUTOR_HISTORY_MAX_MESSAGES < 0:
            self.TUTOR_HISTORY_MAX_MESSAGES = 0
        return self


settings = Settings()  # type: ignore[call-arg]
