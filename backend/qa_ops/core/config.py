from __future__ import annotations

from typing import List

from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Core
    DATABASE_URL: str
    ALLOWED_ORIGINS: str | None = "*"
    API_PREFIX: str = "/api/v1"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    # Auth
    AUTH_TOKEN_SECRET: str
    AUTH_TOKEN_TTL_SECONDS: int = 86400

    # Default administrator bootstrap
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None
    ADMIN_FULL_NAME: str | None = None

    # Jenkins metrics collection
    JENKINS_URL: AnyUrl | str | None = None
    JENKINS_USER: str | None = None
    JENKINS_API_TOKEN: str | None = None
    JENKINS_TIMEOUT_SECONDS: int = 30
    JENKINS_BUILD_HISTORY_DEPTH: int = 50
    JENKINS_COLLECT_INTERVAL_SECONDS: int = 900

    # Git hosting API used for branch recreation
    GIT_API_URL: AnyUrl | str = "https://api.github.com"
    GIT_API_TOKEN: str | None = None
    GIT_TIMEOUT_SECONDS: int = 30

    # Branch recreation scheduler
    BRANCH_SCHEDULER_INTERVAL_SECONDS: int = 60
    BRANCH_RETRY_DELAY_SECONDS: int = 300
    BRANCH_MAX_CONSECUTIVE_FAILURES: int = 3
    BRANCH_PROTECTED_NAMES: str = "main,master"

    # Good To Go readiness
    GTG_MIN_PASS_RATE: float = 0.9
    GTG_WINDOW_SIZE: int = 10
    GTG_MAX_BUILD_AGE_HOURS: int = 48

    # Misc
    SCHEDULER_ENABLED: bool = True

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.ALLOWED_ORIGINS)

    @property
    def protected_branches(self) -> set[str]:
        return set(_split_csv(self.BRANCH_PROTECTED_NAMES))

    @property
    def jenkins_configured(self) -> bool:
        return bool(self.JENKINS_URL)


settings = Settings()  # type: ignore[call-arg]
