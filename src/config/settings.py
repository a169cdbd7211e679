from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Environments the suite is allowed to seed and reset
ALLOWED_ENVIRONMENTS = {"local", "development", "test", "testing"}


class Settings(BaseSettings):
    """E2E suite settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Suite
    APP_NAME: str = "MyFit Web E2E"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"

    # Targets
    E2E_API_URL: str = "http://localhost:8001"  # myfit-api running tests.e2e.server
    E2E_APP_URL: str = "http://localhost:3000"  # flutter build web + serve
    API_V1_PREFIX: str = "/api/v1"
    API_TIMEOUT_S: float = 30.0

    # Browser
    BROWSER: Literal["chromium", "firefox", "webkit"] = "chromium"
    HEADLESS: bool = True
    SLOW_MO_MS: int = 0
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 720

    # Flutter semantics tree
    FLUTTER_ATTACH_TIMEOUT_MS: int = 15000
    FLUTTER_SEMANTICS_TIMEOUT_MS: int = 10000
    FLUTTER_SETTLE_MS: int = 1500
    TAB_SETTLE_MS: int = 150
    ACTIVATE_SETTLE_MS: int = 300
    DEFAULT_MAX_TABS: int = 20

    # Waits
    ACTION_TIMEOUT_MS: int = 10000
    POINTER_CLICK_TIMEOUT_MS: int = 3000  # before falling back to Tab/Enter
    NAVIGATION_TIMEOUT_MS: int = 20000
    RENDEZVOUS_TIMEOUT_S: float = 10.0
    RENDEZVOUS_INTERVAL_S: float = 0.25

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_JSON: bool = False

    # Observability (GlitchTip/Sentry)
    GLITCHTIP_DSN: str = ""

    @property
    def api_v1_url(self) -> str:
        return f"{self.E2E_API_URL.rstrip('/')}{self.API_V1_PREFIX}"

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.VIEWPORT_WIDTH, "height": self.VIEWPORT_HEIGHT}


def validate_environment(config: "Settings | None" = None) -> None:
    """Refuse to run against anything that looks like production."""
    config = config or get_settings()
    env = config.ENVIRONMENT.lower()
    if env not in ALLOWED_ENVIRONMENTS:
        raise RuntimeError(
            f"E2E tests can only run in {ALLOWED_ENVIRONMENTS}. "
            f"Current environment: {env}"
        )

    # Additional safety checks
    api_url = config.E2E_API_URL.lower()
    if "prod" in api_url or "myfitplatform.com" in api_url:
        raise RuntimeError("E2E tests cannot run against the production API!")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
