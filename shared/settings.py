"""Runtime settings for the deal document tools.

Values come from ``DEAL_DOCS_*`` environment variables or the repo-level
``.env`` file. Per-user choices (such as the preferred mail client) are
not settings; they live in the JSON config store.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    environment: str = "development"
    strict_styles: bool | None = None

    logo_width_px: int = 175
    image_timeout_seconds: float = 10.0
    logo_uri: str = str(BASE_DIR / "data" / "assets" / "logo.jpg")

    clipboard_backend: str = "memory"  # memory | system
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DEAL_DOCS_",
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def strict_style_mapping(self) -> bool:
        """Unmapped styles raise outside production unless overridden."""
        if self.strict_styles is not None:
            return self.strict_styles
        return not self.is_production


@lru_cache
def get_settings() -> Settings:
    return Settings()
