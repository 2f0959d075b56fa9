"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): values come from environment variables and
      an optional .env file. Field names map to env var names
      (e.g. templates_dir -> TEMPLATES_DIR).

  @model_validator(mode="after"): resolves TEMPLATES_RELOAD from DEBUG when it
      is not set explicitly. Reload-on-render rebuilds the template registry on
      every request and is meant for local development only.

Layer rule: core/ is the kernel. This module may not import from auth/ or web/.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("minions.config")


class Settings(BaseSettings):
    """Settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    templates_dir: str = "templates"
    # None = follow DEBUG. Resolved by the validator below.
    templates_reload: Optional[bool] = None

    # ------------------------------------------------------------------
    # Static files
    # ------------------------------------------------------------------

    static_prefix: str = "/static"
    static_dir: str = "static"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("static_prefix")
    @classmethod
    def validate_static_prefix(cls, value: str) -> str:
        """URL prefixes are absolute paths. Trailing slashes are dropped."""
        if not value.startswith("/"):
            raise ValueError("STATIC_PREFIX must start with '/'.")
        return value.rstrip("/") or "/"

    @model_validator(mode="after")
    def resolve_templates_reload(self) -> "Settings":
        """Default TEMPLATES_RELOAD to DEBUG and warn when reload runs outside debug mode."""
        if self.templates_reload is None:
            self.templates_reload = self.debug
        elif self.templates_reload and not self.debug:
            logger.warning(
                "TEMPLATES_RELOAD is enabled without DEBUG. "
                "Templates are re-read from disk on every render."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
