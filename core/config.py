"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AssetVerse happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. fb_service_key -> FB_SERVICE_KEY). Type coercion and validation are
      built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used to implement the DEBUG-conditional
      FB_SERVICE_KEY logic: dev mode runs without identity verification (every
      bearer token is rejected), production mode refuses to start without one.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or docstore/.
"""

import base64
import binascii
import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("assetverse.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'docstore' / 'asset_verse.db'}"

_DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "https://b12-m11-session.web.app",
]


def decode_service_key(encoded: str) -> dict:
    """Decode a base64-encoded service-account JSON document.

    Raises ValueError if the value is not valid base64, not JSON, not a JSON
    object, or lacks the project_id the identity provider needs to check the
    token audience.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
        info = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("FB_SERVICE_KEY is not base64-encoded service-account JSON.") from exc
    if not isinstance(info, dict) or not info.get("project_id"):
        raise ValueError("FB_SERVICE_KEY must decode to a JSON object with a project_id.")
    return info


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
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
    port: int = 3000

    # ------------------------------------------------------------------
    # Document store
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Identity provider
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured".
    fb_service_key: str = ""

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = _DEFAULT_CORS_ORIGINS
    write_rate_limit: str = "60/minute"
    read_rate_limit: str = "120/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_service_key(self) -> "Settings":
        """Enforce the FB_SERVICE_KEY policy.

        Dev mode (DEBUG=true): a missing key is allowed with a warning.
            Bearer-protected routes answer 401 to every request.

        Production mode: refuse to start without a key.

        Both modes: a key that is present must decode to service-account JSON.
        """
        if not self.fb_service_key:
            if self.debug:
                logger.warning(
                    "WARNING: FB_SERVICE_KEY is not set. " "Every bearer token will be rejected."
                )
            else:
                raise ValueError(
                    "FB_SERVICE_KEY is required in production mode. "
                    "Set FB_SERVICE_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
            return self
        decode_service_key(self.fb_service_key)
        return self

    def service_account_info(self) -> dict | None:
        """Return the decoded service-account dict, or None when not configured."""
        if not self.fb_service_key:
            return None
        return decode_service_key(self.fb_service_key)


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
