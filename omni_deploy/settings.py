from __future__ import annotations

"""
Runtime settings for omni-deploy.

- Reads environment variables (optionally from `.env`) via pydantic-settings.
- Exposes a cached `get_settings()` accessor.

Environment variables (prefix ``OMNI_DEPLOY_``):
    OMNI_DEPLOY_RPC_URL               (str, default "http://127.0.0.1:8545") Node JSON-RPC endpoint
    OMNI_DEPLOY_REQUEST_TIMEOUT       (float, default 10.0)   Per-request timeout, seconds
    OMNI_DEPLOY_MAX_RETRIES           (int, default 3)        Transport retries per call
    OMNI_DEPLOY_BACKOFF_INITIAL       (float, default 0.2)    First retry delay, seconds
    OMNI_DEPLOY_BACKOFF_MAX           (float, default 2.0)    Retry delay cap, seconds
    OMNI_DEPLOY_SEAL_POLL_INTERVAL    (float, default 1.0)    Delay between seal polls, seconds
    OMNI_DEPLOY_PROJECT_PATH          (str, default "omni.yaml") Project configuration file
    OMNI_DEPLOY_LOG_LEVEL             (str, default "INFO")
    OMNI_DEPLOY_LOG_FORMAT            (str, default "json")   "json" or "console"

Notes
-----
- There is no seal-wait timeout; a transaction is polled until the node
  reports it sealed.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Node
    rpc_url: str = Field("http://127.0.0.1:8545", description="Node JSON-RPC endpoint")
    request_timeout: float = Field(10.0, gt=0, description="Per-request timeout in seconds")
    max_retries: int = Field(3, ge=0, description="Transport retries per gateway call")
    backoff_initial: float = Field(0.2, ge=0)
    backoff_max: float = Field(2.0, ge=0)
    seal_poll_interval: float = Field(1.0, ge=0, description="Delay between seal polls in seconds")

    # Project
    project_path: Path = Field(Path("omni.yaml"), description="Project configuration file")

    # Logging
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field("json", description='"json" or "console"')

    model_config = SettingsConfigDict(
        env_prefix="OMNI_DEPLOY_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return str(v).upper()

    @field_validator("log_format", mode="before")
    @classmethod
    def _check_format(cls, v):
        s = str(v).lower()
        if s not in ("json", "console"):
            raise ValueError('log_format must be "json" or "console"')
        return s


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
