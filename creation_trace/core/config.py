"""Core configuration for creation-trace."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CREATION_TRACE_",
        case_sensitive=False,
    )

    # ── JSON-RPC transport ───────────────────────────────────────────────
    rpc_timeout_seconds: float = Field(default=30.0, gt=0)
    rpc_user_agent: str = "creation-trace/0.1"

    # ── Provider keys (expanded into templated RPC URLs) ─────────────────
    alchemy_api_key: str = ""
    infura_api_key: str = ""

    def rpc_placeholders(self) -> dict[str, str]:
        """Values substituted into ``{placeholder}`` segments of RPC URLs."""
        return {
            "alchemy_api_key": self.alchemy_api_key,
            "infura_api_key": self.infura_api_key,
        }


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
