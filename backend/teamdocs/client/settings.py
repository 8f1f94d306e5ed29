from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client configuration loaded from TEAMDOCS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TEAMDOCS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = Field(default="http://localhost:8000/api", description="REST API root")
    http_timeout_seconds: float = Field(default=10.0, description="Timeout for API and GitHub calls")
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "teamdocs",
        description="Directory for the cached snapshot, documentation tree and GitHub token",
    )

    # README sync
    github_owner: str = Field(default="Sudhanshu-SRS", description="Repository owner for README sync")
    github_repo: str = Field(default="java-Document", description="Repository name for README sync")
    github_readme_path: str = Field(default="README.md")
    github_token: str | None = Field(default=None, description="Token used for README sync")
    github_api_url: str = Field(default="https://api.github.com")
    auto_sync_delay_seconds: float = Field(default=5.0, description="Debounce before an automatic README sync")

    @field_validator("api_base_url", "github_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("http_timeout_seconds")
    @classmethod
    def clamp_timeout(cls, value: float) -> float:
        return max(float(value), 0.5)


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    return ClientSettings()
