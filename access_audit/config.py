"""
Configuration management for the audit service and reporting UI.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Host to bind the audit service")
    port: int = Field(default=3001, description="Port to bind the audit service")
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:8501",
        description="Comma-separated list of origins allowed to call the service",
        alias="CORS_ORIGINS",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=True, description="Render logs as JSON lines")

    # Browser sessions
    chrome_binary: Optional[str] = Field(default=None, alias="CHROME_BINARY")
    chromedriver_path: Optional[str] = Field(default=None, alias="CHROMEDRIVER_PATH")
    headless: bool = Field(default=True, description="Run Chrome without a visible window")
    window_size: str = Field(default="1920,1080", description="Browser window size as W,H")
    max_concurrent_sessions: int = Field(
        default=4, ge=1, description="Upper bound on live browser sessions"
    )
    session_acquire_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a free browser slot"
    )

    # Scanning
    navigation_timeout: float = Field(
        default=30.0, gt=0, description="Seconds allowed for the target page to load"
    )
    settle_delay: float = Field(
        default=0.0, ge=0, description="Extra seconds to wait after the page is loaded"
    )
    audit_timeout: float = Field(
        default=120.0, gt=0, description="Overall deadline for one audit request"
    )

    # Reporting UI
    service_url: str = Field(default="http://localhost:3001", description="Audit service base URL")
    request_timeout: float = Field(default=180.0, description="UI request timeout in seconds")
    state_file: Path = Field(default=Path("data/state.json"), description="Persisted UI state")
    knowledge_base_path: Optional[Path] = Field(
        default=None, description="Override for the remediation knowledge base JSON"
    )

    @computed_field
    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]

    @property
    def window_dimensions(self) -> Tuple[int, int]:
        width, _, height = self.window_size.partition(",")
        return int(width), int(height or width)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
