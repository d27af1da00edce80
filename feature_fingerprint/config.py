from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    project_root: Path = Field(default=Path("."), description="Root that feature paths are reported relative to")
    features_dir: str = Field(default="features", description="Directory (under the root) searched for feature files")
    feature_glob: str = Field(default="**/*.feature", description="Recursive glob selecting feature files")
    report_path: Path = Field(default=Path("cucumber_struct.json"), description="Where the JSON report is written")
    log_level: LogLevel = Field(default="WARNING", description="Logging level for the CLI")

    # Discovery
    ignore_globs: List[str] = Field(
        default_factory=lambda: [
            "**/.git/**",
            "**/.venv/**",
            "**/node_modules/**",
            "**/dist/**",
            "**/build/**",
        ]
    )

    class Config:
        env_file = ".env"
        env_prefix = "FEATURE_FINGERPRINT_"
        extra = "ignore"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def features_path(self) -> Path:
        return self.project_root / self.features_dir
