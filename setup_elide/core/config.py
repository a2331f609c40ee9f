"""Configuration management for setup-elide."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from setup_elide.core.types import ArchiveType

logger = structlog.get_logger()

TOOL_NAME = "elide"


class ReleaseTable(BaseModel):
    """Fixed facts about how Elide releases are published.

    Bump ``revision`` whenever a value changes so cached decisions can be
    traced back to the table that produced them.
    """

    revision: int = Field(default=1, description="Table revision")
    legacy_tags_without_directory_root: frozenset[str] = Field(
        default=frozenset({"1.0.0-alpha7", "1.0.0-alpha8"}),
        description="Release tags whose tarballs have no top-level directory"
    )
    archive_extension_by_type: dict[ArchiveType, str] = Field(
        default={
            ArchiveType.ZIP: "zip",
            ArchiveType.GZIP: "tgz",
            ArchiveType.XZ: "txz",
        },
        description="File extension for each archive type"
    )
    base_paths: dict[str, str] = Field(
        default={"v1": "cli/v1/snapshot"},
        description="Download path prefixes by layout version"
    )
    supported_platforms: frozenset[tuple[str, str]] = Field(
        default=frozenset({("linux", "amd64"), ("darwin", "aarch64")}),
        description="(os, arch) pairs with published releases"
    )

    model_config = ConfigDict(frozen=True)


RELEASE_TABLE = ReleaseTable()


class IndexConfig(BaseModel):
    """GitHub release index configuration."""

    api_base: str = Field(default="https://api.github.com", description="GitHub API base URL")
    owner: str = Field(default="elide-dev", description="Repository owner")
    repo: str = Field(default="releases", description="Repository name")
    api_version: str = Field(default="2022-11-28", description="X-GitHub-Api-Version header")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    @field_validator("api_base")
    @classmethod
    def validate_api_base(cls, v: str) -> str:
        """Validate API base URL."""
        if not v:
            raise ValueError("API base URL cannot be empty")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class DownloadConfig(BaseModel):
    """Release download configuration."""

    base_url: str = Field(default="https://dl.azr.elide.cloud", description="Download base URL")
    layout: str = Field(default="v1", description="Key into the release table's base paths")
    timeout: float = Field(default=300.0, description="Download timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    @property
    def path_prefix(self) -> str:
        """Download path prefix for the configured layout."""
        return RELEASE_TABLE.base_paths[self.layout]

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate download base URL."""
        if not v:
            raise ValueError("Download base URL cannot be empty")
        return v.rstrip("/")

    @field_validator("layout")
    @classmethod
    def validate_layout(cls, v: str) -> str:
        """Validate download layout."""
        if v not in RELEASE_TABLE.base_paths:
            raise ValueError(f"Invalid layout: {v}. Valid layouts: {set(RELEASE_TABLE.base_paths)}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class SetupConfig(BaseModel):
    """Application configuration."""

    index: IndexConfig = Field(default_factory=IndexConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    cache_dir: Path = Field(
        default=Path.home() / ".cache" / "setup-elide" / "tool-cache",
        description="Tool cache root used when RUNNER_TOOL_CACHE is unset"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @classmethod
    def load(cls, config_file: Path | None = None) -> SetupConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "setup-elide" / "config.json"

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                logger.debug("config_loaded", path=str(config_file))
                return cls(**data)

        return cls()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
