"""Core type definitions for setup_elide."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ElideOS(StrEnum):
    """Operating systems recognized by setup; not all are supported."""
    MACOS = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"


class ElideArch(StrEnum):
    """Architectures recognized by setup; not all are supported."""
    AMD64 = "amd64"
    ARM64 = "aarch64"


class ArchiveType(StrEnum):
    """Release archive formats."""
    GZIP = "gzip"
    ZIP = "zip"
    XZ = "xz"


class ActionOutputName(StrEnum):
    """Well-known output names."""
    PATH = "path"
    VERSION = "version"


class VersionInfo(BaseModel):
    """Version resolved for a release of Elide."""

    name: str | None = Field(default=None, description="Release display name")
    tag_name: str = Field(..., description="Canonical version tag")
    user_provided: bool = Field(
        default=False,
        description="Whether the tag was supplied by the caller rather than the index"
    )
    authenticated: bool = Field(
        default=False,
        description="Whether the index lookup was made with a token"
    )

    model_config = ConfigDict(frozen=True)


class ArchiveSpec(BaseModel):
    """Where to download a release from, and how it is packed."""

    url: str = Field(..., description="Download URL")
    archive_type: ArchiveType = Field(..., description="Archive format")
    custom: bool = Field(default=False, description="Whether the URL was caller-supplied")

    model_config = ConfigDict(frozen=True)


class Release(BaseModel):
    """An installed (or reused) Elide release."""

    version: VersionInfo
    elide_home: Path = Field(..., description="Install root")
    elide_bin: Path = Field(..., description="Directory holding the binary")
    elide_path: Path = Field(..., description="Full path to the binary")
    reported_version: str | None = Field(
        default=None,
        description="Version string reported by the binary itself"
    )
    deferred: Callable[[], None] | None = Field(
        default=None,
        description="Cleanup to run once the release has been reported",
        exclude=True,
    )
    publisher: Callable[[], object] | None = Field(
        default=None,
        description="Stores the release in the tool cache once it has been verified",
        exclude=True,
    )

    model_config = ConfigDict(frozen=True)

    def publish(self) -> None:
        """Publish the release to the tool cache, if it is cacheable."""
        if self.publisher is not None:
            self.publisher()

    def cleanup(self) -> None:
        """Run the deferred cleanup, if any."""
        if self.deferred is not None:
            self.deferred()


class ActionOutputs(BaseModel):
    """Values reported to the workflow once setup finishes."""

    path: str = Field(..., description="Path to the Elide binary")
    version: str = Field(..., description="Version of the Elide binary")
