"""Core functionality for setup_elide.

This module provides the release resolution and acquisition engine:
- Options and host environment
- Release index client
- Archive location, download, extraction and tool cache
- Installation orchestration
"""

from setup_elide.core.errors import SetupError
from setup_elide.core.types import (
    ActionOutputName,
    ActionOutputs,
    ArchiveSpec,
    ArchiveType,
    ElideArch,
    ElideOS,
    Release,
    VersionInfo,
)

__all__ = [
    # Types
    "ActionOutputName",
    "ActionOutputs",
    "ArchiveSpec",
    "ArchiveType",
    "ElideArch",
    "ElideOS",
    "Release",
    "VersionInfo",
    # Errors
    "SetupError",
]
