"""setup-elide - install the Elide runtime in automated workflows.

This package resolves, downloads, caches and installs platform-specific
Elide releases, then reports where the binary lives.

Key modules:
- core: Options, version resolution, download, cache and install logic
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "Elide Team"

from setup_elide.core.types import (
    ArchiveType,
    ElideArch,
    ElideOS,
    Release,
    VersionInfo,
)

__all__ = [
    "__version__",
    "__author__",
    "ArchiveType",
    "ElideArch",
    "ElideOS",
    "Release",
    "VersionInfo",
]
