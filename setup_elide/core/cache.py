"""Tool cache for extracted Elide releases."""

from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path

import structlog

from setup_elide.core.environment import Environment

logger = structlog.get_logger()


class ToolCache:
    """On-disk cache of extracted tool releases.

    Cache layout (compatible with the GitHub Actions tool cache):
    {root}/
    └── {tool}/
        └── {version}/
            ├── {arch}/            # Extracted release
            └── {arch}.complete    # Marker written once the entry is published

    Entries are staged in a hidden sibling directory and renamed into
    place, so a reader never observes a partially written entry.
    """

    def __init__(self, root: Path):
        """Initialize tool cache.

        Args:
            root: Cache root directory
        """
        self.root = root

    @classmethod
    def for_environment(cls, env: Environment, default_root: Path) -> ToolCache:
        """Use the runner's tool cache if it has one, else ``default_root``."""
        runner_cache = env.get("RUNNER_TOOL_CACHE")
        return cls(Path(runner_cache) if runner_cache else default_root)

    def _entry_path(self, tool: str, version: str, arch: str) -> Path:
        """Get the directory for a cache entry.

        Raises:
            ValueError: If any key component is empty
        """
        if not tool or not version or not arch:
            raise ValueError("Tool, version and arch are required for cache lookups")
        return self.root / tool / version / arch

    def _marker_path(self, tool: str, version: str, arch: str) -> Path:
        return self.root / tool / version / f"{arch}.complete"

    def find(self, tool: str, version: str, arch: str) -> Path | None:
        """Look up a cached release.

        Args:
            tool: Tool name
            version: Release tag
            arch: Architecture

        Returns:
            Cached directory, or None on a miss
        """
        try:
            entry = self._entry_path(tool, version, arch)
            if entry.is_dir() and self._marker_path(tool, version, arch).exists():
                logger.debug("tool_cache_hit", tool=tool, version=version, arch=arch, path=str(entry))
                return entry
        except (OSError, ValueError) as e:
            logger.debug("tool_cache_lookup_failed", tool=tool, version=version, error=str(e))
            return None

        logger.debug("tool_cache_miss", tool=tool, version=version, arch=arch)
        return None

    def versions(self, tool: str, arch: str) -> list[str]:
        """List cached versions of a tool for an architecture."""
        tool_dir = self.root / tool
        if not tool_dir.is_dir():
            return []
        return sorted(
            version_dir.name
            for version_dir in tool_dir.iterdir()
            if version_dir.is_dir() and (version_dir / f"{arch}.complete").exists()
        )

    def publish(self, source: Path, tool: str, version: str, arch: str) -> Path | None:
        """Copy an extracted release into the cache.

        Args:
            source: Directory holding the extracted release
            tool: Tool name
            version: Release tag
            arch: Architecture

        Returns:
            Cached directory, or None if publishing failed
        """
        entry = self._entry_path(tool, version, arch)
        marker = self._marker_path(tool, version, arch)
        staging = entry.parent / f".{arch}.{uuid.uuid4().hex}.tmp"

        try:
            entry.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, staging, symlinks=True)
            try:
                os.rename(staging, entry)
            except OSError:
                if not entry.is_dir():
                    raise
                # Another process published this entry first
                logger.debug("tool_cache_publish_raced", tool=tool, version=version, arch=arch)
                shutil.rmtree(staging, ignore_errors=True)
            marker.touch()
        except OSError as e:
            logger.warning("tool_cache_publish_failed", tool=tool, version=version, error=str(e))
            shutil.rmtree(staging, ignore_errors=True)
            return None

        logger.info("tool_cache_published", tool=tool, version=version, arch=arch, path=str(entry))
        return entry
