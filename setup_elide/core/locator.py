"""Download URL and archive format selection."""

from __future__ import annotations

import httpx
import structlog

from setup_elide.core.config import RELEASE_TABLE, TOOL_NAME, DownloadConfig
from setup_elide.core.errors import InvalidUrl
from setup_elide.core.options import ActionOptions
from setup_elide.core.types import ArchiveSpec, ArchiveType, ElideArch, ElideOS, VersionInfo

logger = structlog.get_logger()


def select_archive_type(os: ElideOS, xz_available: bool) -> ArchiveType:
    """Pick the archive format to download for a platform.

    Windows releases are always zipped. Elsewhere the xz tarball is
    smaller, so it is preferred whenever ``xz`` can unpack it.
    """
    if os == ElideOS.WINDOWS:
        return ArchiveType.ZIP
    if xz_available:
        return ArchiveType.XZ
    return ArchiveType.GZIP


def sniff_archive_type(url: str) -> ArchiveType:
    """Guess the format of a custom download from its filename."""
    path = httpx.URL(url).path
    if path.lower().endswith(".zip"):
        return ArchiveType.ZIP
    return ArchiveType.GZIP


def build_download_url(
    os: ElideOS,
    arch: ElideArch,
    tag: str,
    archive_type: ArchiveType,
    config: DownloadConfig | None = None,
) -> str:
    """Build the canonical download URL for a release.

    Format: ``{base}/{prefix}/{os}-{arch}/{tag}/elide.{ext}``

    Args:
        os: Target OS
        arch: Target architecture
        tag: Release tag
        archive_type: Archive format to fetch
        config: Download configuration

    Returns:
        Complete URL for the release archive
    """
    config = config or DownloadConfig()
    ext = RELEASE_TABLE.archive_extension_by_type[archive_type]
    return f"{config.base_url}/{config.path_prefix}/{os.value}-{arch.value}/{tag}/{TOOL_NAME}.{ext}"


def validate_custom_url(url: str) -> httpx.URL:
    """Parse a caller-supplied download URL.

    Raises:
        InvalidUrl: If the URL cannot be parsed, is not http(s), or has no host
    """
    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL as e:
        raise InvalidUrl(url, str(e)) from e

    if parsed.scheme not in ("http", "https"):
        raise InvalidUrl(url, f"unsupported scheme '{parsed.scheme}'")
    if not parsed.host:
        raise InvalidUrl(url, "missing host")
    return parsed


def locate(
    options: ActionOptions,
    version: VersionInfo,
    xz_available: bool = False,
    config: DownloadConfig | None = None,
) -> ArchiveSpec:
    """Decide where to download a release from and how it is packed.

    Args:
        options: Effective setup options
        version: Resolved version
        xz_available: Whether the host can run ``xz``
        config: Download configuration

    Returns:
        Download URL and archive type

    Raises:
        InvalidUrl: If a custom URL is malformed
    """
    if options.custom_url:
        logger.debug("custom_url_used", url=options.custom_url)
        try:
            validate_custom_url(options.custom_url)
        except InvalidUrl as e:
            logger.error("custom_url_invalid", url=options.custom_url, reason=e.reason)
            raise
        return ArchiveSpec(
            url=options.custom_url,
            archive_type=sniff_archive_type(options.custom_url),
            custom=True,
        )

    archive_type = select_archive_type(options.os, xz_available)
    url = build_download_url(options.os, options.arch, version.tag_name, archive_type, config)
    return ArchiveSpec(url=url, archive_type=archive_type)
