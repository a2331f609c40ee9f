"""Download-or-reuse engine for Elide releases."""

from __future__ import annotations

from functools import partial
from pathlib import Path

import structlog

from setup_elide.core.cache import ToolCache
from setup_elide.core.config import TOOL_NAME, SetupConfig
from setup_elide.core.download import Downloader
from setup_elide.core.environment import Environment
from setup_elide.core.errors import ExtractionDegraded, XzExtractionFailed, XzToolMissing
from setup_elide.core.extract import extract_tar, extract_xz_tar, extract_zip, strip_components_for
from setup_elide.core.locator import locate
from setup_elide.core.options import ActionOptions
from setup_elide.core.releases import ReleaseIndexClient, resolve_version
from setup_elide.core.types import ArchiveType, ElideOS, Release, VersionInfo

logger = structlog.get_logger()


def binary_name(os: ElideOS) -> str:
    """File name of the Elide executable on an OS."""
    return f"{TOOL_NAME}.exe" if os == ElideOS.WINDOWS else TOOL_NAME


def _remove_archive(archive: Path) -> None:
    try:
        archive.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("archive_cleanup_failed", path=str(archive), error=str(e))


def extract_release(
    archive_type: ArchiveType,
    archive: Path,
    home: Path,
    tag: str,
    xz_path: str | None = None,
) -> Path:
    """Unpack a downloaded release into its home directory.

    Raises:
        XzToolMissing: If an xz release is extracted without ``xz``
        XzExtractionFailed: If ``xz`` fails
    """
    if archive_type == ArchiveType.ZIP:
        logger.debug("extracting_zip", home=str(home))
        return extract_zip(archive, home)
    if archive_type == ArchiveType.XZ:
        logger.debug("extracting_txz", home=str(home))
        return extract_xz_tar(archive, home, xz_path)

    strip = strip_components_for(tag)
    logger.debug("extracting_tgz", home=str(home), strip=strip)
    return extract_tar(archive, home, strip_components=strip)


def fetch_or_use(
    version: VersionInfo,
    options: ActionOptions,
    *,
    env: Environment,
    config: SetupConfig | None = None,
    cache: ToolCache | None = None,
    downloader: Downloader | None = None,
) -> Release:
    """Reuse a cached release, or download and extract it.

    Args:
        version: Resolved version
        options: Effective setup options
        env: Host environment
        config: Application configuration
        cache: Tool cache; derived from the environment if None
        downloader: Archive downloader; derived from the environment if None

    Returns:
        The installed release. Fresh downloads are not cached yet; call
        ``Release.publish`` once the binary has been verified.

    Raises:
        InvalidUrl: If a custom URL is malformed
        DownloadFailed: If the archive cannot be downloaded
        XzToolMissing: If an xz release is extracted without ``xz``
        XzExtractionFailed: If ``xz`` fails
    """
    config = config or SetupConfig()
    cache = cache or ToolCache.for_environment(env, config.cache_dir)
    xz_path = env.which("xz")
    spec = locate(options, version, xz_available=xz_path is not None, config=config.download)
    name = binary_name(options.os)
    use_cache = options.cache and not spec.custom

    logger.info("installing_release", url=spec.url, type=spec.archive_type.value, tag=version.tag_name)

    cached = cache.find(TOOL_NAME, version.tag_name, options.arch.value) if use_cache else None
    if cached is not None:
        logger.debug("cached_release_used", path=str(cached))
        return Release(
            version=version,
            elide_home=cached,
            elide_bin=cached,
            elide_path=cached / name,
        )

    if not options.cache:
        logger.debug("cache_disabled_fetching_release")
    elif spec.custom:
        logger.debug("custom_url_bypasses_cache")
    else:
        logger.debug("cache_miss_fetching_release")

    home = Path(options.target)
    owned = downloader is None
    downloader = downloader or Downloader.for_environment(env, config.download)
    try:
        archive = downloader.download(spec.url)
    finally:
        if owned:
            downloader.close()

    degraded = False
    try:
        extract_release(spec.archive_type, archive, home, version.tag_name, xz_path)
    except (XzToolMissing, XzExtractionFailed):
        _remove_archive(archive)
        raise
    except Exception as e:
        # Truncated archives surface as EOFError or zlib errors, not TarError
        degraded = True
        logger.warning(
            "extraction_degraded",
            message=str(ExtractionDegraded(str(archive), str(home), str(e))),
            error_type=type(e).__name__,
        )

    publisher = None
    if use_cache and not degraded:
        publisher = partial(cache.publish, home, TOOL_NAME, version.tag_name, options.arch.value)

    return Release(
        version=version,
        elide_home=home,
        elide_bin=home,
        elide_path=home / name,
        deferred=partial(_remove_archive, archive),
        publisher=publisher,
    )


def download_release(
    options: ActionOptions,
    *,
    env: Environment,
    config: SetupConfig | None = None,
    index_client: ReleaseIndexClient | None = None,
    cache: ToolCache | None = None,
    downloader: Downloader | None = None,
) -> Release:
    """Resolve the requested version and install it.

    Args:
        options: Effective setup options
        env: Host environment
        config: Application configuration
        index_client: Release index client used for ``latest``
        cache: Tool cache
        downloader: Archive downloader

    Returns:
        The installed release
    """
    config = config or SetupConfig()
    if index_client is None and options.version_needs_index:
        with ReleaseIndexClient(config.index, token=options.token) as client:
            version = resolve_version(options, client)
    else:
        version = resolve_version(options, index_client)

    logger.debug("release_version", tag=version.tag_name, user_provided=version.user_provided)
    return fetch_or_use(
        version,
        options,
        env=env,
        config=config,
        cache=cache,
        downloader=downloader,
    )
