"""Installation orchestrator.

A run either reuses an Elide binary that is already on the PATH
(short-circuit) or resolves, downloads and verifies a release (full
acquire). Every failure is caught once, in ``run``, and reported to the
workflow as a single failure.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from setup_elide.core import command
from setup_elide.core.cache import ToolCache
from setup_elide.core.config import RELEASE_TABLE, TOOL_NAME, SetupConfig
from setup_elide.core.download import Downloader
from setup_elide.core.environment import Environment
from setup_elide.core.errors import PlatformNotSupported, SetupError, VersionMismatch
from setup_elide.core.fetch import download_release
from setup_elide.core.options import LATEST, ActionOptions, OptionName, build_options
from setup_elide.core.releases import ReleaseIndexClient
from setup_elide.core.runtime import ActionsRuntime
from setup_elide.core.types import ActionOutputName, ActionOutputs, Release, VersionInfo

logger = structlog.get_logger()


def not_supported(options: ActionOptions) -> PlatformNotSupported | None:
    """Check the (os, arch) pair against published releases.

    Returns:
        An error to raise if the platform is unsupported, else None
    """
    if (options.os.value, options.arch.value) in RELEASE_TABLE.supported_platforms:
        return None
    logger.error("platform_not_supported", os=options.os.value, arch=options.arch.value)
    return PlatformNotSupported(options.os.value, options.arch.value)


def resolve_existing_binary(env: Environment) -> Path | None:
    """Find an Elide binary already on the search path."""
    found = env.which(TOOL_NAME)
    return Path(found) if found else None


def post_install(binary: Path, options: ActionOptions) -> None:
    """Run prewarm and self-test (when enabled), then print runtime info."""
    if options.prewarm:
        command.prewarm(binary)
    if options.selftest:
        command.selftest(binary)
    command.info(binary)


def short_circuit(existing: Path, options: ActionOptions) -> Release | None:
    """Reuse an existing Elide installation if it satisfies the request.

    Args:
        existing: Path to the binary found on the PATH
        options: Effective setup options

    Returns:
        A release describing the existing install, or None if it must be replaced
    """
    logger.debug("existing_binary_found", path=str(existing))
    post_install(existing, options)
    version = command.obtain_version(existing)

    if options.version != LATEST and options.version != version:
        logger.info("existing_binary_replaced", path=str(existing), version=version, requested=options.version)
        return None

    logger.info("existing_binary_preserved", path=str(existing), version=version)
    return Release(
        version=VersionInfo(tag_name=version),
        elide_home=existing.parent,
        elide_bin=existing.parent,
        elide_path=existing,
        reported_version=version,
    )


def full_acquire(
    options: ActionOptions,
    *,
    env: Environment,
    config: SetupConfig | None = None,
    runtime: ActionsRuntime | None = None,
    index_client: ReleaseIndexClient | None = None,
    cache: ToolCache | None = None,
    downloader: Downloader | None = None,
) -> Release:
    """Resolve, install and verify a release.

    Only a release that passes its post-install checks is published to
    the tool cache.

    Args:
        options: Effective setup options
        env: Host environment
        config: Application configuration
        runtime: Receives a warning annotation on version mismatch
        index_client: Release index client
        cache: Tool cache
        downloader: Archive downloader

    Returns:
        The installed release, carrying the version the binary reports
    """
    release = download_release(
        options,
        env=env,
        config=config,
        index_client=index_client,
        cache=cache,
        downloader=downloader,
    )
    logger.debug("release_acquired", tag=release.version.tag_name, path=str(release.elide_path))

    post_install(release.elide_path, options)
    version = command.obtain_version(release.elide_path)
    release.publish()

    if version != release.version.tag_name:
        mismatch = VersionMismatch(release.version.tag_name, version)
        logger.warning("version_mismatch", expected=mismatch.expected, actual=mismatch.actual)
        if runtime is not None:
            runtime.warning(str(mismatch))

    return release.model_copy(update={"reported_version": version})


def _effective_options(
    options: ActionOptions | Mapping[str, Any] | None,
    runtime: ActionsRuntime,
    env: Environment,
) -> ActionOptions:
    if isinstance(options, ActionOptions):
        return options
    if options is None:
        options = {name.value: runtime.get_input(name.value) for name in OptionName}
    return build_options(options, env)


def run(
    options: ActionOptions | Mapping[str, Any] | None = None,
    *,
    runtime: ActionsRuntime | None = None,
    env: Environment | None = None,
    config: SetupConfig | None = None,
    index_client: ReleaseIndexClient | None = None,
    cache: ToolCache | None = None,
    downloader: Downloader | None = None,
) -> int:
    """Install Elide and report its path and version.

    Args:
        options: Options or raw overrides; read from step inputs if None
        runtime: Workflow runtime adapter
        env: Host environment
        config: Application configuration
        index_client: Release index client
        cache: Tool cache
        downloader: Archive downloader

    Returns:
        Exit status: 0 on success, 1 on failure
    """
    runtime = runtime or ActionsRuntime()
    env = env or Environment.current()
    release: Release | None = None

    try:
        logger.info("installing_elide")
        effective = _effective_options(options, runtime, env)

        unsupported = not_supported(effective)
        if unsupported is not None:
            raise unsupported

        if not effective.force:
            existing = resolve_existing_binary(env)
            if existing is not None:
                release = short_circuit(existing, effective)

        acquired = release is None
        if release is None:
            release = full_acquire(
                effective,
                env=env,
                config=config,
                runtime=runtime,
                index_client=index_client,
                cache=cache,
                downloader=downloader,
            )

        outputs = ActionOutputs(
            path=str(release.elide_path),
            version=release.reported_version or release.version.tag_name,
        )
        runtime.set_output(ActionOutputName.PATH, outputs.path)
        runtime.set_output(ActionOutputName.VERSION, outputs.version)

        if acquired and effective.export_path:
            logger.info("path_exported", directory=str(release.elide_bin))
            runtime.add_path(str(release.elide_bin))

        logger.info("elide_installed", version=outputs.version, path=outputs.path)
        return 0

    except SetupError as e:
        logger.error("setup_failed", error=str(e), error_type=type(e).__name__)
        runtime.set_failed(str(e))
        return 1
    except Exception as e:
        logger.error("setup_failed_unexpectedly", error=str(e), exc_info=True)
        runtime.set_failed(str(e) or type(e).__name__)
        return 1
    finally:
        if release is not None:
            try:
                release.cleanup()
            except Exception as e:
                logger.warning("release_cleanup_failed", error=str(e))
