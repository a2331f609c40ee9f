"""Release index client and version resolution."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from setup_elide import __version__
from setup_elide.core.config import IndexConfig
from setup_elide.core.errors import RemoteIndexError
from setup_elide.core.options import LATEST, ActionOptions
from setup_elide.core.types import VersionInfo

logger = structlog.get_logger()


class ReleaseIndexClient:
    """Client for the GitHub releases API of the Elide release repository."""

    def __init__(self, config: IndexConfig | None = None, token: str | None = None):
        """Initialize release index client.

        Args:
            config: Index configuration
            token: Optional bearer token, used to raise rate limits
        """
        self.config = config or IndexConfig()
        self.token = token
        self._client: httpx.Client | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Request headers for the GitHub API."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.config.api_version,
            "User-Agent": f"setup-elide/{__version__}",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.config.api_base,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=True,
                headers=self.headers,
            )
        return self._client

    def latest_release_path(self) -> str:
        """API path for the latest release."""
        return f"/repos/{self.config.owner}/{self.config.repo}/releases/latest"

    def fetch_latest(self) -> dict[str, Any]:
        """Fetch the latest release payload.

        Returns:
            Decoded release object

        Raises:
            RemoteIndexError: If the index is unreachable or the payload is unusable
        """
        path = self.latest_release_path()
        try:
            response = self.client.get(path)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("release_index_fetch_failed", path=path, error=str(e))
            raise RemoteIndexError(f"Failed to fetch the latest Elide release: {e}") from e
        except ValueError as e:
            logger.error("release_index_decode_failed", path=path, error=str(e))
            raise RemoteIndexError(f"Release index returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RemoteIndexError(
                f"Release index returned unexpected payload type: {type(data).__name__}"
            )
        return data

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> ReleaseIndexClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()


def resolve_latest_version(
    token: str | None = None,
    client: ReleaseIndexClient | None = None,
) -> VersionInfo:
    """Resolve the latest published Elide version.

    Args:
        token: Optional GitHub token, used when no client is given
        client: Index client to use; one is created (and closed) if None

    Returns:
        Version info discovered from the index

    Raises:
        RemoteIndexError: If the index is unreachable or has no releases
    """
    owned = client is None
    index = client if client is not None else ReleaseIndexClient(token=token)
    try:
        data = index.fetch_latest()
    finally:
        if owned:
            index.close()

    tag_name = data.get("tag_name")
    if not tag_name:
        raise RemoteIndexError("Release index returned no releases")

    version = VersionInfo(
        name=data.get("name") or None,
        tag_name=str(tag_name),
        user_provided=False,
        authenticated=bool(index.token),
    )
    logger.info("latest_version_resolved", tag=version.tag_name, name=version.name)
    return version


def resolve_version(
    options: ActionOptions,
    client: ReleaseIndexClient | None = None,
) -> VersionInfo:
    """Resolve concrete version info for the requested version.

    Pinned versions (and an explicit ``version_tag``) never touch the
    network; only ``latest`` queries the index. For custom URLs the
    ``version_tag`` describes the downloaded artifact, so it wins over a
    pinned version.

    Args:
        options: Effective setup options
        client: Index client used for ``latest``

    Returns:
        Version info for the release to install
    """
    if options.version_tag and (options.custom_url or options.version == LATEST):
        logger.debug("version_tag_used", tag=options.version_tag)
        return VersionInfo(tag_name=options.version_tag, user_provided=True)

    if options.version != LATEST:
        return VersionInfo(tag_name=options.version, user_provided=True)

    logger.debug("resolving_latest_version")
    return resolve_latest_version(options.token, client=client)
