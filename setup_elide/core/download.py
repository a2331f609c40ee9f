"""Release archive downloads."""

from __future__ import annotations

import tempfile
import uuid
from pathlib import Path

import httpx
import structlog

from setup_elide import __version__
from setup_elide.core.config import DownloadConfig
from setup_elide.core.environment import Environment
from setup_elide.core.errors import DownloadFailed

logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


class Downloader:
    """Streams release archives to a temporary directory.

    Downloads are attempted once; retrying is left to the enclosing
    workflow.
    """

    def __init__(self, temp_dir: Path, config: DownloadConfig | None = None):
        """Initialize downloader.

        Args:
            temp_dir: Directory that receives downloaded archives
            config: Download configuration
        """
        self.temp_dir = temp_dir
        self.config = config or DownloadConfig()
        self._client: httpx.Client | None = None

    @classmethod
    def for_environment(cls, env: Environment, config: DownloadConfig | None = None) -> Downloader:
        """Download into ``$RUNNER_TEMP``, or the system temp directory."""
        temp_dir = env.get("RUNNER_TEMP") or tempfile.gettempdir()
        return cls(Path(temp_dir), config)

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": f"setup-elide/{__version__}"},
            )
        return self._client

    def download(self, url: str) -> Path:
        """Download a URL to a uniquely named file.

        Args:
            url: URL to fetch

        Returns:
            Path to the downloaded file

        Raises:
            DownloadFailed: On any transport, HTTP status or filesystem error
        """
        destination = self.temp_dir / uuid.uuid4().hex
        logger.debug("download_started", url=url, path=str(destination))

        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        f.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            logger.error("download_failed", url=url, error=str(e))
            destination.unlink(missing_ok=True)
            raise DownloadFailed(url, str(e)) from e

        logger.info("download_complete", url=url, path=str(destination), size=destination.stat().st_size)
        return destination

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> Downloader:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
