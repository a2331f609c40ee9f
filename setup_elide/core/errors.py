"""Error taxonomy for Elide setup.

All failures raised by the engine derive from ``SetupError`` so the
orchestrator can catch them at a single boundary. Two of them,
``ExtractionDegraded`` and ``VersionMismatch``, describe non-fatal
conditions: they are constructed and logged, never raised out of the
engine.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base class for every Elide setup failure."""


class UnrecognizedPlatform(SetupError):
    """Raised when an OS or architecture token has no canonical mapping.

    Attributes:
        kind: Either ``"os"`` or ``"arch"``
        value: The token that failed to normalize
    """

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unrecognized {kind}: '{value}'")


class PlatformNotSupported(SetupError):
    """Raised when the (os, arch) pair has no published Elide release."""

    def __init__(self, os: str, arch: str):
        self.os = os
        self.arch = arch
        super().__init__(f"Platform not supported: {os}-{arch}")


class RemoteIndexError(SetupError):
    """Raised when the release index cannot produce a latest release."""


class InvalidUrl(SetupError):
    """Raised when a custom download URL cannot be used."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid download URL '{url}': {reason}")


class DownloadFailed(SetupError):
    """Raised when a release archive cannot be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download Elide release from {url}: {reason}")


class XzToolMissing(SetupError):
    """Raised when an xz archive must be unpacked but ``xz`` is not installed."""

    def __init__(self) -> None:
        super().__init__("The 'xz' tool is required to extract this release but was not found")


class XzExtractionFailed(SetupError):
    """Raised when ``xz`` exits non-zero while decompressing a release.

    Attributes:
        returncode: Exit status reported by ``xz``
        stderr: Captured standard error, if any
    """

    def __init__(self, returncode: int, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"xz decompression failed with exit code {returncode}{detail}")


class ExtractionDegraded(SetupError):
    """Describes an extraction that failed part-way; the run continues."""

    def __init__(self, archive: str, home: str, reason: str):
        self.archive = archive
        self.home = home
        self.reason = reason
        super().__init__(
            f"Failed to extract Elide release '{archive}' into '{home}': {reason}"
        )


class VersionMismatch(SetupError):
    """Describes an installed binary that reports an unexpected version."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Elide version mismatch: expected '{expected}', but got '{actual}'"
        )


class PostInstallCheckFailed(SetupError):
    """Raised when prewarm, self-test, info or version execution fails."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(f"Elide post-install step '{step}' failed: {reason}")


class BinaryMissingOnExec(SetupError):
    """Raised when the Elide binary does not exist at execution time."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Elide binary not found at: {path}")
