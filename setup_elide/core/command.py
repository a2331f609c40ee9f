"""Commands run against an installed Elide binary."""

from __future__ import annotations

import subprocess
from enum import StrEnum
from pathlib import Path

import structlog

from setup_elide.core.errors import BinaryMissingOnExec, PostInstallCheckFailed

logger = structlog.get_logger()

PREWARM_SCRIPT = "console.log('Elide ready.')"


class ElideCommand(StrEnum):
    """Elide subcommands used during setup."""
    RUN = "run"
    INFO = "info"
    SELFTEST = "selftest"


class ElideArgument(StrEnum):
    """Well-known Elide arguments."""
    VERSION = "--version"


def _exec(binary: Path, args: list[str], step: str, capture: bool = False) -> str:
    """Run the Elide binary.

    Args:
        binary: Path to the Elide binary
        args: Arguments to pass
        step: Step name for errors and logs
        capture: Capture stdout instead of streaming it

    Returns:
        Captured stdout, or an empty string

    Raises:
        BinaryMissingOnExec: If the binary does not exist
        PostInstallCheckFailed: If the binary cannot run or exits non-zero
    """
    if not binary.exists():
        raise BinaryMissingOnExec(str(binary))

    logger.debug("elide_exec", binary=str(binary), args=args)
    try:
        result = subprocess.run(
            [str(binary), *args],
            check=True,
            capture_output=capture,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        raise PostInstallCheckFailed(step, f"exit code {e.returncode}") from e
    except OSError as e:
        raise PostInstallCheckFailed(step, str(e)) from e

    return result.stdout or ""


def clean_version_output(raw: str) -> str:
    """Normalize ``elide --version`` output.

    Elide encodes newlines in its version string as ``%0A``; those are
    dropped along with surrounding whitespace.
    """
    return raw.replace("%0A", "").strip()


def prewarm(binary: Path) -> None:
    """Prewarm the Elide binary by running a small script."""
    logger.info("elide_prewarm", binary=str(binary))
    _exec(binary, [ElideCommand.RUN.value, "-c", PREWARM_SCRIPT], "prewarm")


def info(binary: Path) -> None:
    """Print runtime info for the Elide binary."""
    logger.debug("elide_info", binary=str(binary))
    _exec(binary, [ElideCommand.INFO.value], "info")


def selftest(binary: Path) -> None:
    """Run Elide's embedded self-test suite."""
    logger.info("elide_selftest", binary=str(binary))
    _exec(binary, [ElideCommand.SELFTEST.value], "selftest")


def obtain_version(binary: Path) -> str:
    """Ask the Elide binary for its version.

    Returns:
        Cleaned version string
    """
    logger.debug("elide_obtain_version", binary=str(binary))
    raw = _exec(binary, [ElideArgument.VERSION.value], "version", capture=True)
    return clean_version_output(raw)
