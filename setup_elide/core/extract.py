"""Archive extraction for Elide releases.

Release tarballs are rooted in a single top-level directory, which is
stripped on extraction. A couple of early releases were packed without
that root; ``strip_components_for`` knows which.
"""

from __future__ import annotations

import copy
import os
import subprocess
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

import structlog

from setup_elide.core.config import RELEASE_TABLE
from setup_elide.core.errors import XzExtractionFailed, XzToolMissing

logger = structlog.get_logger()


def strip_components_for(tag: str) -> int:
    """Number of leading path components to strip for a release tag."""
    if tag in RELEASE_TABLE.legacy_tags_without_directory_root:
        return 0
    return 1


def _strip(name: str, count: int) -> str:
    parts = PurePosixPath(name).parts[count:]
    return str(PurePosixPath(*parts)) if parts else ""


def extract_zip(archive: Path, dest: Path) -> Path:
    """Extract a zip archive, restoring POSIX permission bits.

    Args:
        archive: Zip file
        dest: Destination directory

    Returns:
        The destination directory
    """
    dest.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            extracted = Path(zf.extract(info, dest))
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                os.chmod(extracted, mode)

    logger.debug("zip_extracted", archive=str(archive), dest=str(dest))
    return dest


def extract_tar(
    archive: Path,
    dest: Path,
    strip_components: int = 1,
    mode: str = "r:gz",
) -> Path:
    """Extract a tarball, dropping leading path components.

    Args:
        archive: Tar file
        dest: Destination directory
        strip_components: Leading components removed from member names
        mode: ``tarfile.open`` mode

    Returns:
        The destination directory
    """
    dest.mkdir(parents=True, exist_ok=True)
    extracted = 0
    with tarfile.open(archive, mode) as tar:
        for member in tar.getmembers():
            name = _strip(member.name, strip_components)
            if not name:
                continue
            member = copy.copy(member)
            member.name = name
            if member.islnk():
                member.linkname = _strip(member.linkname, strip_components)
            tar.extract(member, path=dest, filter="data")
            extracted += 1

    logger.debug(
        "tar_extracted",
        archive=str(archive),
        dest=str(dest),
        members=extracted,
        strip=strip_components,
    )
    return dest


def decompress_xz(archive: Path, xz_path: str | None) -> Path:
    """Decompress an xz file next to itself with the external ``xz`` tool.

    Args:
        archive: Compressed file
        xz_path: Path to the ``xz`` executable, None if unavailable

    Returns:
        Path to the decompressed tar file

    Raises:
        XzToolMissing: If ``xz`` is unavailable
        XzExtractionFailed: If ``xz`` exits non-zero
    """
    if not xz_path:
        raise XzToolMissing()

    output = archive.with_name(f"{archive.name}.tar")
    with open(output, "wb") as out:
        try:
            result = subprocess.run(
                [xz_path, "--decompress", "--stdout", str(archive)],
                stdout=out,
                stderr=subprocess.PIPE,
                check=False,
            )
        except FileNotFoundError as e:
            raise XzToolMissing() from e

    if result.returncode != 0:
        output.unlink(missing_ok=True)
        stderr = result.stderr.decode(errors="replace") if result.stderr else ""
        logger.error("xz_failed", archive=str(archive), returncode=result.returncode, stderr=stderr)
        raise XzExtractionFailed(result.returncode, stderr)

    logger.debug("xz_decompressed", archive=str(archive), output=str(output))
    return output


def extract_xz_tar(archive: Path, dest: Path, xz_path: str | None) -> Path:
    """Extract an xz-compressed tarball.

    The archive is decompressed with ``xz`` first, then untarred with one
    leading component stripped. The intermediate tar is removed afterwards.

    Args:
        archive: Compressed tarball
        dest: Destination directory
        xz_path: Path to the ``xz`` executable, None if unavailable

    Returns:
        The destination directory
    """
    tar_path = decompress_xz(archive, xz_path)
    try:
        return extract_tar(tar_path, dest, strip_components=1, mode="r:")
    finally:
        try:
            tar_path.unlink()
        except OSError as e:
            logger.warning("intermediate_tar_cleanup_failed", path=str(tar_path), error=str(e))
