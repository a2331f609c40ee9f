"""Pytest configuration and shared fixtures for setup_elide tests."""

import io
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from setup_elide.core.config import SetupConfig
from setup_elide.core.environment import Environment
from setup_elide.core.options import ActionOptions, build_options
from setup_elide.core.runtime import ActionsRuntime


def _no_tools(name: str) -> str | None:
    return None


@pytest.fixture
def linux_env(tmp_path: Path) -> Environment:
    """Linux/amd64 environment with no tools on the PATH."""
    home = tmp_path / "home"
    home.mkdir()
    return Environment(
        platform="linux",
        machine="x86_64",
        home=home,
        env={
            "RUNNER_TOOL_CACHE": str(tmp_path / "tool-cache"),
            "RUNNER_TEMP": str(tmp_path / "runner-temp"),
        },
        which=_no_tools,
    )


@pytest.fixture
def make_env(tmp_path: Path) -> Callable[..., Environment]:
    """Factory for simulated environments."""

    def factory(
        platform: str = "linux",
        machine: str = "x86_64",
        env: dict[str, str] | None = None,
        tools: dict[str, str] | None = None,
    ) -> Environment:
        found = tools or {}
        return Environment(
            platform=platform,
            machine=machine,
            home=tmp_path / "home",
            env=env or {},
            which=found.get,
        )

    return factory


@pytest.fixture
def options(linux_env: Environment, tmp_path: Path) -> ActionOptions:
    """Pinned-version options installing into a temporary target."""
    return build_options(
        {"version": "1.0.0-alpha9", "target": str(tmp_path / "target"), "prewarm": False},
        linux_env,
    )


@pytest.fixture
def setup_config(tmp_path: Path) -> SetupConfig:
    """Configuration with a temporary cache root."""
    return SetupConfig(cache_dir=tmp_path / "default-cache")


@pytest.fixture
def runtime(tmp_path: Path) -> ActionsRuntime:
    """Runtime adapter writing to temporary workflow command files."""
    output_file = tmp_path / "github_output"
    path_file = tmp_path / "github_path"
    output_file.touch()
    path_file.touch()
    environ = {
        "GITHUB_OUTPUT": str(output_file),
        "GITHUB_PATH": str(path_file),
        "PATH": "/usr/bin",
    }
    return ActionsRuntime(environ=environ, stream=io.StringIO())


def _add_file(tar: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    tar.addfile(info, io.BytesIO(data))


@pytest.fixture
def make_tarball(tmp_path: Path) -> Callable[..., Path]:
    """Build a gzip tarball of an Elide release.

    With ``root`` set, members live under a single top-level directory,
    like current releases.
    """

    def factory(name: str = "release.tgz", root: str | None = "elide-1.0.0", mode: str = "w:gz") -> Path:
        path = tmp_path / name
        prefix = f"{root}/" if root else ""
        with tarfile.open(path, mode) as tar:
            if root:
                info = tarfile.TarInfo(root)
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            _add_file(tar, f"{prefix}elide", b"#!/bin/sh\necho elide\n", 0o755)
            _add_file(tar, f"{prefix}resources/LICENSE", b"MIT\n")
        return path

    return factory


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Build a zip archive of an Elide release."""

    def factory(name: str = "release.zip") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            info = zipfile.ZipInfo("elide")
            info.external_attr = (0o755 & 0xFFFF) << 16
            zf.writestr(info, b"#!/bin/sh\necho elide\n")
            zf.writestr("resources/LICENSE", b"MIT\n")
        return path

    return factory


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    """Add the unit marker to every test not marked otherwise."""
    for item in items:
        if not any(marker.name == "integration" for marker in item.iter_markers()):
            item.add_marker(pytest.mark.unit)
