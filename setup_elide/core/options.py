"""Setup options: defaults, normalization and merging."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from pathlib import PureWindowsPath
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from setup_elide.core.environment import Environment
from setup_elide.core.errors import UnrecognizedPlatform
from setup_elide.core.types import ElideArch, ElideOS

logger = structlog.get_logger()

LATEST = "latest"

WINDOWS_DEFAULT_TARGET = str(PureWindowsPath("C:/Elide"))

_OS_ALIASES: dict[str, ElideOS] = {
    "darwin": ElideOS.MACOS,
    "macos": ElideOS.MACOS,
    "mac": ElideOS.MACOS,
    "osx": ElideOS.MACOS,
    "linux": ElideOS.LINUX,
    "windows": ElideOS.WINDOWS,
    "win": ElideOS.WINDOWS,
    "win32": ElideOS.WINDOWS,
}

_ARCH_ALIASES: dict[str, ElideArch] = {
    "amd64": ElideArch.AMD64,
    "x64": ElideArch.AMD64,
    "x86_64": ElideArch.AMD64,
    "aarch64": ElideArch.ARM64,
    "arm64": ElideArch.ARM64,
}

_TRUE_TOKENS = frozenset({"true", "yes", "y", "on"})
_FALSE_TOKENS = frozenset({"false", "no", "n", "off"})


class OptionName(StrEnum):
    """Input names, as they appear in the workflow configuration."""
    VERSION = "version"
    OS = "os"
    ARCH = "arch"
    TARGET = "target"
    CACHE = "cache"
    FORCE = "force"
    EXPORT_PATH = "export_path"
    PREWARM = "prewarm"
    SELFTEST = "selftest"
    CUSTOM_URL = "custom_url"
    VERSION_TAG = "version_tag"
    TOKEN = "token"


BOOLEAN_OPTIONS = frozenset({
    OptionName.CACHE,
    OptionName.FORCE,
    OptionName.EXPORT_PATH,
    OptionName.PREWARM,
    OptionName.SELFTEST,
})


def normalize_os(value: str) -> ElideOS:
    """Map an OS token or alias to its canonical form.

    Args:
        value: OS name such as ``macos``, ``win32`` or ``linux``

    Returns:
        Canonical OS

    Raises:
        UnrecognizedPlatform: If the token has no mapping
    """
    try:
        return _OS_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise UnrecognizedPlatform("os", str(value)) from None


def normalize_arch(value: str) -> ElideArch:
    """Map an architecture token or alias to its canonical form.

    Args:
        value: Architecture name such as ``x64``, ``x86_64`` or ``arm64``

    Returns:
        Canonical architecture

    Raises:
        UnrecognizedPlatform: If the token has no mapping
    """
    try:
        return _ARCH_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise UnrecognizedPlatform("arch", str(value)) from None


def parse_bool(value: str | bool | None) -> bool:
    """Interpret a workflow boolean input; unknown tokens are ``False``."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    token = value.strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return False


def default_target(env: Environment) -> str:
    """Default install directory for the given environment."""
    override = env.get("ELIDE_HOME")
    if override:
        return override
    if env.is_windows:
        return WINDOWS_DEFAULT_TARGET
    return str(env.home / "elide")


class ActionOptions(BaseModel):
    """Effective setup options, after defaults are applied."""

    version: str = Field(default=LATEST, description="Desired version, or 'latest'")
    os: ElideOS = Field(..., description="OS of the binary to install")
    arch: ElideArch = Field(..., description="Architecture of the binary to install")
    target: str = Field(..., description="Install directory")
    cache: bool = Field(default=True, description="Use the tool cache")
    force: bool = Field(default=False, description="Install even if Elide is already present")
    export_path: bool = Field(default=True, description="Add Elide to the PATH")
    prewarm: bool = Field(default=True, description="Run a trivial script after install")
    selftest: bool = Field(default=False, description="Run Elide's self-test after install")
    custom_url: str | None = Field(default=None, description="Download URL override")
    version_tag: str | None = Field(default=None, description="Tag to assume for custom URLs")
    token: str | None = Field(default=None, description="GitHub token for the release index")

    model_config = ConfigDict(frozen=True)

    @property
    def version_needs_index(self) -> bool:
        """Whether resolving the version requires a release index lookup."""
        return self.version == LATEST and not self.version_tag

    @field_validator("os", mode="before")
    @classmethod
    def validate_os(cls, v: Any) -> ElideOS:
        """Normalize OS aliases."""
        return normalize_os(v)

    @field_validator("arch", mode="before")
    @classmethod
    def validate_arch(cls, v: Any) -> ElideArch:
        """Normalize architecture aliases."""
        return normalize_arch(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version value."""
        if not v.strip():
            raise ValueError("Version cannot be empty")
        return v.strip()


def _defaults(env: Environment) -> dict[str, Any]:
    return {
        OptionName.VERSION: LATEST,
        OptionName.OS: env.platform,
        OptionName.ARCH: env.machine,
        OptionName.TARGET: default_target(env),
        OptionName.CACHE: True,
        OptionName.FORCE: False,
        OptionName.EXPORT_PATH: True,
        OptionName.PREWARM: True,
        OptionName.SELFTEST: False,
        OptionName.CUSTOM_URL: None,
        OptionName.VERSION_TAG: None,
        OptionName.TOKEN: env.get("GITHUB_TOKEN"),
    }


def build_options(
    overrides: Mapping[str, Any] | None = None,
    env: Environment | None = None,
) -> ActionOptions:
    """Build effective options from defaults and user overrides.

    An override replaces the default only when it is present and
    non-empty. Boolean overrides given as strings are parsed with
    ``parse_bool``.

    Args:
        overrides: Option values provided by the user
        env: Host environment, captured from the process if None

    Returns:
        Merged, normalized options

    Raises:
        UnrecognizedPlatform: If the OS or architecture cannot be normalized
    """
    env = env or Environment.current()
    merged = _defaults(env)

    for key, value in (overrides or {}).items():
        name = OptionName(key)
        if value is None or value == "":
            continue
        if name in BOOLEAN_OPTIONS and isinstance(value, str):
            value = parse_bool(value)
        merged[name] = value

    # Normalize eagerly so platform errors surface as-is
    merged[OptionName.OS] = normalize_os(merged[OptionName.OS])
    merged[OptionName.ARCH] = normalize_arch(merged[OptionName.ARCH])

    options = ActionOptions(**{str(k): v for k, v in merged.items()})
    logger.debug(
        "options_resolved",
        version=options.version,
        os=options.os.value,
        arch=options.arch.value,
        target=options.target,
        force=options.force,
        cache=options.cache,
    )
    return options
