"""Tests for options.py module."""

import pytest

from setup_elide.core.errors import UnrecognizedPlatform
from setup_elide.core.options import (
    LATEST,
    WINDOWS_DEFAULT_TARGET,
    ActionOptions,
    OptionName,
    build_options,
    default_target,
    normalize_arch,
    normalize_os,
    parse_bool,
)
from setup_elide.core.types import ElideArch, ElideOS


class TestNormalizeOs:
    """Test OS normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("darwin", ElideOS.MACOS),
            ("macos", ElideOS.MACOS),
            ("mac", ElideOS.MACOS),
            ("MacOS", ElideOS.MACOS),
            ("linux", ElideOS.LINUX),
            ("windows", ElideOS.WINDOWS),
            ("win", ElideOS.WINDOWS),
            ("win32", ElideOS.WINDOWS),
        ],
    )
    def test_aliases(self, value, expected):
        """Test every documented alias maps to one canonical token."""
        assert normalize_os(value) == expected

    @pytest.mark.parametrize("canonical", list(ElideOS))
    def test_idempotent(self, canonical):
        """Test normalizing a canonical token returns it unchanged."""
        assert normalize_os(canonical.value) == canonical
        assert normalize_os(normalize_os(canonical.value)) == canonical

    @pytest.mark.parametrize("value", ["solaris", "freebsd", "", "darwin64"])
    def test_unmapped_fails(self, value):
        """Test unmapped OS tokens never silently default."""
        with pytest.raises(UnrecognizedPlatform) as exc_info:
            normalize_os(value)
        assert exc_info.value.kind == "os"
        assert exc_info.value.value == value


class TestNormalizeArch:
    """Test architecture normalization."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("amd64", ElideArch.AMD64),
            ("x64", ElideArch.AMD64),
            ("x86_64", ElideArch.AMD64),
            ("AMD64", ElideArch.AMD64),
            ("arm64", ElideArch.ARM64),
            ("aarch64", ElideArch.ARM64),
        ],
    )
    def test_aliases(self, value, expected):
        """Test every documented alias maps to one canonical token."""
        assert normalize_arch(value) == expected

    @pytest.mark.parametrize("canonical", list(ElideArch))
    def test_idempotent(self, canonical):
        """Test normalizing a canonical token returns it unchanged."""
        assert normalize_arch(canonical.value) == canonical

    @pytest.mark.parametrize("value", ["i386", "ppc64le", "armv7", ""])
    def test_unmapped_fails(self, value):
        """Test unmapped architecture tokens fail."""
        with pytest.raises(UnrecognizedPlatform, match="Unrecognized arch"):
            normalize_arch(value)


class TestParseBool:
    """Test workflow boolean parsing."""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE", "yes", "Yes", "YES", "y", "Y", "on", "On", "ON"])
    def test_truthy(self, value):
        """Test truthy tokens."""
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "False", "FALSE", "no", "No", "NO", "n", "N", "off", "Off", "OFF"])
    def test_falsy(self, value):
        """Test falsy tokens."""
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["", "maybe", "1", "enabled", None])
    def test_unknown_is_false(self, value):
        """Test anything else is false."""
        assert parse_bool(value) is False

    def test_bool_passthrough(self):
        """Test real booleans pass through."""
        assert parse_bool(True) is True
        assert parse_bool(False) is False


class TestDefaultTarget:
    """Test default install directory."""

    def test_posix_home_relative(self, make_env):
        """Test POSIX default is under the home directory."""
        env = make_env(platform="linux")
        assert default_target(env) == str(env.home / "elide")

    def test_windows_fixed_path(self, make_env):
        """Test Windows default is a fixed path."""
        env = make_env(platform="win32", machine="AMD64")
        assert default_target(env) == WINDOWS_DEFAULT_TARGET

    def test_elide_home_override(self, make_env):
        """Test ELIDE_HOME takes precedence."""
        env = make_env(env={"ELIDE_HOME": "/opt/elide"})
        assert default_target(env) == "/opt/elide"


class TestBuildOptions:
    """Test options merging."""

    def test_defaults(self, make_env):
        """Test sensible defaults are applied."""
        env = make_env(platform="linux", machine="x86_64")
        options = build_options(env=env)

        assert options.version == LATEST
        assert options.os == ElideOS.LINUX
        assert options.arch == ElideArch.AMD64
        assert options.target == str(env.home / "elide")
        assert options.cache is True
        assert options.export_path is True
        assert options.force is False
        assert options.prewarm is True
        assert options.selftest is False
        assert options.custom_url is None
        assert options.token is None

    def test_empty_overrides_equal_defaults(self, make_env):
        """Test empty and missing overrides give the same result."""
        env = make_env()
        assert build_options({}, env) == build_options(None, env)

    def test_ambient_platform_normalized(self, make_env):
        """Test raw platform strings never leak past the resolver."""
        env = make_env(platform="darwin", machine="arm64")
        options = build_options(env=env)

        assert options.os == ElideOS.MACOS
        assert options.arch == ElideArch.ARM64

    def test_override_os_and_arch(self, make_env):
        """Test overriding the OS and architecture with aliases."""
        options = build_options({"os": "macos", "arch": "arm64"}, make_env())

        assert options.os == ElideOS.MACOS
        assert options.arch == ElideArch.ARM64

    def test_unrecognized_override_fails(self, make_env):
        """Test an unmapped override raises instead of defaulting."""
        with pytest.raises(UnrecognizedPlatform):
            build_options({"os": "plan9"}, make_env())

    def test_empty_string_override_ignored(self, make_env):
        """Test empty string overrides fall back to defaults."""
        options = build_options({"version": "", "os": "", "target": ""}, make_env())

        assert options.version == LATEST
        assert options.os == ElideOS.LINUX

    def test_version_override(self, make_env):
        """Test overriding the version."""
        options = build_options({"version": "1.0.0-alpha9"}, make_env())
        assert options.version == "1.0.0-alpha9"

    def test_boolean_string_overrides(self, make_env):
        """Test boolean inputs given as workflow strings."""
        options = build_options(
            {"export_path": "false", "force": "yes", "cache": "off", "selftest": "On"},
            make_env(),
        )

        assert options.export_path is False
        assert options.force is True
        assert options.cache is False
        assert options.selftest is True

    def test_boolean_overrides(self, make_env):
        """Test boolean inputs given as booleans."""
        options = build_options({"export_path": False}, make_env())
        assert options.export_path is False

    def test_token_from_environment(self, make_env):
        """Test the token defaults to GITHUB_TOKEN."""
        env = make_env(env={"GITHUB_TOKEN": "ghs_example"})
        assert build_options(env=env).token == "ghs_example"

    def test_token_override_wins(self, make_env):
        """Test an explicit token wins over GITHUB_TOKEN."""
        env = make_env(env={"GITHUB_TOKEN": "ghs_example"})
        assert build_options({"token": "explicit"}, env).token == "explicit"

    def test_unknown_option_rejected(self, make_env):
        """Test unknown option names are rejected."""
        with pytest.raises(ValueError):
            build_options({"colour": "blue"}, make_env())

    def test_option_name_keys(self, make_env):
        """Test OptionName members work as keys."""
        options = build_options({OptionName.VERSION: "1.2.3"}, make_env())
        assert options.version == "1.2.3"


class TestActionOptions:
    """Test ActionOptions model."""

    def test_frozen(self, make_env):
        """Test options are immutable."""
        options = build_options(env=make_env())
        with pytest.raises(Exception):
            options.version = "other"  # type: ignore[misc]

    def test_direct_construction_normalizes(self):
        """Test constructing the model directly normalizes aliases."""
        options = ActionOptions(os="mac", arch="x64", target="/tmp/elide")

        assert options.os == ElideOS.MACOS
        assert options.arch == ElideArch.AMD64

    def test_version_needs_index(self):
        """Test only latest without a version tag needs the index."""
        base = {"os": "linux", "arch": "amd64", "target": "/tmp/elide"}

        assert ActionOptions(**base).version_needs_index is True
        assert ActionOptions(**base, version_tag="1.0.0").version_needs_index is False
        assert ActionOptions(**base, version="1.0.0").version_needs_index is False
