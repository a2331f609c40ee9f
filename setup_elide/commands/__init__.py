"""CLI commands for setup-elide."""

from setup_elide.commands.install import install

__all__ = ["install"]
