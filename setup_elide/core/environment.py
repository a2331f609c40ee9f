"""Host environment snapshot.

Everything setup needs to know about the machine it runs on is read
through an ``Environment`` so defaults can be computed for a simulated
platform in tests.
"""

from __future__ import annotations

import os
import platform
import shutil
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Environment:
    """Snapshot of the platform, architecture, home directory and env vars."""

    platform: str
    machine: str
    home: Path
    env: Mapping[str, str] = field(default_factory=dict)
    which: Callable[[str], str | None] = shutil.which

    @classmethod
    def current(cls) -> Environment:
        """Capture the running process's environment."""
        return cls(
            platform=sys.platform,
            machine=platform.machine(),
            home=Path.home(),
            env=dict(os.environ),
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        """Look up an environment variable, treating empty values as unset."""
        value = self.env.get(name)
        return value if value else default

    def has_tool(self, name: str) -> bool:
        """Check whether an executable is available on the search path."""
        return self.which(name) is not None

    @property
    def is_windows(self) -> bool:
        """Whether the snapshot describes a Windows host."""
        return self.platform.lower().startswith("win")
