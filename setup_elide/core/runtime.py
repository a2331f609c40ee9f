"""GitHub Actions runtime adapter.

Reads step inputs, writes step outputs, extends the PATH for later steps
and reports failures using the workflow command files and annotations.
"""

from __future__ import annotations

import os
import sys
import uuid
from collections.abc import MutableMapping
from pathlib import Path
from typing import TextIO

import structlog

logger = structlog.get_logger()


class ActionsRuntime:
    """Input/output sink for a workflow step."""

    def __init__(
        self,
        environ: MutableMapping[str, str] | None = None,
        stream: TextIO | None = None,
    ):
        """Initialize runtime adapter.

        Args:
            environ: Process environment to read and mutate, ``os.environ`` if None
            stream: Where workflow commands are written, stdout if None
        """
        self.environ = environ if environ is not None else os.environ
        self.stream = stream or sys.stdout
        self.outputs: dict[str, str] = {}
        self.added_paths: list[str] = []
        self.failure: str | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status implied by the recorded failure."""
        return 1 if self.failure is not None else 0

    def get_input(self, name: str) -> str:
        """Read a step input; missing inputs are empty strings."""
        key = f"INPUT_{name.replace(' ', '_').upper()}"
        return self.environ.get(key, "").strip()

    def _command(self, command: str, message: str) -> None:
        message = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        print(f"::{command}::{message}", file=self.stream)

    def _append_file_command(self, variable: str, content: str) -> bool:
        path = self.environ.get(variable)
        if not path:
            return False
        with open(Path(path), "a", encoding="utf-8") as f:
            f.write(content)
        return True

    def set_output(self, name: str, value: str) -> None:
        """Set a step output."""
        self.outputs[name] = value
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        written = self._append_file_command(
            "GITHUB_OUTPUT",
            f"{name}<<{delimiter}\n{value}\n{delimiter}\n",
        )
        logger.debug("output_set", name=name, value=value, file=written)

    def add_path(self, directory: str) -> None:
        """Prepend a directory to the PATH for this and later steps."""
        self._append_file_command("GITHUB_PATH", f"{directory}\n")
        current = self.environ.get("PATH", "")
        self.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory
        self.added_paths.append(directory)
        logger.debug("path_added", directory=directory)

    def warning(self, message: str) -> None:
        """Emit a warning annotation."""
        self._command("warning", message)

    def error(self, message: str) -> None:
        """Emit an error annotation."""
        self._command("error", message)

    def set_failed(self, message: str) -> None:
        """Mark the step as failed."""
        self.failure = message
        self.error(message)
