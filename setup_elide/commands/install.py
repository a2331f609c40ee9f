"""Install command."""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.table import Table

from setup_elide.core.config import SetupConfig
from setup_elide.core.environment import Environment
from setup_elide.core.install import run
from setup_elide.core.options import OptionName
from setup_elide.core.runtime import ActionsRuntime
from setup_elide.core.types import ActionOutputName


@click.command()
@click.option("--version", "version", help="Elide version to install, or 'latest'")
@click.option("--os", "os_name", help="Target OS (darwin, linux, windows or an alias)")
@click.option("--arch", help="Target architecture (amd64, aarch64 or an alias)")
@click.option("--target", help="Install directory")
@click.option("--custom-url", help="Download the release from this URL")
@click.option("--version-tag", help="Version tag of the custom URL release")
@click.option("--token", help="GitHub token for the release index")
@click.option("--cache/--no-cache", default=None, help="Use the tool cache")
@click.option("--force/--no-force", default=None, help="Install even if Elide is on the PATH")
@click.option("--export-path/--no-export-path", default=None, help="Add Elide to the PATH")
@click.option("--prewarm/--no-prewarm", default=None, help="Run a trivial script after install")
@click.option("--selftest/--no-selftest", default=None, help="Run Elide's self-test after install")
@click.pass_context
def install(
    ctx: click.Context,
    version: str | None,
    os_name: str | None,
    arch: str | None,
    target: str | None,
    custom_url: str | None,
    version_tag: str | None,
    token: str | None,
    cache: bool | None,
    force: bool | None,
    export_path: bool | None,
    prewarm: bool | None,
    selftest: bool | None,
) -> None:
    """Install Elide, reading unset options from workflow inputs."""
    config: SetupConfig = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    runtime = ActionsRuntime()

    given: dict[OptionName, Any] = {
        OptionName.VERSION: version,
        OptionName.OS: os_name,
        OptionName.ARCH: arch,
        OptionName.TARGET: target,
        OptionName.CUSTOM_URL: custom_url,
        OptionName.VERSION_TAG: version_tag,
        OptionName.TOKEN: token,
        OptionName.CACHE: cache,
        OptionName.FORCE: force,
        OptionName.EXPORT_PATH: export_path,
        OptionName.PREWARM: prewarm,
        OptionName.SELFTEST: selftest,
    }
    overrides = {
        name.value: value if value is not None else runtime.get_input(name.value)
        for name, value in given.items()
    }

    exit_code = run(overrides, runtime=runtime, env=Environment.current(), config=config)

    if exit_code != 0:
        console.print(f"[red]Error:[/red] {runtime.failure}")
        ctx.exit(exit_code)

    table = Table(title="Elide")
    table.add_column("Output", style="cyan")
    table.add_column("Value", style="green")
    for name in ActionOutputName:
        table.add_row(name.value, runtime.outputs.get(name.value, ""))
    console.print(table)
