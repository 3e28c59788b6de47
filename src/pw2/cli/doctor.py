"""Doctor command: check the external programs a store needs."""

from __future__ import annotations

import sys

import click
from rich.table import Table

from ._common import CONFIG_PATH, console
from ..config import load_config
from ..preflight import check_tools


def register_doctor_commands(main: click.Group) -> None:
    """Register the doctor command."""

    @main.command("doctor")
    @click.option("--config", "config_path", default=CONFIG_PATH or None,
                  type=click.Path(dir_okay=False), help="YAML config file.")
    def doctor(config_path):
        """Check that git, gpg and bash are installed."""
        checks = check_tools(load_config(config_path))

        table = Table(title="pw2 doctor")
        table.add_column("Tool", style="bold")
        table.add_column("Status")
        table.add_column("Version / install")
        for check in checks:
            if check.installed:
                table.add_row(check.name, "[green]found[/]", check.version or check.path)
            else:
                table.add_row(check.name, "[red]missing[/]", check.install_cmd)
        console.print(table)

        if not all(c.installed for c in checks):
            sys.exit(1)
