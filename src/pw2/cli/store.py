"""Store commands: run (create or open), status."""

from __future__ import annotations

from typing import Optional

import click
from git.exc import GitError
from rich.panel import Panel
from rich.table import Table

from ._common import CONFIG_PATH, STORE_HOME, console, fail, logger
from ..config import load_config
from ..database import Database, database_not_found
from ..errors import Pw2Error


def prompt_passphrase(prompt: str) -> bytearray:
    """Ask for a passphrase twice until a non-empty matching pair arrives."""
    passphrase = ""
    while not passphrase:
        passphrase = click.prompt(
            prompt,
            hide_input=True,
            confirmation_prompt="Repeat that",
            default="",
            show_default=False,
        )
    return bytearray(passphrase.encode("utf-8"))


def _open_or_create(store: str, webinterface: bool, config) -> Database:
    try:
        return Database.open(store, config=config)
    except Pw2Error as exc:
        if not database_not_found(exc):
            raise

    logger.info("Database did not exist, creating...")
    console.print(f"\n  No store at [cyan]{store}[/], creating one...")

    passphrase = bytearray()
    if webinterface:
        passphrase = prompt_passphrase(
            "Web interface enabled, enter passphrase to use"
        )
    try:
        db = Database.create(store, passphrase, config=config)
    finally:
        for i in range(len(passphrase)):
            passphrase[i] = 0

    logger.info("Creation completed")
    console.print("  [green]Creation completed[/]")
    return db


def register_store_commands(main: click.Group) -> None:
    """Register the store commands."""

    @main.command("run")
    @click.option("--store", default=STORE_HOME, show_default=True,
                  help="Store directory.")
    @click.option("--http", "http_addr", default=":http", show_default=True,
                  help='Address for the HTTP handler, e.g. ":http" or "127.0.0.1:8080".')
    @click.option("--webinterface/--no-webinterface", default=True, show_default=True,
                  help="Generate a GPG key for the web interface and make it a "
                       "blackbox admin when creating the store.")
    @click.option("--config", "config_path", default=CONFIG_PATH or None,
                  type=click.Path(dir_okay=False), help="YAML config file.")
    def run(store, http_addr, webinterface, config_path):
        """Open the store, creating it first if it does not exist."""
        config = load_config(config_path)
        try:
            db = _open_or_create(store, webinterface, config)
        except (Pw2Error, GitError, OSError) as exc:
            fail(exc)

        with db:
            head = db.last_commit()
            console.print()
            console.print(
                Panel(
                    f"Store: [cyan]{db.path}[/]\n"
                    f"Head: [bold]{head.hexsha[:8] if head else 'none'}[/] "
                    f"{head.summary if head else ''}\n"
                    f"Vault: {db.config.vault_path} ({db.config.vault_url})\n"
                    f"HTTP: {http_addr} [dim](served by the HTTP handler)[/]",
                    title="pw2",
                    border_style="cyan",
                )
            )

    @main.command("status")
    @click.option("--store", default=STORE_HOME, show_default=True,
                  help="Store directory.")
    @click.option("--limit", default=20, show_default=True, type=int,
                  help="How many commits to show.")
    @click.option("--config", "config_path", default=CONFIG_PATH or None,
                  type=click.Path(dir_okay=False), help="YAML config file.")
    def status(store, limit: Optional[int], config_path):
        """Show the store's commit history."""
        config = load_config(config_path)
        try:
            db = Database.open(store, config=config)
        except (Pw2Error, GitError, OSError) as exc:
            if database_not_found(exc):
                console.print(f"[bold red]No store at {store}.[/] Run pw2 run first.")
                raise SystemExit(1)
            fail(exc)

        with db:
            table = Table(title=f"pw2 store {db.path}")
            table.add_column("Commit", style="cyan")
            table.add_column("When")
            table.add_column("Author")
            table.add_column("Message")
            for record in db.history(limit):
                table.add_row(
                    record.short_sha,
                    record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    record.author,
                    record.message,
                )
            console.print(table)
