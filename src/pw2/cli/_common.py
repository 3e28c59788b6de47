"""Shared CLI helpers: the Rich console, logging setup, error reporting."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .. import CONFIG_PATH, STORE_HOME
from ..errors import CommandError

console = Console()
logger = logging.getLogger("pw2.cli")

__all__ = ["CONFIG_PATH", "STORE_HOME", "console", "logger", "fail", "setup_logging"]


def setup_logging(verbosity: int) -> None:
    """Configure the root logger.

    Args:
        verbosity: 0 for warnings, 1 for info, 2 or more for debug.
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def fail(exc: Exception) -> None:
    """Report a fatal error and exit 1."""
    logger.error("Fatal error: %s", exc)
    console.print(f"[bold red]Fatal error:[/] {escape(str(exc))}", soft_wrap=True)
    if isinstance(exc, CommandError):
        invocation = " ".join([exc.command, *exc.arguments])
        console.print(f"  [dim]command:[/] {escape(invocation)}", soft_wrap=True)
        if exc.cause is not None:
            console.print(f"  [dim]cause:[/] {escape(str(exc.cause))}", soft_wrap=True)
        if exc.returncode is not None:
            console.print(f"  [dim]exit status:[/] {exc.returncode}")
    else:
        console.print(f"  [dim]{type(exc).__name__}[/]")
    sys.exit(1)
