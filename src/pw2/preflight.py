"""
Preflight checks -- are the programs a store needs installed?

pw2 shells out to git (through GitPython), bash (blackbox's scripts)
and gpg (the web interface key). None of them can be installed from
PyPI, so check before creating a store rather than halfway through.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

from .models import StoreConfig

INSTALL_HINTS = {
    "git": "sudo apt install git  # or: brew install git",
    "gpg": "sudo apt install gnupg2  # or: brew install gnupg",
    "bash": "sudo apt install bash  # or: brew install bash",
}


@dataclass
class ToolCheck:
    """Result of checking a single program."""

    name: str
    installed: bool
    version: str = ""
    path: str = ""
    install_cmd: str = ""


def _version(path: str) -> str:
    """First line of `<tool> --version`, or empty if it won't say."""
    try:
        result = subprocess.run(
            [path, "--version"],
            capture_output=True, text=True, timeout=10, check=False,
            stdin=subprocess.DEVNULL,
        )
    except (OSError, subprocess.TimeoutExpired):
        return ""
    lines = result.stdout.strip().splitlines()
    return lines[0] if lines else ""


def check_tool(name: str, command: Optional[str] = None) -> ToolCheck:
    """Check one program.

    Args:
        name: Display name, also the INSTALL_HINTS key.
        command: Executable to look up. Defaults to name.

    Returns:
        ToolCheck describing what was found.
    """
    path = shutil.which(command or name)
    if path is None:
        return ToolCheck(name=name, installed=False,
                         install_cmd=INSTALL_HINTS.get(name, ""))
    return ToolCheck(name=name, installed=True, version=_version(path), path=path)


def check_tools(config: Optional[StoreConfig] = None) -> list[ToolCheck]:
    """Check git, gpg and the shell blackbox runs under."""
    config = config or StoreConfig()
    return [
        check_tool("git"),
        check_tool("gpg", config.gpg_command),
        check_tool("bash", config.shell_command),
    ]
