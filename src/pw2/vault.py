"""
Vault tools -- who encrypts the secrets and who may read them.

pw2 never does cryptography itself. A VaultTool sets up the encryption
policy, generates keys and authorizes admins. BlackboxVault does all of
that by running blackbox's scripts from the vault submodule and gpg.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .errors import MissingFilesError
from .identity import generate_identity
from .models import StoreConfig
from .runner import CommandRunner, RunResult

logger = logging.getLogger("pw2.vault")


class VaultTool(ABC):
    """Abstract encryption and authorization capability."""

    @abstractmethod
    def initialize(self) -> None:
        """Set up the encryption policy in the store, non-interactively."""

    @abstractmethod
    def add_admin(self, identity: str, key_home: Union[str, Path]) -> None:
        """Authorize identity, whose public key lives in key_home."""

    @abstractmethod
    def generate_key(
        self, passphrase: Union[bytes, bytearray], key_home: Union[str, Path]
    ) -> Path:
        """Generate a passphrase-protected key pair into key_home."""


class BlackboxVault(VaultTool):
    """StackExchange blackbox, run from the store's vault submodule.

    Args:
        store: Store root; every script runs with it as working directory.
        config: Where the submodule lives and which programs to run.
        runner: Runner to use. A default runner is created if omitted.
    """

    def __init__(
        self,
        store: Union[str, Path],
        config: Optional[StoreConfig] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.store = Path(store)
        self.config = config or StoreConfig()
        self.runner = (runner or CommandRunner()).bind(self.store)

    def command(self, name: str, *params: str) -> RunResult:
        """Run vault/bin/blackbox_<name> with params."""
        script = Path(self.config.vault_path) / "bin" / f"blackbox_{name}"
        return self.runner.run(self.config.shell_command, str(script), *params)

    def initialize(self) -> None:
        self.command("initialize", "yes")

    def add_admin(self, identity: str, key_home: Union[str, Path]) -> None:
        key_home = Path(key_home)
        if not key_home.is_dir():
            raise MissingFilesError([str(key_home)])
        self.command("addadmin", identity, str(key_home.resolve()))

    def generate_key(
        self, passphrase: Union[bytes, bytearray], key_home: Union[str, Path]
    ) -> Path:
        return generate_identity(self.runner, key_home, passphrase, self.config)
