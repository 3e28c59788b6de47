"""
The pw2 database -- a git repository of blackbox-encrypted secrets.

Creating a store is a fixed sequence of steps, each committed as it
completes:

    mkdir -> git init -> add vault submodule -> commit
          -> blackbox initialize -> commit
          -> [web identity -> blackbox addadmin -> commit]

Nothing is rolled back. If a step fails the directory is left as it
stands and the error propagates; remove the partial store before
trying again.

A Database is for one writer. Nothing here locks.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from git import Commit, Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from .errors import DatabaseNotFoundError, NotAStoreError
from .identity import check_passphrase
from .models import CommitRecord, StoreConfig
from .runner import CommandRunner, RunResult
from .staging import commit_index, last_commit, stage_files, stage_glob
from .subrepo import add_subrepo, fetch_and_reset_hard, register_in_index
from .vault import BlackboxVault, VaultTool

logger = logging.getLogger("pw2.database")

MSG_ADD_VAULT = "add blackbox submodule"
MSG_INITIALIZE = "\U0001f512 initialize blackbox \U0001f512"
MSG_ADD_ADMIN = "+ add web client as blackbox admin"

INITIALIZE_PATTERNS = ("keyrings", ".gitignore")
ADMIN_FILES = (
    "keyrings/live/pubring.kbx",
    "keyrings/live/trustdb.gpg",
    "keyrings/live/blackbox-admins.txt",
)

Passphrase = Union[bytes, bytearray, str, None]


def database_not_found(exc: BaseException) -> bool:
    """True if exc means there is no repository at the location.

    Use it to tell "create the store" apart from "the store is broken".
    """
    return isinstance(
        exc, (DatabaseNotFoundError, NoSuchPathError, InvalidGitRepositoryError)
    )


def _passphrase_buffer(passphrase: Passphrase) -> bytearray:
    if passphrase is None:
        return bytearray()
    if isinstance(passphrase, str):
        return bytearray(passphrase.encode("utf-8"))
    return bytearray(passphrase)


class Database:
    """An open pw2 store.

    Owns its repository handle until close() is called.

    Attributes:
        path: Store root.
        repo: The store's repository.
        config: Configuration the store was opened with.
    """

    def __init__(
        self,
        path: Union[str, Path],
        repo: Repo,
        config: Optional[StoreConfig] = None,
        runner: Optional[CommandRunner] = None,
        vault: Optional[VaultTool] = None,
    ):
        self.path = Path(path)
        self.repo = repo
        self.config = config or StoreConfig()
        self.runner = (runner or CommandRunner()).bind(self.path)
        self.vault = vault or BlackboxVault(self.path, self.config, self.runner)

    def __repr__(self) -> str:
        return f"Database({str(self.path)!r})"

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release the repository handle."""
        self.repo.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        location: Union[str, Path],
        passphrase: Passphrase = None,
        config: Optional[StoreConfig] = None,
        runner: Optional[CommandRunner] = None,
        vault: Optional[VaultTool] = None,
    ) -> "Database":
        """Bootstrap a new store at location.

        Args:
            location: Directory to create. Its parent must exist.
            passphrase: Passphrase for the web interface key. Empty or
                None skips generating and authorizing that key.
            config: Store configuration. Defaults to StoreConfig().
            runner: Runner for external programs.
            vault: Vault tool. Defaults to blackbox in the submodule.

        Returns:
            The new Database.

        Raises:
            FileExistsError: location already exists.
            CommandError: blackbox or gpg failed.
            UnmatchedPatternsError: blackbox did not produce its files.
            PartialStoreError: the key store exists from an earlier run.
            ValueError: passphrase contains a line break. Nothing is created.
        """
        config = config or StoreConfig()
        secret = _passphrase_buffer(passphrase)
        try:
            check_passphrase(secret)
            location = Path(location)
            os.mkdir(location, config.dir_mode)
            logger.info("initializing repository at %s", location)

            repo = Repo.init(location)
            try:
                db = cls(location, repo, config=config, runner=runner, vault=vault)

                db._add_vault()

                db.vault.initialize()
                stage_glob(db.repo, *INITIALIZE_PATTERNS)
                db.commit(MSG_INITIALIZE)

                if secret:
                    key_home = db.path / config.key_store_dir
                    db.vault.generate_key(secret, key_home)
                    db.vault.add_admin(config.identity_email, key_home)
                    stage_files(db.repo, *ADMIN_FILES)
                    db.commit(MSG_ADD_ADMIN)
            except BaseException:
                repo.close()
                raise

            logger.info("creation completed")
            return db
        finally:
            for i in range(len(secret)):
                secret[i] = 0

    @classmethod
    def open(
        cls,
        location: Union[str, Path],
        config: Optional[StoreConfig] = None,
        runner: Optional[CommandRunner] = None,
        vault: Optional[VaultTool] = None,
    ) -> "Database":
        """Open an existing store.

        Raises:
            DatabaseNotFoundError: No repository at location.
            NotAStoreError: The repository has no vault submodule.
        """
        config = config or StoreConfig()
        try:
            repo = Repo(location)
        except (NoSuchPathError, InvalidGitRepositoryError) as exc:
            raise DatabaseNotFoundError(str(location)) from exc

        if last_commit(repo) is None or not any(
            sm.path == config.vault_path for sm in repo.submodules
        ):
            repo.close()
            raise NotAStoreError(str(location), config.vault_path)

        return cls(location, repo, config=config, runner=runner, vault=vault)

    def _add_vault(self) -> None:
        submodule = add_subrepo(self.repo, self.config.vault_url, self.config.vault_path)
        fetch_and_reset_hard(
            submodule.module(),
            branch=self.config.vault_branch,
            dir_mode=self.config.dir_mode,
            file_mode=self.config.file_mode,
        )
        register_in_index(submodule)
        stage_files(self.repo, ".gitmodules")
        self.commit(MSG_ADD_VAULT)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def commit(self, message: str) -> Commit:
        """Commit whatever is staged, signed as the store's identity."""
        return commit_index(
            self.repo,
            message,
            name=self.config.identity_name,
            email=self.config.identity_email,
        )

    def last_commit(self) -> Optional[Commit]:
        """The head commit, or None if nothing is committed yet."""
        return last_commit(self.repo)

    def history(self, limit: Optional[int] = None) -> list[CommitRecord]:
        """Commits reachable from HEAD, newest first."""
        if self.last_commit() is None:
            return []
        return [
            CommitRecord(
                sha=c.hexsha,
                message=c.message.strip(),
                author=c.author.name,
                email=c.author.email,
                timestamp=datetime.fromtimestamp(c.committed_date, tz=timezone.utc),
                parents=len(c.parents),
            )
            for c in self.repo.iter_commits(max_count=limit)
        ]

    def vault_command(self, command: str, *args: str) -> RunResult:
        """Run blackbox_<command> in the store.

        Only available when the store uses BlackboxVault.
        """
        if not isinstance(self.vault, BlackboxVault):
            raise TypeError(f"{type(self.vault).__name__} has no script commands")
        return self.vault.command(command, *args)
