"""Exception types raised by pw2.

Filesystem errors from creating the store directory are not wrapped,
and GitPython errors pass through unless classified here.
"""

from __future__ import annotations

from typing import Optional, Sequence


class Pw2Error(Exception):
    """Base class for pw2 errors."""


class CommandError(Pw2Error):
    """An external program failed to start or exited non-zero."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        cause: Optional[BaseException] = None,
        returncode: Optional[int] = None,
    ):
        self.command = command
        self.arguments = list(args)
        self.cause = cause
        self.returncode = returncode
        if returncode is not None:
            reason = f"exit status {returncode}"
        else:
            reason = str(cause) if cause else "unknown failure"
        super().__init__(f"{command} {' '.join(self.arguments)}: {reason}".strip())


class UnmatchedPatternsError(Pw2Error):
    """One or more required glob patterns matched nothing.

    Lists every unmatched pattern, and keeps whatever the
    other patterns did match.
    """

    def __init__(self, patterns: Sequence[str], matches: Sequence[str] = ()):
        self.patterns = list(patterns)
        self.matches = list(matches)
        super().__init__(f"expected {' '.join(self.patterns)} to match files")


class MissingFilesError(Pw2Error):
    """Files that must exist do not."""

    def __init__(self, paths: Sequence[str]):
        self.paths = list(paths)
        super().__init__(f"files do not exist: {' '.join(self.paths)}")


class StagingError(Pw2Error):
    """A path could not be added to the index."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot stage {path}: {reason}")


class SubrepoError(Pw2Error):
    """The vault submodule is missing its remote or branch."""


class DatabaseNotFoundError(Pw2Error):
    """No repository exists at the store location."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"no pw2 database at {location}")


class NotAStoreError(Pw2Error):
    """A repository exists but has no vault submodule."""

    def __init__(self, location: str, vault_path: str):
        self.location = location
        self.vault_path = vault_path
        super().__init__(
            f"{location} is a git repository but not a pw2 store "
            f"(no {vault_path} submodule)"
        )


class PartialStoreError(Pw2Error):
    """The service identity key store already exists.

    A previous create got at least as far as key generation.
    Remove the partial store before retrying.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"key store {path} already exists; a previous create was "
            "interrupted, remove the partial store and retry"
        )
