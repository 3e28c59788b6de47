"""
Pydantic models for store configuration and commit records.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

BLACKBOX_URL = "https://github.com/StackExchange/blackbox.git"


class StoreConfig(BaseModel):
    """Everything the bootstrap needs to know about its collaborators.

    Defaults reproduce a stock pw2 store: blackbox from GitHub in
    ``vault/``, a ``gpg/`` key store for the web interface identity.
    """

    vault_url: str = BLACKBOX_URL
    vault_path: str = "vault"
    vault_branch: str = "master"

    key_store_dir: str = "gpg"
    identity_name: str = "pw2"
    identity_email: str = "fake@pw2.no.ms"
    identity_comment: str = "this is the GPG key for the PW2 web interface"
    key_type: str = "RSA"
    key_length: int = Field(default=2048, ge=1024)

    dir_mode: int = 0o700
    file_mode: int = 0o700

    gpg_command: str = "gpg"
    shell_command: str = "bash"


class CommitRecord(BaseModel):
    """A commit in the store's history, flattened for display."""

    sha: str
    message: str
    author: str
    email: str
    timestamp: datetime
    parents: int = 0

    @property
    def short_sha(self) -> str:
        return self.sha[:8]
