"""Shared test fixtures for pw2.

blackbox and gpg are replaced by small bash scripts: the vault remote is
a local git repository whose bin/ holds fake blackbox_* scripts, and gpg
is a script that writes placeholder keyring files. Needs git and bash.
"""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Callable

import pytest
from git import Actor, Repo

from pw2.models import StoreConfig

FAKE_INITIALIZE = """\
#!/usr/bin/env bash
set -e
if [ "$1" != "yes" ]; then
  echo "blackbox_initialize: refusing to prompt" >&2
  exit 2
fi
echo "VCS_TYPE: git"
mkdir -p keyrings/live
touch keyrings/live/blackbox-admins.txt keyrings/live/blackbox-files.txt
printf '/keyrings/live/pubring.gpg~\\n/keyrings/live/pubring.kbx~\\n/keyrings/live/secring.gpg\\n' >> .gitignore
"""

FAKE_ADDADMIN = """\
#!/usr/bin/env bash
set -e
if [ ! -d "$2" ]; then
  echo "blackbox_addadmin: no keyring at $2" >&2
  exit 1
fi
cp "$2/pubring.kbx" keyrings/live/pubring.kbx
cp "$2/trustdb.gpg" keyrings/live/trustdb.gpg
echo "$1" >> keyrings/live/blackbox-admins.txt
"""

FAILING_SCRIPT = """\
#!/usr/bin/env bash
echo "something went wrong" >&2
exit 1
"""

FAKE_GPG = """\
#!/usr/bin/env bash
set -e
home=""
script=""
while [ $# -gt 0 ]; do
  case "$1" in
    --homedir) home="$2"; shift 2;;
    --gen-key) script="$2"; shift 2;;
    *) shift;;
  esac
done
grep -q '^Passphrase: ' "$script"
cp "$script" "$home/batch-copy"
echo "$script" > "$home/batch-path"
echo "public key" > "$home/pubring.kbx"
echo "trust" > "$home/trustdb.gpg"
"""

AUTHOR = Actor("blackbox", "blackbox@example.invalid")


def write_script(path: Path, body: str) -> Path:
    """Write an executable script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(scope="session")
def make_vault_remote(tmp_path_factory) -> Callable[..., Path]:
    """Factory for local stand-ins of the blackbox repository."""

    def _make(
        initialize: str = FAKE_INITIALIZE,
        addadmin: str = FAKE_ADDADMIN,
        branch: str = "master",
    ) -> Path:
        path = tmp_path_factory.mktemp("blackbox-remote")
        repo = Repo.init(path, initial_branch=branch)
        write_script(path / "bin" / "blackbox_initialize", initialize)
        write_script(path / "bin" / "blackbox_addadmin", addadmin)
        (path / "README.md").write_text("fake blackbox\n")
        repo.index.add(["bin/blackbox_initialize", "bin/blackbox_addadmin", "README.md"])
        repo.index.commit("fake blackbox", author=AUTHOR, committer=AUTHOR)
        repo.close()
        return path

    return _make


@pytest.fixture(scope="session")
def vault_remote(make_vault_remote) -> Path:
    """A working fake blackbox repository."""
    return make_vault_remote()


@pytest.fixture
def fake_gpg(tmp_path: Path) -> Path:
    """A gpg stand-in that fakes batch key generation."""
    return write_script(tmp_path / "fakebin" / "gpg", FAKE_GPG)


@pytest.fixture
def store_config(vault_remote: Path, fake_gpg: Path) -> StoreConfig:
    """Store configuration wired to the fakes."""
    return StoreConfig(vault_url=str(vault_remote), gpg_command=str(fake_gpg))


@pytest.fixture
def git_repo(tmp_path: Path):
    """A fresh, empty repository."""
    repo = Repo.init(tmp_path / "repo")
    yield repo
    repo.close()


@pytest.fixture(autouse=True)
def _isolate_git_config(tmp_path_factory, monkeypatch):
    """Keep the user's git config out of the tests."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
