"""Tests for the blackbox vault tool."""

from __future__ import annotations

from pathlib import Path

import pytest

from pw2.errors import CommandError, MissingFilesError
from pw2.models import StoreConfig
from pw2.runner import CommandRunner
from pw2.vault import BlackboxVault, VaultTool

from conftest import FAILING_SCRIPT, FAKE_ADDADMIN, FAKE_INITIALIZE, write_script


@pytest.fixture
def store(tmp_path: Path) -> Path:
    """A store directory with blackbox scripts, no git involved."""
    root = tmp_path / "store"
    write_script(root / "vault" / "bin" / "blackbox_initialize", FAKE_INITIALIZE)
    write_script(root / "vault" / "bin" / "blackbox_addadmin", FAKE_ADDADMIN)
    write_script(root / "vault" / "bin" / "blackbox_broken", FAILING_SCRIPT)
    return root


@pytest.fixture
def vault(store: Path, fake_gpg: Path) -> BlackboxVault:
    return BlackboxVault(store, StoreConfig(gpg_command=str(fake_gpg)), CommandRunner())


class TestBlackboxVault:
    """Running blackbox scripts from the store."""

    def test_is_a_vault_tool(self, vault: BlackboxVault):
        assert isinstance(vault, VaultTool)

    def test_runs_in_store(self, vault: BlackboxVault, store: Path):
        assert vault.runner.cwd == store

    def test_initialize(self, vault: BlackboxVault, store: Path):
        """initialize answers yes and creates the keyrings."""
        vault.initialize()
        assert (store / "keyrings" / "live" / "blackbox-admins.txt").exists()
        assert (store / ".gitignore").exists()

    def test_generate_and_add_admin(self, vault: BlackboxVault, store: Path):
        vault.initialize()
        key_home = vault.generate_key(b"pw", store / "gpg")
        vault.add_admin("fake@pw2.no.ms", key_home)

        live = store / "keyrings" / "live"
        assert (live / "pubring.kbx").exists()
        assert "fake@pw2.no.ms" in (live / "blackbox-admins.txt").read_text()

    def test_add_admin_needs_key_store(self, vault: BlackboxVault, store: Path):
        with pytest.raises(MissingFilesError):
            vault.add_admin("fake@pw2.no.ms", store / "gpg")

    def test_failing_script(self, vault: BlackboxVault):
        with pytest.raises(CommandError) as exc_info:
            vault.command("broken")
        assert exc_info.value.command == "bash"
        assert exc_info.value.arguments == ["vault/bin/blackbox_broken"]
