"""Tests for preflight tool checks."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from pw2.models import StoreConfig
from pw2.preflight import check_tool, check_tools

from conftest import write_script


class TestCheckTool:
    def test_found_with_version(self, tmp_path: Path):
        tool = write_script(tmp_path / "faketool", "#!/usr/bin/env bash\necho 'faketool 1.2.3'\n")
        check = check_tool("faketool", str(tool))
        assert check.installed
        assert check.version == "faketool 1.2.3"
        assert check.path == str(tool)

    @patch("pw2.preflight.shutil.which", return_value=None)
    def test_missing_has_install_hint(self, _which):
        check = check_tool("gpg")
        assert not check.installed
        assert "gnupg" in check.install_cmd

    def test_checks_configured_programs(self, tmp_path: Path):
        gpg = write_script(tmp_path / "mygpg", "#!/usr/bin/env bash\necho 'gpg (GnuPG) 2.4'\n")
        checks = check_tools(StoreConfig(gpg_command=str(gpg)))
        assert [c.name for c in checks] == ["git", "gpg", "bash"]
        assert checks[1].version == "gpg (GnuPG) 2.4"
