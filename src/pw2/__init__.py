"""
pw2 -- a password store kept in git.

Every secret is a file encrypted with GPG by the blackbox tool, every
change is a commit, and blackbox itself rides along as a submodule.

Usage:
    from pw2 import Database
    db = Database.create("git", b"web passphrase")
    db = Database.open("git")
"""

import os

__version__ = "0.1.0"

STORE_HOME = os.environ.get("PW2_STORE", "git")
CONFIG_PATH = os.environ.get("PW2_CONFIG", "")

from .database import Database, database_not_found  # noqa: E402

__all__ = ["Database", "database_not_found"]
