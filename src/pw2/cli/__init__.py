"""
pw2 CLI -- create or open a store, look at its history.

The main Click group lives here; command groups register themselves
from their own modules.

Entry point: pw2.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="pw2")
@click.option("-v", "--verbose", count=True, help="More logging (-vv for debug).")
def main(verbose):
    """pw2 -- passwords in git, encrypted with blackbox."""
    setup_logging(verbose)


from .store import register_store_commands  # noqa: E402
from .doctor import register_doctor_commands  # noqa: E402

register_store_commands(main)
register_doctor_commands(main)
