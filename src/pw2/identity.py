"""
Service identity -- the GPG key the web interface decrypts with.

The key is generated once, when the store is created, into its own
key store. The passphrase only ever exists in the batch file gpg reads,
and that file is deleted whether or not gpg succeeds.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from .errors import PartialStoreError
from .models import StoreConfig
from .runner import CommandRunner

logger = logging.getLogger("pw2.identity")


def check_passphrase(passphrase: Union[bytes, bytearray]) -> None:
    """Reject passphrases gpg's line-based batch format cannot carry.

    A line break would end the Passphrase line and let the rest be read
    as further batch directives.

    Raises:
        ValueError: passphrase contains a carriage return or line feed.
    """
    if b"\n" in passphrase or b"\r" in passphrase:
        raise ValueError("passphrase must not contain line breaks")


def batch_script(config: StoreConfig, passphrase: Union[bytes, bytearray]) -> bytearray:
    """Build the gpg --gen-key --batch parameter file.

    Returned as a bytearray so the caller can zero it.
    """
    check_passphrase(passphrase)
    header = (
        "%echo generating web interface gpg key...\n"
        f"Key-Type: {config.key_type}\n"
        f"Key-Length: {config.key_length}\n"
        f"Name-Real: {config.identity_name}\n"
        f"Name-Email: {config.identity_email}\n"
        f"Name-Comment: {config.identity_comment}\n"
        "Passphrase: "
    )
    script = bytearray(header.encode("utf-8"))
    script += passphrase
    script += b"\n%commit\n"
    return script


def _zero(buf: bytearray) -> None:
    for i in range(len(buf)):
        buf[i] = 0


def generate_identity(
    runner: CommandRunner,
    key_home: Union[str, Path],
    passphrase: Union[bytes, bytearray],
    config: Optional[StoreConfig] = None,
) -> Path:
    """Generate the service key pair into a fresh key store.

    Args:
        runner: Runner used to invoke gpg.
        key_home: Key store directory to create. Must not exist yet.
        passphrase: Passphrase protecting the private key.
        config: Identity name, email, comment and key parameters.

    Returns:
        The key store directory.

    Raises:
        PartialStoreError: key_home already exists.
        CommandError: gpg failed.
        ValueError: passphrase contains a line break.
    """
    config = config or StoreConfig()
    key_home = Path(key_home)
    script = batch_script(config, passphrase)
    fd, script_path = tempfile.mkstemp(prefix="pw2")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(script)
        _zero(script)

        try:
            key_home.mkdir(mode=config.dir_mode)
        except FileExistsError as exc:
            raise PartialStoreError(str(key_home)) from exc

        logger.info("generating web interface gpg key in %s", key_home)
        runner.run(
            config.gpg_command,
            "--homedir", str(key_home.resolve()),
            "--batch",
            "--gen-key", script_path,
        )
    finally:
        _zero(script)
        os.unlink(script_path)

    return key_home
