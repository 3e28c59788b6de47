"""
Command runner -- every external program pw2 touches goes through here.

A runner is bound to a working directory and a logger. Child output is
teed: each line goes to the log with a tab in front and to our own
stdout/stderr. Children never see our real stdin; they get a write-only
handle on the null device, so any read fails at once with EBADF instead
of hanging on a prompt nobody will answer.

There is no timeout. A hung child hangs the caller.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable, Optional, Union

from .errors import CommandError

logger = logging.getLogger("pw2.runner")


@dataclass
class RunResult:
    """Outcome of a successful command.

    Attributes:
        command: Program that was run.
        args: Arguments it was given.
        cwd: Working directory it ran in.
        returncode: Exit status (always 0 when returned by run()).
        stdout: Everything the child wrote to stdout.
        stderr: Everything the child wrote to stderr.
    """

    command: str
    args: list[str] = field(default_factory=list)
    cwd: str = ""
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


def _echo(echo: IO[str], line: bytes) -> None:
    """Write raw child output to one of our streams."""
    raw = getattr(echo, "buffer", None)
    if raw is None:
        echo.write(line.decode("utf-8", errors="replace"))
        echo.flush()
        return
    echo.flush()
    raw.write(line)
    raw.flush()


def _pump(
    stream: IO[bytes],
    log: Callable[..., None],
    echo: Optional[IO[str]],
    sink: list[bytes],
) -> None:
    """Copy a child's stream line by line into the log, echo and sink.

    The echo gets the child's bytes untouched; only the log decodes.
    """
    for line in iter(stream.readline, b""):
        sink.append(line)
        log("\t%s", line.decode("utf-8", errors="replace").rstrip("\r\n"))
        if echo is not None:
            _echo(echo, line)
    stream.close()


class CommandRunner:
    """Runs external programs scoped to a working directory.

    Args:
        cwd: Default working directory. Defaults to the process cwd
            at construction time.
        log: Logger receiving the invocation and teed output.
        echo: Also write child output to our stdout/stderr.
        env: Extra environment variables for children.
    """

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        log: Optional[logging.Logger] = None,
        echo: bool = True,
        env: Optional[dict[str, str]] = None,
    ):
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.log = log or logger
        self.echo = echo
        self.env = dict(env or {})

    def bind(self, cwd: Union[str, Path]) -> "CommandRunner":
        """Return a runner like this one with another working directory."""
        return CommandRunner(cwd=cwd, log=self.log, echo=self.echo, env=self.env)

    def run(
        self,
        command: str,
        *args: str,
        cwd: Optional[Union[str, Path]] = None,
    ) -> RunResult:
        """Run a program and wait for it.

        Args:
            command: Program to run, looked up on PATH.
            *args: Its arguments.
            cwd: Override the runner's working directory for this call.

        Returns:
            RunResult with the captured output.

        Raises:
            CommandError: The program could not be started or exited
                non-zero.
        """
        workdir = Path(cwd) if cwd is not None else self.cwd
        argv = [command, *[str(a) for a in args]]
        self.log.debug("exec %s (in %s)", " ".join(argv), workdir)

        env = None
        if self.env:
            env = os.environ.copy()
            env.update(self.env)

        out: list[bytes] = []
        err: list[bytes] = []
        with open(os.devnull, "wb") as stdin_block:
            try:
                proc = subprocess.Popen(
                    argv,
                    cwd=str(workdir),
                    env=env,
                    stdin=stdin_block,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as exc:
                self.log.error("Could not start %s: %s", command, exc)
                raise CommandError(command, argv[1:], cause=exc) from exc

            pumps = [
                threading.Thread(
                    target=_pump,
                    args=(proc.stdout, self.log.debug,
                          sys.stdout if self.echo else None, out),
                    daemon=True,
                ),
                threading.Thread(
                    target=_pump,
                    args=(proc.stderr, self.log.warning,
                          sys.stderr if self.echo else None, err),
                    daemon=True,
                ),
            ]
            for t in pumps:
                t.start()
            returncode = proc.wait()
            for t in pumps:
                t.join()

        if returncode != 0:
            self.log.error("%s exited with status %d", command, returncode)
            raise CommandError(command, argv[1:], returncode=returncode)

        return RunResult(
            command=command,
            args=argv[1:],
            cwd=str(workdir),
            returncode=returncode,
            stdout=b"".join(out).decode("utf-8", errors="replace"),
            stderr=b"".join(err).decode("utf-8", errors="replace"),
        )
