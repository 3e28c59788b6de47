"""
Staging and commits on top of GitPython's index.

Paths go into the index one at a time; a commit writes the index to a
tree and chains it onto HEAD, or makes a root commit when the branch is
still unborn. Nothing here clears the index: whatever is staged stays
staged for the next commit.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from git import Actor, Commit, Repo

from .errors import StagingError
from .matcher import resolve
from .models import StoreConfig

logger = logging.getLogger("pw2.staging")

_DEFAULTS = StoreConfig()


def signature(
    name: str = _DEFAULTS.identity_name,
    email: str = _DEFAULTS.identity_email,
) -> tuple[Actor, str]:
    """A fresh author identity and timestamp for one commit.

    Returns:
        (actor, date) where date is in git's raw "<epoch> <offset>" form.
    """
    when = datetime.now(timezone.utc)
    return Actor(name, email), f"{int(when.timestamp())} +0000"


def last_commit(repo: Repo) -> Optional[Commit]:
    """The commit HEAD points at, or None on an unborn branch."""
    if not repo.head.is_valid():
        return None
    return repo.head.commit


def _check_stageable(repo: Repo, path: str) -> None:
    workdir = Path(repo.working_tree_dir).resolve()
    full = (workdir / path).resolve()
    if full != workdir and workdir not in full.parents:
        raise StagingError(path, "outside the repository")
    if not os.path.lexists(workdir / path):
        raise StagingError(path, "does not exist")
    if repo.ignored(path):
        raise StagingError(path, "path is ignored")


def stage_files(repo: Repo, *paths: str) -> None:
    """Add paths to the index, exactly as given.

    Stops at the first path that cannot be staged; earlier paths stay
    in the index.

    Raises:
        StagingError: A path is missing, ignored or outside the tree.
    """
    logger.debug("~ git add %s", " ".join(paths))
    index = repo.index
    for path in paths:
        _check_stageable(repo, path)
        index.add([path])


def stage_glob(repo: Repo, *patterns: str, base: str = "") -> list[str]:
    """Resolve patterns and stage every file they match.

    Every pattern must match something and directories are expanded
    into their files. Nothing is staged unless all patterns match.

    Args:
        repo: Repository to stage into.
        *patterns: Glob patterns relative to base.
        base: Directory inside the working tree the patterns are
            relative to. Defaults to the working tree root.

    Returns:
        The repository-relative paths that were staged.

    Raises:
        UnmatchedPatternsError: Some pattern matched nothing.
    """
    root = Path(repo.working_tree_dir) / base
    files = [
        os.path.normpath(os.path.join(base, f))
        for f in resolve(root, patterns, require_all_match=True, recurse=True)
    ]
    stage_files(repo, *files)
    return files


def commit_index(
    repo: Repo,
    message: str,
    name: str = _DEFAULTS.identity_name,
    email: str = _DEFAULTS.identity_email,
) -> Commit:
    """Commit the index as it stands and advance HEAD.

    The new commit's parent is the current HEAD commit; on an unborn
    branch it has none.

    Args:
        repo: Repository to commit in.
        message: Commit message.
        name: Author and committer name.
        email: Author and committer email.

    Returns:
        The new commit.
    """
    logger.debug("~ git commit -m %r", message)

    index = repo.index
    logger.debug("%d files in index", len(index.entries))

    tree = index.write_tree()
    parent = last_commit(repo)
    actor, when = signature(name, email)

    commit = Commit.create_from_tree(
        repo,
        tree,
        message,
        parent_commits=[parent] if parent is not None else [],
        head=True,
        author=actor,
        committer=actor,
        author_date=when,
        commit_date=when,
    )
    logger.debug("committed %s", commit.hexsha)
    return commit
