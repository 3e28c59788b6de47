"""
The vault submodule -- adding it, pulling it, recording it.

Adding a submodule only clones it without a checkout; the working tree
stays empty until fetch_and_reset_hard puts the remote branch tip there.
The parent repository then needs the submodule's commit in its index
before the submodule counts as committed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from git import Repo, Submodule
from git.refs.remote import RemoteReference

from .errors import SubrepoError
from .models import StoreConfig

logger = logging.getLogger("pw2.subrepo")

_DEFAULTS = StoreConfig()


def add_subrepo(repo: Repo, url: str, path: str) -> Submodule:
    """Register a submodule at path cloned from url, without checkout.

    Args:
        repo: Parent repository.
        url: Where the submodule comes from.
        path: Location inside the parent working tree; also its name.

    Returns:
        The new Submodule.
    """
    logger.info("adding submodule %s from %s", path, url)
    return Submodule.add(repo, path, path, url=url, no_checkout=True)


def _apply_modes(subrepo: Repo, commit, dir_mode: int, file_mode: int) -> None:
    root = Path(subrepo.working_tree_dir)
    os.chmod(root, dir_mode)
    for item in commit.tree.traverse():
        target = root / item.path
        if target.is_symlink() or not target.exists():
            continue
        os.chmod(target, dir_mode if target.is_dir() else file_mode)


def fetch_and_reset_hard(
    subrepo: Repo,
    branch: str = _DEFAULTS.vault_branch,
    dir_mode: int = _DEFAULTS.dir_mode,
    file_mode: int = _DEFAULTS.file_mode,
) -> None:
    """Check out origin's branch tip, detached, discarding local changes.

    Args:
        subrepo: The submodule's repository.
        branch: Remote branch whose tip gets checked out.
        dir_mode: Permission bits for checked-out directories.
        file_mode: Permission bits for checked-out files.

    Raises:
        SubrepoError: No origin remote, or origin has no such branch.
    """
    logger.info("pulling remote...")
    if "origin" not in [r.name for r in subrepo.remotes]:
        raise SubrepoError(f"{subrepo.working_tree_dir} has no origin remote")

    origin = subrepo.remote("origin")
    origin.fetch()

    ref = RemoteReference(subrepo, f"refs/remotes/origin/{branch}")
    if not ref.is_valid():
        raise SubrepoError(f"origin has no branch {branch}")
    subrepo.head.set_reference(ref.commit)

    commit = subrepo.head.commit
    subrepo.head.reset(commit, index=True, working_tree=True)
    _apply_modes(subrepo, commit, dir_mode, file_mode)

    logger.info("remote pull complete (%s)", commit.hexsha[:8])


def register_in_index(submodule: Submodule, write_index: bool = True) -> None:
    """Stage the submodule's current commit in the parent index.

    Args:
        submodule: Submodule whose checkout is current.
        write_index: Write the parent index to disk afterwards.
    """
    module = submodule.module()
    submodule.binsha = module.head.commit.binsha
    index = submodule.repo.index
    index.add([submodule], write=write_index)
