"""
Path matching -- expand glob patterns under a base directory.

Matches come back relative to the base, in pattern order, each
pattern's matches sorted. Directories can be expanded into the files
beneath them so the result is always something the index can take.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Iterable, Union

from .errors import UnmatchedPatternsError


def find_glob(
    base: Union[str, Path], pattern: str, recurse: bool = False
) -> list[str]:
    """Expand one pattern against base.

    Args:
        base: Directory the pattern is relative to.
        pattern: Glob pattern, or a literal path.
        recurse: Replace matched directories with everything below them.

    Returns:
        Matching paths relative to base.
    """
    base = os.fspath(base)
    if not os.path.isdir(base):
        raise NotADirectoryError(base)

    matches: list[str] = []
    for match in sorted(glob.glob(pattern, root_dir=base, include_hidden=True)):
        match = os.path.normpath(match)
        if recurse and os.path.isdir(os.path.join(base, match)):
            inner = os.path.join(glob.escape(match), "*")
            matches.extend(find_glob(base, inner, recurse=True))
            continue
        matches.append(match)
    return matches


def resolve(
    base: Union[str, Path],
    patterns: Iterable[str],
    require_all_match: bool = False,
    recurse: bool = False,
) -> list[str]:
    """Expand every pattern against base.

    All patterns are expanded before anything is reported, so an
    UnmatchedPatternsError names every pattern that came up empty.

    Args:
        base: Directory the patterns are relative to.
        patterns: Glob patterns, processed in order.
        require_all_match: Fail if any pattern matches nothing.
        recurse: Expand matched directories into their files.

    Returns:
        Matching paths relative to base.

    Raises:
        UnmatchedPatternsError: require_all_match is set and some
            pattern matched nothing.
    """
    matches: list[str] = []
    unmatched: list[str] = []
    for pattern in patterns:
        found = find_glob(base, pattern, recurse=recurse)
        if require_all_match and not found:
            unmatched.append(pattern)
        matches.extend(found)

    if unmatched:
        raise UnmatchedPatternsError(unmatched, matches)
    return matches
