"""Repository scanner: finds git repos under a directory."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

GIT_DIR = '.git'


@lru_cache(maxsize=256)
def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    """Compile a '*' wildcard pattern into an anchored regex."""
    return re.compile('^' + re.escape(pattern).replace(r'\*', '.*') + '$')


def should_ignore(name: str, patterns: frozenset[str] | set[str]) -> bool:
    """Return True if a directory name matches an exact or '*' wildcard pattern."""
    if name in patterns:
        return True
    return any(
        _wildcard_regex(pattern).match(name)
        for pattern in patterns
        if '*' in pattern
    )


def is_repository(path: Path) -> bool:
    """Return True if path directly contains a .git directory (not a .git file)."""
    git_path = Path(path) / GIT_DIR
    try:
        return git_path.exists() and git_path.is_dir()
    except OSError:
        return False


class RepositoryScanner:
    """Responsible for finding git repositories"""

    def __init__(self, ignore_patterns: Iterable[str] = (), max_depth: int | None = None):
        """Create a scanner. max_depth=None walks the whole tree."""
        self.ignore_patterns = frozenset(ignore_patterns)
        self.max_depth = max_depth

    def find_repositories(self, search_dir: Path) -> Iterator[Path]:
        """Yield repository roots under search_dir, depth first, in name order.

        A repository is never descended into, so nested repositories and the
        .git directory itself are not walked. Directories that cannot be
        listed are skipped.
        """
        stack: list[tuple[Path, int]] = [(Path(search_dir), 0)]

        while stack:
            current, depth = stack.pop()

            if is_repository(current):
                yield current
                continue

            if self.max_depth is not None and depth >= self.max_depth:
                continue

            children = self._child_directories(current)
            for name in sorted(children, reverse=True):
                stack.append((current / name, depth + 1))

    def _child_directories(self, directory: Path) -> list[str]:
        """Names of non-ignored subdirectories; symlinks are not followed."""
        names = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if not entry.is_dir(follow_symlinks=False):
                            continue
                    except OSError:
                        continue
                    if entry.name == GIT_DIR or should_ignore(entry.name, self.ignore_patterns):
                        continue
                    names.append(entry.name)
        except OSError:
            return []
        return names
