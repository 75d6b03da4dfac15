"""Concrete GitPython-based repository implementation."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, GitCommandNotFound
from git.cmd import Git

from gitski.models import UNKNOWN_BRANCH, LastCommit

GIT_ERRORS = (GitCommandError, GitCommandNotFound, OSError)

# ASCII unit separator between log fields
_FIELD_SEP = '\x1f'
_LAST_COMMIT_FORMAT = f'--format=%an{_FIELD_SEP}%ar{_FIELD_SEP}%s'


class GitPythonRepository:
    """Read-only status queries through GitPython's git command wrapper.

    Every query runs its own git process, killed after its timeout. Failures
    are logged at debug level and degrade to the field's neutral default.
    """

    def __init__(self, repo_path: Path, timeout: float = 5.0, last_commit_timeout: float = 2.0):
        """Bind a git command wrapper to the repository's working tree."""
        self._path = Path(repo_path)
        self._git = Git(str(self._path))
        self._timeout = timeout
        self._last_commit_timeout = last_commit_timeout
        self._logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        """Absolute path to the repository root."""
        return self._path

    def _run(self, command: str, *args: str, timeout: float | None = None) -> str | None:
        """Run `git <command> <args>` and return stdout, or None on any failure."""
        try:
            return getattr(self._git, command)(
                *args, kill_after_timeout=timeout or self._timeout
            )
        except GIT_ERRORS as e:
            self._logger.debug("git %s failed in %s: %s", command, self._path, e)
            return None

    def status_porcelain(self) -> str:
        """Raw `git status --porcelain` output; empty means clean."""
        return self._run('status', '--porcelain') or ""

    def current_branch(self) -> str:
        """Checked-out branch name ('HEAD' when detached), or 'unknown'."""
        branch = self._run('rev_parse', '--abbrev-ref', 'HEAD')
        return branch.strip() if branch and branch.strip() else UNKNOWN_BRANCH

    def unpushed_count(self) -> int:
        """Commits on HEAD not on its upstream. 0 if no upstream is configured."""
        out = self._run('rev_list', '--count', '@{u}..HEAD')
        try:
            return max(int(out.strip()), 0) if out else 0
        except ValueError:
            return 0

    def stash_count(self) -> int:
        """Number of stash entries."""
        out = self._run('stash', 'list')
        if not out:
            return 0
        return len([line for line in out.splitlines() if line.strip()])

    def last_commit(self) -> LastCommit | None:
        """Author, relative date and subject of HEAD, or None if unavailable."""
        out = self._run('log', '-1', _LAST_COMMIT_FORMAT, timeout=self._last_commit_timeout)
        if not out:
            return None
        parts = out.strip().split(_FIELD_SEP, 2)
        if len(parts) != 3:
            return None
        author, date, message = parts
        return LastCommit(author=author, date=date, message=message)
