"""StatusCollector: builds the status record for a single repository."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from gitski.models import RepositoryStatus, ScanConfig
from gitski.protocols import GitRepository
from gitski.repository import GitPythonRepository

RepositoryFactory = Callable[[Path], GitRepository]


def relative_to_root(path: Path, root: Path) -> str:
    """Path re-expressed relative to the scan root ('.' for the root itself)."""
    return os.path.relpath(path, root) if Path(path) != Path(root) else '.'


class StatusCollector:
    """Responsible for querying one repository's state"""

    def __init__(self, root: Path, repository_factory: RepositoryFactory):
        """Create a collector. repository_factory opens a GitRepository for a path."""
        self.root = Path(root)
        self.repository_factory = repository_factory

    @classmethod
    def from_config(cls, config: ScanConfig) -> StatusCollector:
        """Collector backed by GitPython with the configured timeouts."""
        def factory(path: Path) -> GitRepository:
            return GitPythonRepository(
                path,
                timeout=config.status_timeout,
                last_commit_timeout=config.last_commit_timeout,
            )
        return cls(config.root, factory)

    def collect(self, repo_path: Path, want_last_commit: bool = False) -> RepositoryStatus:
        """Run each status query independently; a failed query only affects its own field."""
        repo = self.repository_factory(repo_path)
        return RepositoryStatus(
            path=repo_path,
            status=repo.status_porcelain(),
            branch=repo.current_branch(),
            unpushed=repo.unpushed_count(),
            stash_count=repo.stash_count(),
            last_commit=repo.last_commit() if want_last_commit else None,
            rel_path=relative_to_root(repo_path, self.root),
        )
