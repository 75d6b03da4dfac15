"""Domain models: scan configuration, per-repository status, scan report."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

MAX_CONCURRENCY = 16
UNKNOWN_BRANCH = "unknown"

DEFAULT_IGNORE_PATTERNS = frozenset({
    "node_modules", ".venv", "venv", "env", "__pycache__", "vendor",
    "target", "build", "dist", ".next", ".nuxt", "out", ".git", ".svn",
    ".hg", "tmp", "temp", "cache", ".cache",
})


def default_concurrency() -> int:
    """CPU count, capped at 8."""
    return min(os.cpu_count() or 4, 8)


def clamp_concurrency(value: int) -> int:
    """Clamp a requested worker count into [1, MAX_CONCURRENCY]."""
    return max(1, min(int(value), MAX_CONCURRENCY))


class InvalidScanRootError(ValueError):
    """Raised when the scan root is missing or is not a directory."""


class ConfigFileError(ValueError):
    """Raised when a config file value has the wrong type or range."""


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for a single scan run"""
    root: Path = field(default_factory=lambda: Path('.'))
    verbose: bool = False
    ignore_patterns: frozenset[str] = DEFAULT_IGNORE_PATTERNS
    max_depth: int | None = None
    concurrency: int = field(default_factory=default_concurrency)
    status_timeout: float = 5.0
    last_commit_timeout: float = 2.0
    show_progress: bool = True
    json_output: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'root', Path(self.root))
        object.__setattr__(self, 'ignore_patterns', frozenset(self.ignore_patterns))
        object.__setattr__(self, 'concurrency', clamp_concurrency(self.concurrency))

    def with_updates(self, **kwargs) -> ScanConfig:
        """Return a new ScanConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return ScanConfig(**current)


@dataclass(frozen=True)
class LastCommit:
    """Author, relative date and subject of the most recent commit"""
    author: str
    date: str
    message: str


@dataclass(frozen=True)
class RepositoryStatus:
    """Immutable status record for one repository"""
    path: Path
    status: str = ""
    branch: str = UNKNOWN_BRANCH
    unpushed: int = 0
    stash_count: int = 0
    last_commit: LastCommit | None = None
    rel_path: str = "."

    @property
    def is_dirty(self) -> bool:
        """True if the working tree has uncommitted or untracked changes."""
        return bool(self.status)

    @property
    def has_unpushed(self) -> bool:
        return self.unpushed > 0

    @property
    def has_stash(self) -> bool:
        return self.stash_count > 0

    @property
    def needs_attention(self) -> bool:
        """True if the repository is dirty or has commits not on its upstream."""
        return self.is_dirty or self.has_unpushed

    def summary(self) -> str:
        """Human-readable state, e.g. 'uncommitted changes, 2 unpushed commits'."""
        parts = ["uncommitted changes" if self.is_dirty else "clean"]
        if self.has_unpushed:
            parts.append(f"{self.unpushed} unpushed commit{'s' if self.unpushed > 1 else ''}")
        if self.has_stash:
            parts.append(f"{self.stash_count} stash{'es' if self.stash_count > 1 else ''}")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'path': str(self.path),
            'rel_path': self.rel_path,
            'branch': self.branch,
            'dirty': self.is_dirty,
            'status': self.status,
            'unpushed': self.unpushed,
            'stash_count': self.stash_count,
            'last_commit': None if self.last_commit is None else {
                'author': self.last_commit.author,
                'date': self.last_commit.date,
                'message': self.last_commit.message,
            },
        }


@dataclass
class ScanReport:
    """Ordered scan results plus timings"""
    root: Path
    statuses: list[RepositoryStatus] = field(default_factory=list)
    scan_seconds: float = 0.0
    total_seconds: float = 0.0

    def attention_count(self) -> int:
        """Number of repositories that are dirty or have unpushed commits."""
        return sum(1 for s in self.statuses if s.needs_attention)

    def has_attention(self) -> bool:
        return self.attention_count() > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'root': str(self.root),
            'repositories': [s.to_dict() for s in self.statuses],
            'total': len(self.statuses),
            'needs_attention': self.attention_count(),
            'scan_ms': round(self.scan_seconds * 1000),
            'total_ms': round(self.total_seconds * 1000),
        }
