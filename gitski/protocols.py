"""Protocols for dependency injection."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from gitski.models import LastCommit

ProgressCallback = Callable[[int, int], None]


class GitRepository(Protocol):
    """Protocol for the read-only git queries a scan needs.

    Implementations never raise: a failed query returns the neutral default
    for its field.
    """

    def status_porcelain(self) -> str: ...
    def current_branch(self) -> str: ...
    def unpushed_count(self) -> int: ...
    def stash_count(self) -> int: ...
    def last_commit(self) -> LastCommit | None: ...

    @property
    def path(self) -> Path: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def muted(self, message: str, indent: int = 0) -> None: ...
    def debug(self, message: str) -> None: ...
