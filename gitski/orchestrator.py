"""ScanOrchestrator: coordinates discovery and status collection."""

from __future__ import annotations

import concurrent.futures
import logging
import time
from pathlib import Path

from tqdm import tqdm

from gitski.collector import StatusCollector, relative_to_root
from gitski.models import InvalidScanRootError, RepositoryStatus, ScanConfig, ScanReport
from gitski.protocols import OutputHandler, ProgressCallback
from gitski.scanner import RepositoryScanner

logger = logging.getLogger(__name__)


def check_root(root: Path) -> None:
    """Fail fast if the scan root does not exist or is not a directory."""
    if not root.exists():
        raise InvalidScanRootError(f"Path '{root}' does not exist.")
    if not root.is_dir():
        raise InvalidScanRootError(f"Path '{root}' is not a directory.")


class ScanOrchestrator:
    """Main orchestrator - walks the tree once, then collects status in batches"""

    def __init__(
        self,
        config: ScanConfig,
        output: OutputHandler,
        collector: StatusCollector = None,
        progress: ProgressCallback = None,
    ):
        """Create an orchestrator. collector defaults to a GitPython-backed one."""
        self.config = config
        self.output = output
        self.collector = collector or StatusCollector.from_config(config)
        self.progress = progress
        self.scanner = RepositoryScanner(config.ignore_patterns, config.max_depth)

    def run(self) -> ScanReport:
        """Discover repositories under the configured root and collect their status."""
        root = self.config.root
        check_root(root)

        report = ScanReport(root=root)
        started = time.perf_counter()

        repos = list(self.scanner.find_repositories(root))
        report.scan_seconds = time.perf_counter() - started

        noun = "repository" if len(repos) == 1 else "repositories"
        self.output.info(
            f"Found {len(repos)} {noun} in {report.scan_seconds * 1000:.0f}ms."
        )
        logger.debug("Scan of %s found %d repositories", root, len(repos))

        if repos:
            report.statuses = self._collect_in_batches(repos)

        report.total_seconds = time.perf_counter() - started
        return report

    def _collect_in_batches(self, repos: list[Path]) -> list[RepositoryStatus]:
        """Collect statuses batch by batch; at most `concurrency` collections run at once."""
        batch_size = self.config.concurrency
        total = len(repos)
        results: list[RepositoryStatus] = []

        with concurrent.futures.ThreadPoolExecutor(max_workers=batch_size) as executor, \
                tqdm(total=total, desc="Checking git status", unit="repo",
                     disable=not self.config.show_progress, leave=False) as pbar:
            for start in range(0, total, batch_size):
                batch = repos[start:start + batch_size]
                slots: list[RepositoryStatus | None] = [None] * len(batch)
                futures = {
                    executor.submit(self._collect_single_repo, repo_path): index
                    for index, repo_path in enumerate(batch)
                }
                for future in concurrent.futures.as_completed(futures):
                    slots[futures[future]] = future.result()

                results.extend(slots)
                pbar.update(len(batch))
                if self.progress is not None:
                    self.progress(len(results), total)

        return results

    def _collect_single_repo(self, repo_path: Path) -> RepositoryStatus:
        """Collect one repository; an unexpected error yields an all-defaults record."""
        try:
            return self.collector.collect(repo_path, want_last_commit=self.config.verbose)
        except Exception as e:
            logger.error("Unexpected error collecting %s: %s", repo_path, e)
            return RepositoryStatus(
                path=repo_path,
                rel_path=relative_to_root(repo_path, self.config.root),
            )
