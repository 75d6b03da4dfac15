"""SummaryReporter: prints per-repository lines and the final summary."""

from __future__ import annotations

from gitski.models import RepositoryStatus, ScanReport
from gitski.protocols import OutputHandler

CLEAN_ICON = "✅"
DIRTY_ICON = "❌"
UNPUSHED_ICON = "⚠️"


class SummaryReporter:
    """Generates and displays the scan report"""

    def __init__(self, output: OutputHandler, verbose: bool = False):
        """Create a reporter that writes to the given output handler."""
        self.output = output
        self.verbose = verbose

    def print_report(self, report: ScanReport):
        """Print one line per repository, then the summary and timing."""
        if not report.statuses:
            self.output.info("No Git repositories found.")
            return

        self.output.info("")
        for status in report.statuses:
            self._print_repository(status)

        count = report.attention_count()
        self.output.info("")
        if count:
            self.output.warning(
                f"{UNPUSHED_ICON}  Found {count} repository(s) with uncommitted changes."
            )
        else:
            self.output.success("\U0001f389 All repositories are clean!")

        self.output.info("")
        self.output.info(f"Completed in {report.total_seconds * 1000:.0f}ms")

    def _print_repository(self, status: RepositoryStatus):
        """Print the status line, plus the last commit in verbose mode."""
        line = f"{status.rel_path} → [{status.branch}] {status.summary()}"
        if status.is_dirty:
            self.output.error(f"{DIRTY_ICON} {line}")
        elif status.has_unpushed:
            self.output.warning(f"{UNPUSHED_ICON} {line}")
        else:
            self.output.success(f"{CLEAN_ICON} {line}")

        if self.verbose and status.last_commit:
            self.output.muted(f"Last commit: {status.last_commit.message}", indent=1)
            self.output.muted(
                f"By {status.last_commit.author}, {status.last_commit.date}", indent=1
            )
            self.output.info("")
