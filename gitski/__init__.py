"""
gitski: find git repositories that need attention

Recursively discovers git repositories under a directory and reports, for
each one, uncommitted changes, unpushed commits and stashed work.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "1.0.0"

# Re-export public API so `from gitski import X` keeps working.
from gitski.cli import main  # noqa: E402
from gitski.collector import StatusCollector  # noqa: E402
from gitski.config import (  # noqa: E402
    build_ignore_patterns,
    create_argument_parser,
    load_config_file,
    split_patterns,
    validate_file_config,
)
from gitski.models import (  # noqa: E402
    DEFAULT_IGNORE_PATTERNS,
    MAX_CONCURRENCY,
    UNKNOWN_BRANCH,
    ConfigFileError,
    InvalidScanRootError,
    LastCommit,
    RepositoryStatus,
    ScanConfig,
    ScanReport,
)
from gitski.orchestrator import ScanOrchestrator, check_root  # noqa: E402
from gitski.output import ConsoleOutputHandler, NullOutputHandler  # noqa: E402
from gitski.protocols import GitRepository, OutputHandler, ProgressCallback  # noqa: E402
from gitski.reporter import SummaryReporter  # noqa: E402
from gitski.repository import GitPythonRepository  # noqa: E402
from gitski.scanner import RepositoryScanner, is_repository, should_ignore  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "DEFAULT_IGNORE_PATTERNS",
    "MAX_CONCURRENCY",
    "UNKNOWN_BRANCH",
    "ConfigFileError",
    "InvalidScanRootError",
    "LastCommit",
    "RepositoryStatus",
    "ScanConfig",
    "ScanReport",
    # Protocols
    "GitRepository",
    "OutputHandler",
    "ProgressCallback",
    # Implementations
    "GitPythonRepository",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    # Scanning
    "RepositoryScanner",
    "is_repository",
    "should_ignore",
    # Services
    "StatusCollector",
    "ScanOrchestrator",
    "SummaryReporter",
    "check_root",
    # Config / CLI
    "build_ignore_patterns",
    "create_argument_parser",
    "load_config_file",
    "split_patterns",
    "validate_file_config",
    "main",
]
