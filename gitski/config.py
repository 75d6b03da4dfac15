"""Configuration: argument parser and config file loader."""

from __future__ import annotations

import argparse
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from gitski.models import (
    DEFAULT_IGNORE_PATTERNS,
    MAX_CONCURRENCY,
    ConfigFileError,
    default_concurrency,
)

try:
    import tomllib
except ModuleNotFoundError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILENAME = '.gitskirc.toml'


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _positive_float(value: str) -> float:
    """argparse type for strictly positive floats."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: '{value}'") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


_NUMERIC_KEYS = {
    'max_depth': _positive_int,
    'concurrency': _positive_int,
    'timeout': _positive_float,
}
_BOOLEAN_KEYS = ('verbose', 'no_default_ignore', 'json_output', 'progress')


def validate_file_config(values: dict[str, Any]) -> dict[str, Any]:
    """Check config file values with the same rules as the matching CLI flags.

    Numbers may be written as TOML strings ("4"). Raises ConfigFileError on
    the first bad value.
    """
    checked = dict(values)
    for key, convert in _NUMERIC_KEYS.items():
        if key not in checked:
            continue
        value = checked[key]
        if isinstance(value, bool):
            raise ConfigFileError(f"Invalid value for '{key}' in config file: {value!r}")
        try:
            checked[key] = convert(str(value))
        except argparse.ArgumentTypeError as e:
            raise ConfigFileError(f"Invalid value for '{key}' in config file: {e}") from None

    for key in _BOOLEAN_KEYS:
        if key in checked and not isinstance(checked[key], bool):
            raise ConfigFileError(
                f"Invalid value for '{key}' in config file: expected true or false, got {checked[key]!r}"
            )

    ignore = checked.get('ignore')
    if ignore is not None and not (
        isinstance(ignore, str)
        or (isinstance(ignore, list) and all(isinstance(p, str) for p in ignore))
    ):
        raise ConfigFileError(
            f"Invalid value for 'ignore' in config file: expected a string or list of strings, got {ignore!r}"
        )
    return checked


def split_patterns(values: Iterable[str] | str | None) -> list[str]:
    """Flatten comma-separated pattern strings into a list of stripped patterns."""
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [p.strip() for value in values for p in value.split(',') if p.strip()]


def build_ignore_patterns(extra: Iterable[str], use_defaults: bool = True) -> frozenset[str]:
    """Merge custom ignore patterns with the defaults (unless disabled)."""
    base = DEFAULT_IGNORE_PATTERNS if use_defaults else frozenset()
    return base | frozenset(extra)


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all gitski flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from gitski import __version__

    defaults = ", ".join(sorted(DEFAULT_IGNORE_PATTERNS))
    parser = argparse.ArgumentParser(
        prog='gitski',
        description="Find Git repositories with uncommitted changes, unpushed commits or stashes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s ~/projects                          # Scan a directory
  %(prog)s ~/projects -v                       # Include last commit info
  %(prog)s ~/projects --max-depth 3            # Limit scan depth
  %(prog)s ~/projects --ignore "tmp,*.bak"     # Extra ignore patterns
  %(prog)s ~/projects --json                   # Machine-readable output

Default ignored directories:
  {defaults}
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('directory', nargs='?', default='.',
                       help='Directory to scan (default: current)')
    parser.add_argument('-v', '--verbose', action='store_true',
                       help='Show last commit information')
    parser.add_argument('--max-depth', type=_positive_int, default=None,
                       help='Limit directory scanning to depth N (default: unlimited)')
    parser.add_argument('--ignore', action='append', default=[],
                       help='Additional directories to ignore, comma-separated (can specify multiple)')
    parser.add_argument('--no-default-ignore', action='store_true',
                       help='Disable default ignore patterns')
    parser.add_argument('--concurrency', type=_positive_int, default=default_concurrency(),
                       help=f'Number of concurrent git operations (default: CPU count, max: {MAX_CONCURRENCY})')
    parser.add_argument('--timeout', type=_positive_float, default=5.0,
                       help='Timeout in seconds for each git status query (default: 5)')
    parser.add_argument('--json', dest='json_output', action='store_true',
                       help='Output results as JSON (suppresses normal output)')
    parser.add_argument('--no-progress', dest='progress', action='store_false',
                       help='Do not show the progress bar')
    parser.add_argument('--config', type=str, default=None,
                       help=f'Path to config file (default: {CONFIG_FILENAME} in scan dir or home)')

    return parser


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load .gitskirc.toml from explicit path, search dir, or home dir.

    Returns empty dict if not found or tomllib is unavailable.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]
    for path in candidates:
        if path.is_file():
            if tomllib is None:
                print(f"Warning: Found {path} but tomllib/tomli not available (Python 3.11+ or pip install tomli). Ignoring.")
                return {}
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}
