"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from colorama import Fore, Style

from gitski.config import (
    build_ignore_patterns,
    create_argument_parser,
    load_config_file,
    split_patterns,
    validate_file_config,
)
from gitski.models import ConfigFileError, InvalidScanRootError, ScanConfig
from gitski.orchestrator import ScanOrchestrator, check_root
from gitski.output import ConsoleOutputHandler, NullOutputHandler
from gitski.reporter import SummaryReporter


def main(argv: list[str] | None = None):
    """Main entry point"""
    parser = create_argument_parser()
    argv = sys.argv[1:] if argv is None else argv
    args = parser.parse_args(argv)

    scan_root = Path(args.directory).expanduser()
    try:
        check_root(scan_root)
        file_config = validate_file_config(load_config_file(scan_root, args.config))
    except (InvalidScanRootError, ConfigFileError) as e:
        print(f"{Fore.RED}Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        sys.exit(1)

    # Determine which args were explicitly set on CLI
    cli_explicit = set()
    for action in parser._actions:
        if action.dest in ('help', 'version'):
            continue
        for opt_string in action.option_strings:
            if any(arg == opt_string or arg.startswith(opt_string + '=') for arg in argv):
                cli_explicit.add(action.dest)
                break

    def effective(dest: str, toml_key: str):
        if dest in cli_explicit:
            return getattr(args, dest)
        if toml_key in file_config:
            return file_config[toml_key]
        return getattr(args, dest)

    ignore_patterns = build_ignore_patterns(
        split_patterns(effective('ignore', 'ignore')),
        use_defaults=not effective('no_default_ignore', 'no_default_ignore'),
    )

    json_output = effective('json_output', 'json_output')
    config = ScanConfig(
        root=scan_root,
        verbose=effective('verbose', 'verbose'),
        ignore_patterns=ignore_patterns,
        max_depth=effective('max_depth', 'max_depth'),
        concurrency=effective('concurrency', 'concurrency'),
        status_timeout=effective('timeout', 'timeout'),
        show_progress=effective('progress', 'progress') and not json_output,
        json_output=json_output,
    )

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = NullOutputHandler() if config.json_output else ConsoleOutputHandler(verbose=config.verbose)
    orchestrator = ScanOrchestrator(config, output)

    try:
        output.info("Scanning for Git repositories...")
        report = orchestrator.run()

        if config.json_output:
            print(json.dumps(report.to_dict(), indent=2))
        else:
            SummaryReporter(output, verbose=config.verbose).print_report(report)

        sys.exit(0)

    except KeyboardInterrupt:
        if not config.json_output:
            output.warning("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        if config.json_output:
            print(json.dumps({'error': str(e)}, indent=2))
        else:
            output.error(f"\nUnexpected error: {e}")
            if config.verbose:
                import traceback
                traceback.print_exc()
        sys.exit(1)
