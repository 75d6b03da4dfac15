"""Output handler implementations: console and null."""

from __future__ import annotations

from typing import TextIO

from colorama import Fore, Style
from tqdm import tqdm


class ConsoleOutputHandler:
    """Console output with colors, written through tqdm so progress bars stay intact."""

    def __init__(self, verbose: bool = False, stream: TextIO | None = None):
        """Create a console handler. stream defaults to the current sys.stdout."""
        self.verbose = verbose
        self.stream = stream

    def _write(self, message: str, indent: int = 0, style: str = "") -> None:
        """Indent, then wrap the message in an ANSI style if one is given."""
        text = f"{style}{message}{Style.RESET_ALL}" if style else message
        tqdm.write("  " * indent + text, file=self.stream)

    def info(self, message: str, indent: int = 0) -> None:
        self._write(message, indent)

    def success(self, message: str, indent: int = 0) -> None:
        self._write(message, indent, Fore.GREEN)

    def warning(self, message: str, indent: int = 0) -> None:
        self._write(message, indent, Fore.YELLOW)

    def error(self, message: str, indent: int = 0) -> None:
        self._write(message, indent, Fore.RED)

    def muted(self, message: str, indent: int = 0) -> None:
        """Dimmed secondary line, e.g. last-commit details."""
        self._write(message, indent, Style.DIM)

    def debug(self, message: str) -> None:
        """Cyan debug line, only when verbose is enabled."""
        if self.verbose:
            self._write(f"[DEBUG] {message}", style=Fore.CYAN)


class NullOutputHandler:
    """Silent output handler for testing and JSON mode."""

    def _discard(self, message: str, indent: int = 0) -> None:
        pass

    info = success = warning = error = muted = _discard

    def debug(self, message: str) -> None:
        pass
