"""Console output formatting utilities for stepper."""

from __future__ import annotations

import sys
import threading
from typing import List, Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, verbose: bool = False):
        """
        Initialize console formatter.

        Args:
            verbose: If True, show internal diagnostics and stack traces
        """
        self.verbose = verbose
        # stdout and stderr drains print from different threads
        self._lock = threading.Lock()

    def _emit(self, text: str, *, err: bool = False) -> None:
        stream = sys.stderr if err else sys.stdout
        with self._lock:
            print(text, file=stream, flush=True)

    def print_run_started(self, document: str, step_count: int, dry_run: bool) -> None:
        """Print run start information."""
        self._emit("RUN STARTED" + (" (dry-run)" if dry_run else ""))
        self._emit(f"Document: {document}")
        self._emit(f"Steps: {step_count}")

    def print_step_header(self, index: int, title: str, rendered: str) -> None:
        """
        Print the banner for a step and the fully rendered action line.

        Identical in dry-run and real-run so previews can be trusted.
        """
        self._emit(f"\n==[{index + 1}] {title} ==")
        self._emit(f"-> {rendered}")

    def print_output(self, kind: str, channel: str, line: str) -> None:
        """Print one line of child output tagged as [kind][out|err]."""
        self._emit(f"[{kind}][{channel}] {line}", err=(channel == "err"))

    def print_preview(self, content: str) -> None:
        """Print would-be file content in dry-run mode."""
        self._emit("Content preview:")
        self._emit(content)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._emit(message)

    def print_warning(self, message: str) -> None:
        """Print a non-fatal warning."""
        self._emit(f"WARNING: {message}", err=True)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if verbose mode enabled)."""
        if self.verbose:
            self._emit(f"[DEBUG] {message}", err=True)

    def print_step_failed(self, index: int, reason: str) -> None:
        """Print the failing step and its cause."""
        self._emit(f"\nSTEP FAILED: {index + 1}", err=True)
        if self.verbose:
            self._emit(f"Error details: {reason}", err=True)
        else:
            self._emit(f"Error: {reason.splitlines()[0] if reason else 'Unknown error'}", err=True)
            for extra in reason.splitlines()[1:]:
                self._emit(f"  {extra}", err=True)

    def print_results(self, total: int, ran: int, skipped: int, failed: Optional[int]) -> None:
        """Print final results summary."""
        self._emit("\n" + "=" * 40)
        self._emit("RESULTS")
        self._emit("=" * 40)
        self._emit(f"  steps: {total}")
        self._emit(f"  ok: {ran}")
        self._emit(f"  skipped: {skipped}")
        if failed is not None:
            self._emit(f"  failed: step {failed + 1}")
            self._emit(f"  not run: {total - failed - 1}")
        self._emit("STATUS: " + ("failed" if failed is not None else "success"))

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[List[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        self._emit(f"\nERROR: {title}", err=True)
        self._emit(message, err=True)
        if details:
            for detail in details:
                self._emit(f"  {detail}", err=True)
        if suggestion:
            self._emit(f"\n{suggestion}", err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in verbose mode."""
        if self.verbose:
            import traceback
            with self._lock:
                traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        else:
            self._emit(f"Error: {exc}", err=True)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
