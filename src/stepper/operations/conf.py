# operations/conf.py
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..errors import FilesystemError
from ..model import ConfSpec, Step
from ..ui.console import Console

if TYPE_CHECKING:
    from ..runner import Executor

KIND = "conf"

DEFAULT_MODE = 0o644
BACKUP_SUFFIX = ".bak"


@dataclass(frozen=True)
class FileWrite:
    """A fully rendered file materialisation."""
    dest: str
    content: str
    backup: bool = False
    mode: Optional[str] = None

    @property
    def line(self) -> str:
        return f"write {self.dest}"


def build_write(executor: Executor, spec: ConfSpec) -> FileWrite:
    renderer, ctx = executor.renderer, executor.context
    return FileWrite(
        dest=renderer.render(spec.dest, ctx, field="conf.dest"),
        content=renderer.render(spec.template, ctx, field="conf.template"),
        backup=spec.backup,
        mode=spec.mode,
    )


def parse_mode(mode: str, console: Console) -> int:
    """Parse an octal mode string; a malformed one falls back to 0644 with a warning."""
    try:
        value = int(mode, 8)
    except ValueError:
        console.print_warning(f"invalid file mode {mode!r}, using {DEFAULT_MODE:o}")
        return DEFAULT_MODE
    if not 0 <= value <= 0o7777:
        console.print_warning(f"file mode {mode!r} out of range, using {DEFAULT_MODE:o}")
        return DEFAULT_MODE
    return value


def apply_write(write: FileWrite, console: Console) -> None:
    """
    Perform the write: optional backup, parent dirs, one full write, optional chmod.

    Raises:
      FilesystemError: backup copy, directory creation, write or chmod failed.
                       A failed backup stops before the destination is touched.
    """
    path = Path(write.dest)

    if write.backup and path.exists():
        bak = f"{write.dest}{BACKUP_SUFFIX}"
        try:
            shutil.copy2(path, bak)
        except OSError as e:
            raise FilesystemError(
                message=f"backup copy failed: {e}",
                field="conf.backup",
                details={"dest": write.dest, "backup": bak},
            ) from e
        console.print_info(f"[{KIND}] backup -> {bak}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(write.content, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(
            message=f"write failed: {e}",
            field="conf.dest",
            details={"dest": write.dest},
        ) from e

    if write.mode is not None:
        mode = parse_mode(write.mode, console)
        try:
            os.chmod(path, mode)
        except OSError as e:
            raise FilesystemError(
                message=f"chmod {mode:o} failed: {e}",
                field="conf.mode",
                details={"dest": write.dest},
            ) from e

    console.print_debug(f"[{KIND}] wrote {len(write.content)} chars to {write.dest}")


def run_step(executor: Executor, step: Step, spec: ConfSpec, index: int) -> None:
    write = build_write(executor, spec)
    executor.console.print_step_header(index, step.title(KIND), write.line)

    if executor.dry_run:
        executor.console.print_preview(write.content)
        return

    apply_write(write, executor.console)
