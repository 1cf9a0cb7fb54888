# process.py
from __future__ import annotations

import shlex
import subprocess
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import IO, Dict, List, Optional

from .errors import ExecutionError, SpawnError
from .ui.console import Console, get_console


@dataclass(frozen=True)
class Invocation:
    """A fully rendered child process: what to run, where, with which environment."""
    argv: List[str]
    env: Dict[str, str] = field(default_factory=dict)
    cwd: str = "."
    display: Optional[str] = None

    @property
    def line(self) -> str:
        """Human-readable form for headers; never used to spawn."""
        return self.display if self.display is not None else shlex.join(self.argv)


# ----------------------------------------------------------------------
# Output streaming
# ----------------------------------------------------------------------

def _drain(stream: IO[bytes], kind: str, channel: str, console: Console) -> None:
    """Print every line of `stream` as it arrives. Read errors are reported, not raised."""
    try:
        for raw in iter(stream.readline, b""):
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            console.print_output(kind, channel, line)
    except (OSError, ValueError) as e:
        console.print_warning(f"[{kind}][{channel}] stream read failed: {e}")
    finally:
        stream.close()


def stream_output(proc: subprocess.Popen, kind: str, console: Optional[Console] = None) -> int:
    """
    Drain stdout and stderr concurrently while waiting for the process to exit.

    Three tasks run side by side (stdout drain, stderr drain, exit wait); this
    returns only after all three finished, so fast-exiting children never lose
    trailing output.

    Returns:
      the child's exit status
    """
    console = console or get_console()

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix=f"stepper-{kind}") as pool:
        futures = [
            pool.submit(_drain, proc.stdout, kind, "out", console),
            pool.submit(_drain, proc.stderr, kind, "err", console),
        ]
        exit_wait = pool.submit(proc.wait)
        wait(futures + [exit_wait])

    for fut in futures:
        exc = fut.exception()
        if exc is not None:
            console.print_warning(f"[{kind}] output drain failed: {exc}")

    return exit_wait.result()


# ----------------------------------------------------------------------
# Spawning
# ----------------------------------------------------------------------

def spawn(invocation: Invocation) -> subprocess.Popen:
    """
    Start the child with piped output.

    Raises:
      SpawnError: executable missing, not executable, bad cwd, permission denied
    """
    try:
        return subprocess.Popen(
            invocation.argv,
            cwd=invocation.cwd,
            env=invocation.env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        raise SpawnError(
            message=f"could not start {invocation.argv[0]!r}: {e.strerror or e}",
            details={"errno": e.errno, "cwd": invocation.cwd},
        ) from e


def run_streamed(invocation: Invocation, kind: str, console: Optional[Console] = None) -> int:
    """
    Spawn, stream tagged output, and fail on a non-zero exit.

    Returns:
      0 on success

    Raises:
      SpawnError, ExecutionError
    """
    console = console or get_console()
    console.print_debug(f"spawn argv={invocation.argv!r} cwd={invocation.cwd}")

    proc = spawn(invocation)
    status = stream_output(proc, kind, console)

    console.print_debug(f"[{kind}] exited with status {status}")
    if status != 0:
        raise ExecutionError(
            message=f"{kind} action exited with status {status}",
            exit_code=status,
        )
    return status
