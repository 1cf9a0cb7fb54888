# operations/shell.py
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from ..environment import compose
from ..errors import ConfigurationError
from ..model import DEFAULT_SHELL, ShellSpec, Step
from ..process import Invocation, run_streamed

if TYPE_CHECKING:
    from ..runner import Executor

KIND = "shell"


def build_invocation(executor: Executor, step: Step, spec: ShellSpec) -> Invocation:
    """Render the command and append it as the last argument of the shell prefix."""
    renderer, ctx = executor.renderer, executor.context

    command = renderer.render(spec.command, ctx, field="shell.command")
    try:
        prefix = shlex.split(spec.shell or DEFAULT_SHELL)
    except ValueError as e:
        raise ConfigurationError(message=f"shell prefix is not parseable: {e}", field="shell.shell") from e
    if not prefix:
        raise ConfigurationError(message="shell prefix is empty", field="shell.shell")

    env = compose(step.env, spec.env, ctx, renderer=renderer, operation_field="shell.env")
    cwd = renderer.render(spec.cwd, ctx, field="shell.cwd") if spec.cwd else "."

    return Invocation(argv=prefix + [command], env=env, cwd=cwd, display=command)


def run_step(executor: Executor, step: Step, spec: ShellSpec, index: int) -> None:
    invocation = build_invocation(executor, step, spec)
    executor.console.print_step_header(index, step.title(KIND), invocation.line)

    if executor.dry_run:
        return

    run_streamed(invocation, KIND, executor.console)
