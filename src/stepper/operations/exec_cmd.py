# operations/exec_cmd.py
from __future__ import annotations

from typing import TYPE_CHECKING

from ..environment import compose
from ..model import ExecSpec, Step
from ..process import Invocation, run_streamed

if TYPE_CHECKING:
    from ..runner import Executor

KIND = "exec"


def build_invocation(executor: Executor, step: Step, spec: ExecSpec) -> Invocation:
    """
    Render program and each argument on its own.

    No shell is involved: an argument containing spaces or quotes stays one argv entry.
    """
    renderer, ctx = executor.renderer, executor.context

    program = renderer.render(spec.cmd, ctx, field="exec.cmd")
    args = [
        renderer.render(arg, ctx, field=f"exec.args[{i}]")
        for i, arg in enumerate(spec.args)
    ]
    env = compose(step.env, spec.env, ctx, renderer=renderer, operation_field="exec.env")
    cwd = renderer.render(spec.cwd, ctx, field="exec.cwd") if spec.cwd else "."

    # display=None -> shell-quoted join of argv, for the header only
    return Invocation(argv=[program] + args, env=env, cwd=cwd)


def run_step(executor: Executor, step: Step, spec: ExecSpec, index: int) -> None:
    invocation = build_invocation(executor, step, spec)
    executor.console.print_step_header(index, step.title(KIND), invocation.line)

    if executor.dry_run:
        return

    run_streamed(invocation, KIND, executor.console)
