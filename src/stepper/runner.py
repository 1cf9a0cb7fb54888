# runner.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .context import VariableContext
from .errors import StepError
from .model import Document, Step
from .operations import HANDLERS
from .template import Renderer
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Outcomes
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class StepOutcome:
    """
    Result of one step:
      - "ok"       action (or preview) completed
      - "skipped"  skip-condition was false
      - "failed"   see `error`
    """
    index: int
    status: str
    kind: Optional[str] = None
    error: Optional[StepError] = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


@dataclass
class RunResult:
    outcomes: List[StepOutcome] = field(default_factory=list)
    total: int = 0

    @property
    def failed(self) -> Optional[StepOutcome]:
        for outcome in self.outcomes:
            if not outcome.ok:
                return outcome
        return None

    @property
    def exit_code(self) -> int:
        return 0 if self.failed is None else 1

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)


# ----------------------------------------------------------------------
# Dispatcher
# ----------------------------------------------------------------------

class Executor:
    """Renders and dispatches single steps against one VariableContext."""

    def __init__(
        self,
        context: VariableContext,
        *,
        dry_run: bool = False,
        verbose: bool = False,
        console: Optional[Console] = None,
        renderer: Optional[Renderer] = None,
    ):
        self.context = context
        self.dry_run = dry_run
        self.verbose = verbose
        self.console = console or get_console()
        if verbose:
            self.console.verbose = True
        self.renderer = renderer or Renderer()

    def run_step(self, step: Step, index: int) -> StepOutcome:
        """
        Run one step. Never raises StepError: failures come back as an outcome
        carrying the 0-based index and the cause.
        """
        try:
            if not self.renderer.render_condition(step.when, self.context):
                self.console.print_debug(f"step {index + 1} skipped (when is false)")
                return StepOutcome(index=index, status="skipped")

            kind, spec = step.operation(index)

            if step.timeout is not None or step.retry is not None:
                self.console.print_debug(
                    f"step {index + 1}: timeout/retry are accepted but not enforced"
                )

            HANDLERS[kind](self, step, spec, index)
        except StepError as e:
            return StepOutcome(index=index, status="failed", error=e.at_step(index))

        return StepOutcome(index=index, status="ok", kind=kind)


# ----------------------------------------------------------------------
# Run loop
# ----------------------------------------------------------------------

def run_steps(executor: Executor, steps: List[Step]) -> RunResult:
    """Run steps in order; the first failure stops the loop."""
    result = RunResult(total=len(steps))
    for index, step in enumerate(steps):
        outcome = executor.run_step(step, index)
        result.outcomes.append(outcome)
        if not outcome.ok:
            executor.console.print_step_failed(index, str(outcome.error))
            break
    return result


def run_document(
    document: Document,
    *,
    dry_run: bool = False,
    verbose: bool = False,
    environ: Optional[Mapping[str, str]] = None,
    console: Optional[Console] = None,
) -> RunResult:
    """
    Build the VariableContext once and run every step of `document`.

    `environ` replaces the process environment snapshot (tests, embedding).
    """
    context = VariableContext.from_document(document, environ)
    executor = Executor(context, dry_run=dry_run, verbose=verbose, console=console)
    return run_steps(executor, document.steps)
