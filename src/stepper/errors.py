# errors.py
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Any, ClassVar, Dict, Optional


@dataclass(eq=False)
class StepError(Exception):
    """
    Structured step error with enough context for:
      - clean CLI output ("which step, which field, why")
      - attributing a failure to a step index after the fact
      - debugging without full tracebacks
    """
    message: str
    step: Optional[int] = None
    field: Optional[str] = None
    details: Dict[str, Any] = dc_field(default_factory=dict)

    kind: ClassVar[str] = "step_error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.step is not None:
            lines.append(f"step={self.step + 1}")
        if self.field:
            lines.append(f"field={self.field}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)

    def at_step(self, index: int) -> "StepError":
        """Attach the 0-based step index unless one is already set."""
        if self.step is None:
            self.step = index
        return self


class RenderError(StepError):
    """Undefined variable or malformed template syntax."""
    kind = "render_error"


class ConfigurationError(StepError):
    """Step has zero or ambiguous operations, or a value is unusable."""
    kind = "configuration_error"


class DocumentError(ConfigurationError):
    """The document could not be read, parsed or validated."""
    kind = "document_error"


class SpawnError(StepError):
    """Executable not found / not executable / permission denied at spawn time."""
    kind = "spawn_error"


@dataclass(eq=False)
class ExecutionError(StepError):
    """The action ran and exited with a non-zero status."""
    exit_code: int = 1

    kind: ClassVar[str] = "execution_error"

    def __str__(self) -> str:
        return f"{super().__str__()}\nexit_code={self.exit_code}"


class TransportError(ExecutionError):
    """The remote client could not reach or authenticate against the host."""
    kind = "transport_error"


class FilesystemError(StepError):
    """Backup copy, write or permission change failed."""
    kind = "filesystem_error"


class UnsupportedAuthError(StepError):
    """Requested remote authentication has no non-interactive execution path."""
    kind = "unsupported_auth"
