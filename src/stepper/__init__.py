"""
stepper - run declarative shell/exec/ssh/conf steps from a YAML document.

Steps share a read-only variable context (document globals plus an ENV
snapshot) used to render every field right before it executes.
"""
from .context import VariableContext
from .environment import compose
from .errors import (
    ConfigurationError,
    DocumentError,
    ExecutionError,
    FilesystemError,
    RenderError,
    SpawnError,
    StepError,
    TransportError,
    UnsupportedAuthError,
)
from .loader import load_document, parse_document
from .model import ConfSpec, Document, ExecSpec, ShellSpec, SshAuth, SshSpec, Step
from .runner import Executor, RunResult, StepOutcome, run_document, run_steps
from .template import Renderer, render, render_map

__version__ = "0.1.0"
__all__ = [
    "VariableContext",
    "compose",
    "ConfigurationError",
    "DocumentError",
    "ExecutionError",
    "FilesystemError",
    "RenderError",
    "SpawnError",
    "StepError",
    "TransportError",
    "UnsupportedAuthError",
    "load_document",
    "parse_document",
    "ConfSpec",
    "Document",
    "ExecSpec",
    "ShellSpec",
    "SshAuth",
    "SshSpec",
    "Step",
    "Executor",
    "RunResult",
    "StepOutcome",
    "run_document",
    "run_steps",
    "Renderer",
    "render",
    "render_map",
]
