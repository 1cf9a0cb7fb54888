# model.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigurationError


DEFAULT_SHELL = "sh -c"
DEFAULT_SSH_USER = "root"

# Document key order doubles as the dispatch order.
OPERATION_KINDS: Tuple[str, ...] = ("shell", "exec", "ssh", "conf")


class _Spec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


def _stringify_env(value: Any) -> Any:
    # YAML turns `PORT: 8080` / `DEBUG: true` into non-strings; env values are always text
    if value is None:
        return {}
    if isinstance(value, dict):
        out = {}
        for k, v in value.items():
            if isinstance(v, bool):
                v = "true" if v else "false"
            out[str(k)] = "" if v is None else str(v)
        return out
    return value


class ShellSpec(_Spec):
    """Local command run through a shell prefix (default `sh -c`)."""
    command: str
    env: Dict[str, str] = Field(default_factory=dict)
    cwd: Optional[str] = None
    shell: Optional[str] = None

    @field_validator("env", mode="before")
    @classmethod
    def coerce_env(cls, value: Any) -> Any:
        return _stringify_env(value)


class ExecSpec(_Spec):
    """Direct exec: program + argv, no shell involved."""
    cmd: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    cwd: Optional[str] = None

    @field_validator("env", mode="before")
    @classmethod
    def coerce_env(cls, value: Any) -> Any:
        return _stringify_env(value)

    @field_validator("args", mode="before")
    @classmethod
    def coerce_args(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(a) for a in value]
        return value


class SshAuth(_Spec):
    kind: Literal["key", "password"]
    key_path: Optional[str] = None
    password: Optional[str] = None
    passphrase: Optional[str] = None


class SshSpec(_Spec):
    """Remote command executed through the system `ssh` client."""
    host: str
    user: Optional[str] = None
    auth: Optional[SshAuth] = None
    command: str
    env: Dict[str, str] = Field(default_factory=dict)
    check_host: Literal["yes", "no", "fingerprint"] = "no"

    @field_validator("env", mode="before")
    @classmethod
    def coerce_env(cls, value: Any) -> Any:
        return _stringify_env(value)

    @field_validator("check_host", mode="before")
    @classmethod
    def coerce_check_host(cls, value: Any) -> Any:
        # unquoted yes/no are YAML 1.1 booleans
        if isinstance(value, bool):
            return "yes" if value else "no"
        return "no" if value is None else value


class ConfSpec(_Spec):
    """File materialised from a template."""
    dest: str
    template: str
    backup: bool = False
    mode: Optional[str] = None  # octal text, e.g. "0644"; quote it in YAML


OperationSpec = Union[ShellSpec, ExecSpec, SshSpec, ConfSpec]


class Step(BaseModel):
    """
    One unit of work. Exactly one of shell/exec/ssh/conf must be set.

    `timeout` and `retry` are accepted for forward compatibility but not enforced.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: Optional[str] = None
    when: Optional[Union[bool, str]] = None
    timeout: Optional[int] = None
    retry: Optional[int] = None
    env: Dict[str, str] = Field(default_factory=dict)

    shell: Optional[ShellSpec] = None
    exec_: Optional[ExecSpec] = Field(default=None, alias="exec")
    ssh: Optional[SshSpec] = None
    conf: Optional[ConfSpec] = None

    @field_validator("env", mode="before")
    @classmethod
    def coerce_env(cls, value: Any) -> Any:
        return _stringify_env(value)

    def populated(self) -> List[Tuple[str, OperationSpec]]:
        specs = {
            "shell": self.shell,
            "exec": self.exec_,
            "ssh": self.ssh,
            "conf": self.conf,
        }
        return [(kind, specs[kind]) for kind in OPERATION_KINDS if specs[kind] is not None]

    def operation(self, index: int) -> Tuple[str, OperationSpec]:
        """
        Resolve the step to its single (kind, spec) pair.

        Raises:
            ConfigurationError: if no operation or more than one is populated
        """
        found = self.populated()
        if not found:
            raise ConfigurationError(
                message="step has no operation (expected one of: shell, exec, ssh, conf)",
                step=index,
            )
        if len(found) > 1:
            raise ConfigurationError(
                message="step has more than one operation",
                step=index,
                details={"operations": ", ".join(kind for kind, _ in found)},
            )
        return found[0]

    def title(self, kind: str) -> str:
        return self.name or kind


class Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    version: int
    globals: Dict[str, Any] = Field(default_factory=dict)
    steps: List[Step] = Field(default_factory=list)

    @field_validator("globals", mode="before")
    @classmethod
    def none_globals(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("steps", mode="before")
    @classmethod
    def none_steps(cls, value: Any) -> Any:
        return [] if value is None else value
