# operations/ssh.py
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING, Dict, List

from ..environment import compose
from ..errors import ExecutionError, TransportError, UnsupportedAuthError
from ..model import DEFAULT_SSH_USER, SshSpec, Step
from ..process import Invocation, run_streamed

if TYPE_CHECKING:
    from ..runner import Executor

KIND = "ssh"

SSH_BINARY = "ssh"

# ssh(1): "exits with the exit status of the remote command or with 255 if an error occurred"
TRANSPORT_FAILURE_STATUS = 255

NO_HOST_CHECK = ["-o", "StrictHostKeyChecking=no", "-o", "UserKnownHostsFile=/dev/null"]


def host_check_flags(mode: str) -> List[str]:
    """
    Map check_host to ssh options.

      no          -> verification disabled
      yes         -> ssh defaults (known_hosts enforced)
      fingerprint -> treated as "no" until pinning is implemented
    """
    if mode == "yes":
        return []
    return list(NO_HOST_CHECK)


def remote_command(command: str, env: Dict[str, str]) -> str:
    """Prefix the command with `KEY=<quoted value>` assignments, in mapping order."""
    if not env:
        return command
    assigns = " ".join(f"{key}={shlex.quote(value)}" for key, value in env.items())
    return f"{assigns} {command}"


def build_invocation(executor: Executor, step: Step, spec: SshSpec) -> Invocation:
    """
    Build the `ssh` argv.

    Raises:
      UnsupportedAuthError: password auth has no non-interactive path
    """
    renderer, ctx = executor.renderer, executor.context

    if spec.auth is not None and spec.auth.kind == "password":
        raise UnsupportedAuthError(
            message="password authentication cannot be performed non-interactively; use kind: key or an ssh agent",
            field="ssh.auth",
        )

    host = renderer.render(spec.host, ctx, field="ssh.host")
    user = renderer.render(spec.user, ctx, field="ssh.user") if spec.user else DEFAULT_SSH_USER
    command = renderer.render(spec.command, ctx, field="ssh.command")
    remote_env = renderer.render_map(spec.env, ctx, field="ssh.env")

    argv = [SSH_BINARY]
    argv.extend(host_check_flags(spec.check_host))
    if spec.auth is not None and spec.auth.kind == "key" and spec.auth.key_path:
        argv.extend(["-i", renderer.render(spec.auth.key_path, ctx, field="ssh.auth.key_path")])
    argv.append(f"{user}@{host}")
    argv.append(remote_command(command, remote_env))

    # step-level env reaches the local ssh client (agent socket, config); ssh.env goes remote
    local_env = compose(step.env, None, ctx, renderer=renderer)

    return Invocation(argv=argv, env=local_env, display=" ".join(argv))


def run_step(executor: Executor, step: Step, spec: SshSpec, index: int) -> None:
    invocation = build_invocation(executor, step, spec)
    executor.console.print_step_header(index, step.title(KIND), invocation.line)
    if spec.check_host == "fingerprint":
        executor.console.print_warning(
            f"step {index + 1}: check_host=fingerprint is not enforced; host key verification is disabled"
        )

    if executor.dry_run:
        return

    try:
        run_streamed(invocation, KIND, executor.console)
    except ExecutionError as e:
        if e.exit_code == TRANSPORT_FAILURE_STATUS:
            raise TransportError(
                message=f"ssh could not connect or authenticate to {invocation.argv[-2]}",
                exit_code=e.exit_code,
            ) from e
        raise ExecutionError(
            message=f"remote command exited with status {e.exit_code}",
            exit_code=e.exit_code,
        ) from e
