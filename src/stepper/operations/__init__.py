"""Handlers for the four operation kinds, keyed by their document key."""
from __future__ import annotations

from . import conf, exec_cmd, shell, ssh

HANDLERS = {
    "shell": shell.run_step,
    "exec": exec_cmd.run_step,
    "ssh": ssh.run_step,
    "conf": conf.run_step,
}

__all__ = ["HANDLERS"]
