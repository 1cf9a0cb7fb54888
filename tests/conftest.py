# tests/conftest.py
"""
Shared fixtures: a fake environment snapshot (PATH only, so children can
still find sh/echo/false) and an executor factory.
"""
from __future__ import annotations

import os

import pytest

from stepper.context import VariableContext
from stepper.runner import Executor
from stepper.ui.console import Console


@pytest.fixture
def environ():
    return {"PATH": os.environ.get("PATH", "/usr/bin:/bin"), "STEPPER_TEST": "1"}


@pytest.fixture
def console():
    return Console(verbose=False)


@pytest.fixture
def make_executor(environ, console):
    def _make(globals=None, *, dry_run=False, env=None):
        context = VariableContext(globals or {}, env if env is not None else environ)
        return Executor(context, dry_run=dry_run, console=console)
    return _make
