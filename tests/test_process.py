from __future__ import annotations

import io
import os
import subprocess
import sys

import pytest

from stepper.errors import ExecutionError, SpawnError
from stepper.process import Invocation, run_streamed, spawn, stream_output


def _inv(script, **kw):
    return Invocation(argv=["sh", "-c", script], env={"PATH": os.environ.get("PATH", "/usr/bin:/bin")}, **kw)


def test_lines_are_tagged_per_channel_in_order(console, capsys):
    proc = spawn(_inv("for i in 1 2 3; do echo out$i; echo err$i >&2; done"))
    assert stream_output(proc, "shell", console) == 0

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["[shell][out] out1", "[shell][out] out2", "[shell][out] out3"]
    assert captured.err.splitlines() == ["[shell][err] err1", "[shell][err] err2", "[shell][err] err3"]


def test_output_is_fully_drained_for_fast_exit(console, capsys):
    proc = spawn(_inv("seq 1 2000; exit 4"))
    assert stream_output(proc, "exec", console) == 4

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2000
    assert lines[-1] == "[exec][out] 2000"


def test_partial_last_line_and_invalid_utf8(console, capsys):
    proc = spawn(_inv("printf 'no newline \\377'"))
    assert stream_output(proc, "shell", console) == 0
    assert capsys.readouterr().out == "[shell][out] no newline \ufffd\n"


def test_run_streamed_raises_on_non_zero(console):
    with pytest.raises(ExecutionError) as exc:
        run_streamed(_inv("exit 7"), "shell", console)
    assert exc.value.exit_code == 7


def test_spawn_error_carries_system_error():
    with pytest.raises(SpawnError) as exc:
        spawn(Invocation(argv=["/nonexistent/binary"]))
    assert exc.value.details["errno"] is not None


def test_read_error_is_a_warning_not_a_failure(console, capsys):
    class BrokenStream(io.BytesIO):
        def readline(self, *args):
            raise OSError("boom")

    proc = subprocess.Popen([sys.executable, "-c", "pass"], stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    proc.stdout.close()
    proc.stdout = BrokenStream()

    assert stream_output(proc, "shell", console) == 0
    assert "stream read failed: boom" in capsys.readouterr().err


def test_invocation_line():
    assert Invocation(argv=["echo", "a b"]).line == "echo 'a b'"
    assert Invocation(argv=["sh", "-c", "x"], display="x").line == "x"
