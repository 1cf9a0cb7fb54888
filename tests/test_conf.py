from __future__ import annotations

import stat

import pytest

from stepper.errors import FilesystemError
from stepper.model import Step
from stepper.operations import conf


def _step(**fields):
    return Step.model_validate({"name": "config", "conf": fields})


def test_dry_run_previews_without_writing(make_executor, tmp_path, capsys):
    dest = tmp_path / "out" / "app.ini"
    ex = make_executor({"user": "alice"}, dry_run=True)
    outcome = ex.run_step(_step(dest=str(dest), template="user={{ user }}\n"), 0)

    assert outcome.ok
    assert not dest.exists()
    assert not dest.parent.exists()
    out = capsys.readouterr().out
    assert f"-> write {dest}" in out
    assert "Content preview:" in out
    assert "user=alice" in out


def test_writes_rendered_content_and_creates_parents(make_executor, tmp_path):
    dest = tmp_path / "a" / "b" / "app.ini"
    ex = make_executor({"dir": str(tmp_path), "user": "alice"})
    outcome = ex.run_step(_step(dest="{{ dir }}/a/b/app.ini", template="user={{ user }}\n"), 0)

    assert outcome.ok
    assert dest.read_text() == "user=alice\n"


def test_overwrites_fully(make_executor, tmp_path):
    dest = tmp_path / "app.ini"
    dest.write_text("a much longer previous content\n")
    ex = make_executor()
    assert ex.run_step(_step(dest=str(dest), template="short"), 0).ok
    assert dest.read_text() == "short"


def test_backup_keeps_prior_content(make_executor, tmp_path):
    dest = tmp_path / "app.ini"
    dest.write_text("old\n")
    ex = make_executor()
    assert ex.run_step(_step(dest=str(dest), template="new\n", backup=True), 0).ok

    assert (tmp_path / "app.ini.bak").read_text() == "old\n"
    assert dest.read_text() == "new\n"


def test_backup_without_existing_file(make_executor, tmp_path):
    dest = tmp_path / "app.ini"
    ex = make_executor()
    assert ex.run_step(_step(dest=str(dest), template="new", backup=True), 0).ok
    assert not (tmp_path / "app.ini.bak").exists()


def test_failed_backup_does_not_overwrite(make_executor, tmp_path, monkeypatch):
    dest = tmp_path / "app.ini"
    dest.write_text("old\n")

    def broken_copy(*args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(conf.shutil, "copy2", broken_copy)
    ex = make_executor()
    outcome = ex.run_step(_step(dest=str(dest), template="new\n", backup=True), 0)

    assert isinstance(outcome.error, FilesystemError)
    assert dest.read_text() == "old\n"


def test_mode_is_applied(make_executor, tmp_path):
    dest = tmp_path / "secret.env"
    ex = make_executor()
    assert ex.run_step(_step(dest=str(dest), template="x", mode="0600"), 0).ok
    assert stat.S_IMODE(dest.stat().st_mode) == 0o600


@pytest.mark.parametrize("mode", ["rw-r--r--", "0999", "", "77777"])
def test_malformed_mode_falls_back(make_executor, tmp_path, capsys, mode):
    dest = tmp_path / "app.ini"
    ex = make_executor()
    assert ex.run_step(_step(dest=str(dest), template="x", mode=mode), 0).ok
    assert stat.S_IMODE(dest.stat().st_mode) == conf.DEFAULT_MODE
    assert "WARNING" in capsys.readouterr().err


def test_write_failure_is_filesystem_error(make_executor, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    ex = make_executor()
    outcome = ex.run_step(_step(dest=str(blocker / "child.ini"), template="x"), 0)
    assert isinstance(outcome.error, FilesystemError)
