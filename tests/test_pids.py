import os
import signal

import pytest

from nginxctl.runtime import pids
from nginxctl.runtime.pids import is_process_alive, is_running, kill, read_pid, resolve_signal


def _write_pid(prefix, pid):
    pid_file = prefix / "pids" / "nginx.pid"
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(f"{pid}\n")
    return pid_file


def test_missing_pid_file_is_not_running(prefix):
    pid_file = prefix / "pids" / "nginx.pid"

    assert read_pid(pid_file) is None
    assert is_running(pid_file) is False


def test_none_pid_file_is_not_running():
    assert is_running(None) is False


def test_running_for_current_pid(prefix):
    pid_file = _write_pid(prefix, os.getpid())

    assert read_pid(pid_file) == os.getpid()
    assert is_running(pid_file) is True


@pytest.mark.parametrize("content", ["", "not-a-pid", "-4", "0"])
def test_malformed_pid_file_is_not_running(prefix, content):
    pid_file = prefix / "nginx.pid"
    pid_file.write_text(content)

    assert read_pid(pid_file) is None
    assert is_running(pid_file) is False


def test_stale_pid_is_not_running(prefix, monkeypatch):
    pid_file = _write_pid(prefix, 424242)

    def fake_kill(pid, sig):
        raise ProcessLookupError(pid)

    monkeypatch.setattr(pids.os, "kill", fake_kill)

    assert is_running(pid_file) is False


def test_foreign_process_is_not_controllable(monkeypatch):
    def fake_kill(pid, sig):
        raise PermissionError(pid)

    monkeypatch.setattr(pids.os, "kill", fake_kill)

    assert is_process_alive(1) is False


def test_resolve_signal_variants():
    assert resolve_signal("TERM") is signal.SIGTERM
    assert resolve_signal("sigquit") is signal.SIGQUIT
    assert resolve_signal(int(signal.SIGHUP)) is signal.SIGHUP
    assert resolve_signal(signal.SIGTERM) is signal.SIGTERM

    with pytest.raises(ValueError):
        resolve_signal("NOPE")


def test_kill_delivers_signal_to_recorded_pid(prefix, monkeypatch):
    pid_file = _write_pid(prefix, 4321)
    sent = []
    monkeypatch.setattr(pids.os, "kill", lambda pid, sig: sent.append((pid, sig)))

    assert kill(pid_file, "QUIT") is True
    assert sent == [(4321, signal.SIGQUIT)]


def test_kill_reports_delivery_failure(prefix, monkeypatch):
    pid_file = _write_pid(prefix, 4321)

    def fake_kill(pid, sig):
        raise ProcessLookupError(pid)

    monkeypatch.setattr(pids.os, "kill", fake_kill)

    assert kill(pid_file, "TERM") is False


def test_kill_without_pid_file_sends_nothing(prefix, monkeypatch):
    sent = []
    monkeypatch.setattr(pids.os, "kill", lambda pid, sig: sent.append((pid, sig)))

    assert kill(prefix / "pids" / "nginx.pid", "TERM") is False
    assert sent == []
