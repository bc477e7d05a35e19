from __future__ import annotations

import os
import signal as signal_module
from pathlib import Path
from typing import Optional, Union

from nginxctl.utils import log

SignalSpec = Union[int, str, signal_module.Signals]


def read_pid(pid_file: Optional[Path]) -> Optional[int]:
    """Return the pid recorded in ``pid_file``, or None when absent or unreadable."""
    if pid_file is None:
        return None

    try:
        content = Path(pid_file).read_text(encoding="utf-8").strip()
    except OSError:
        return None

    try:
        pid = int(content)
    except ValueError:
        log.debug("invalid pid file content at %s: '%s'", pid_file, content)
        return None

    if pid <= 0:
        return None
    return pid


def is_process_alive(pid: int) -> bool:
    """Return True when ``pid`` exists and this process may signal it."""
    if pid <= 0:
        return False

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, but owned by someone else: not ours to control.
        return False
    except OSError:
        return False

    return True


def is_running(pid_file: Optional[Path]) -> bool:
    """Liveness check for the process recorded in ``pid_file``; never raises."""
    pid = read_pid(pid_file)
    if pid is None:
        return False
    return is_process_alive(pid)


def resolve_signal(spec: SignalSpec) -> signal_module.Signals:
    """Turn ``"TERM"``, ``"SIGTERM"``, 15 or ``signal.SIGTERM`` into a Signals member."""
    if isinstance(spec, signal_module.Signals):
        return spec

    if isinstance(spec, int):
        return signal_module.Signals(spec)

    name = spec.strip().upper()
    if not name.startswith("SIG"):
        name = f"SIG{name}"

    try:
        return signal_module.Signals[name]
    except KeyError:
        raise ValueError(f"unknown signal: {spec}") from None


def kill(pid_file: Optional[Path], sig: SignalSpec) -> bool:
    """Deliver ``sig`` to the process recorded in ``pid_file``; False when delivery failed."""
    pid = read_pid(pid_file)
    if pid is None:
        return False

    signum = resolve_signal(sig)
    try:
        os.kill(pid, signum)
    except OSError as exc:
        log.debug("could not send %s to pid %d: %s", signum.name, pid, exc)
        return False

    return True
