"""
Start, check, stop, quit and reload the OpenResty worker of a Kong prefix.

Every operation derives the worker's state from the pid file at call time;
nothing is cached between calls. Two invocations racing on the same prefix
can both observe "not running" and both attempt a start; the worker's own
bind and pid-file handling reports the loser.
"""
from __future__ import annotations

import subprocess
from typing import Dict, List, Optional

from nginxctl.core.models import WorkerConfig
from nginxctl.runtime import pids
from nginxctl.runtime.locator import find_nginx_bin
from nginxctl.runtime.process_secrets import process_secrets_env, scrubbed_environ
from nginxctl.utils import log
from nginxctl.utils.errors import (
    AlreadyRunningError,
    ConfigInvalidError,
    NotRunningError,
    SignalError,
    SpawnError,
)

NGINX_CONF_NAME = "nginx.conf"
CONF_CHECK_ENV = "KONG_NGINX_CONF_CHECK"

STOP_SIGNAL = "TERM"
QUIT_SIGNAL = "QUIT"


def nginx_command(nginx_bin: str, config: WorkerConfig, *extra: str) -> List[str]:
    return [nginx_bin, *extra, "-p", str(config.prefix), "-c", NGINX_CONF_NAME]


def _run_captured(command: List[str], env: Optional[Dict[str, str]] = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
        check=False,
    )


def _spawn(command: List[str], daemon: bool) -> None:
    if daemon:
        # The daemon detaches; capture its output for diagnostics.
        try:
            completed = _run_captured(command)
        except OSError as exc:
            raise SpawnError(f"failed to start nginx: {exc}") from exc

        if completed.returncode != 0:
            output = completed.stderr or completed.stdout or ""
            message = output or f"failed to start nginx (exit code: {completed.returncode})"
            raise SpawnError(message, exit_code=completed.returncode, output=output)

        log.debug("nginx started")
        return

    # Foreground: the worker runs until stopped and its output must flow
    # through instead of piling up in this process.
    try:
        completed = subprocess.run(command, check=False)
    except OSError as exc:
        raise SpawnError(f"failed to start nginx: {exc}") from exc

    if completed.returncode != 0:
        raise SpawnError(
            f"failed to start nginx (exit code: {completed.returncode})",
            exit_code=completed.returncode,
        )


def start(config: WorkerConfig) -> bool:
    """Start nginx in ``config.prefix``; raises when it is already running or fails to start."""
    if pids.is_running(config.nginx_pid):
        raise AlreadyRunningError(str(config.prefix))

    nginx_bin = find_nginx_bin(config)
    command = nginx_command(nginx_bin, config)

    with process_secrets_env(config):
        log.debug("starting nginx: %s", " ".join(command))
        _spawn(command, daemon=config.nginx_main_daemon)

    return True


def check_conf(config: WorkerConfig) -> bool:
    """Run the worker's configuration self-test against ``config.prefix``."""
    nginx_bin = find_nginx_bin(config)
    command = nginx_command(nginx_bin, config, "-t")

    env = scrubbed_environ()
    env[CONF_CHECK_ENV] = "true"

    log.debug("testing nginx configuration: %s=true %s", CONF_CHECK_ENV, " ".join(command))

    try:
        completed = _run_captured(command, env=env)
    except OSError as exc:
        raise SpawnError(f"failed to run nginx configuration test: {exc}") from exc

    if completed.returncode != 0:
        raise ConfigInvalidError(completed.returncode, completed.stderr or "")

    return True


def send_signal(config: WorkerConfig, signal: str) -> bool:
    if not pids.is_running(config.nginx_pid):
        raise NotRunningError(str(config.prefix))

    log.verbose("sending %s signal to nginx running at %s", signal, config.nginx_pid)

    if not pids.kill(config.nginx_pid, signal):
        raise SignalError(signal)

    return True


def stop(config: WorkerConfig) -> bool:
    """Terminate the running worker immediately."""
    return send_signal(config, STOP_SIGNAL)


def quit(config: WorkerConfig) -> bool:
    """Ask the running worker to drain in-flight requests and exit."""
    return send_signal(config, QUIT_SIGNAL)


def reload(config: WorkerConfig) -> bool:
    """Hot-reload the running worker's configuration."""
    if not pids.is_running(config.nginx_pid):
        raise NotRunningError(str(config.prefix))

    nginx_bin = find_nginx_bin(config)
    command = nginx_command(nginx_bin, config) + ["-s", "reload"]

    log.debug("reloading nginx: %s", " ".join(command))

    try:
        completed = _run_captured(command, env=scrubbed_environ())
    except OSError as exc:
        raise SpawnError(f"failed to reload nginx: {exc}") from exc

    if completed.returncode != 0:
        output = completed.stderr or ""
        message = output or f"failed to reload nginx (exit code: {completed.returncode})"
        raise SpawnError(message, exit_code=completed.returncode, output=output)

    return True
