"""Worker lifecycle components: version matching, lookup, secrets, liveness, control."""

from nginxctl.runtime.locator import ResolvedBinary, find_nginx_bin, locate
from nginxctl.runtime.pids import is_running, kill, read_pid
from nginxctl.runtime.process_secrets import (
    process_secrets_env,
    set_process_secrets_env,
    unset_process_secrets_env,
)
from nginxctl.runtime.version import NGINX_COMPATIBLE, CompatibilityRange, VersionMatch, match_version

__all__ = [
    "CompatibilityRange",
    "NGINX_COMPATIBLE",
    "ResolvedBinary",
    "VersionMatch",
    "find_nginx_bin",
    "is_running",
    "kill",
    "locate",
    "match_version",
    "process_secrets_env",
    "read_pid",
    "set_process_secrets_env",
    "unset_process_secrets_env",
]
