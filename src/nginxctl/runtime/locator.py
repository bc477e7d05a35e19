from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from nginxctl.core.models import WorkerConfig
from nginxctl.runtime.process_secrets import scrubbed_environ
from nginxctl.runtime.version import NGINX_COMPATIBLE, CompatibilityRange, match_version
from nginxctl.utils import log
from nginxctl.utils.errors import BinaryNotFoundError

NGINX_BIN_NAME = "nginx"

# Search order is priority order; "" means "whatever nginx is on $PATH".
NGINX_SEARCH_PATHS: tuple[str, ...] = (
    "",
    "/usr/local/openresty/nginx/sbin",
    "/opt/openresty/nginx/sbin",
)


@dataclass(frozen=True)
class ResolvedBinary:
    """An OpenResty executable that reported a compatible version."""

    path: str
    version: str


def search_paths(config: Optional[WorkerConfig] = None) -> List[str]:
    """Return candidate directories, honoring a custom OpenResty installation."""
    if config is not None and config.openresty_path is not None:
        log.debug("using custom OpenResty path: %s", config.openresty_path)
        return [str(Path(config.openresty_path) / "nginx" / "sbin")]

    return list(NGINX_SEARCH_PATHS)


def candidate_path(directory: str) -> str:
    if not directory:
        return NGINX_BIN_NAME
    return str(Path(directory) / NGINX_BIN_NAME)


def probe_version_output(bin_path: str) -> Optional[str]:
    """Run ``<bin_path> -v`` and return its combined output, or None if it cannot run or fails."""
    command = [bin_path, "-v"]
    try:
        completed = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=scrubbed_environ(),
            check=False,
        )
    except OSError as exc:
        log.debug("OpenResty 'nginx' executable not found at %s: %s", bin_path, exc)
        return None

    output = completed.stdout or ""
    log.debug("%s: '%s'", " ".join(command), output.rstrip("\n"))

    if completed.returncode != 0:
        log.debug("%s exited with code %d", " ".join(command), completed.returncode)
        return None

    return output


def is_openresty(bin_path: str, compatible: CompatibilityRange = NGINX_COMPATIBLE) -> Optional[str]:
    """Return the matched version when ``bin_path`` is a compatible OpenResty build."""
    output = probe_version_output(bin_path)
    if output is None:
        return None

    verdict = match_version(output, compatible)
    if not verdict.compatible:
        log.verbose(
            "incompatible OpenResty found at %s. Kong requires version %s, got %s",
            bin_path,
            compatible,
            verdict.describe(),
        )
        return None

    return verdict.version


def resolve_absolute(bin_name: str) -> str:
    """Resolve a bare executable name on $PATH, falling back to the name itself."""
    log.debug("finding executable absolute path from $PATH...")
    resolved = shutil.which(bin_name)
    if resolved is None:
        log.error("could not find executable absolute path: %s not on $PATH", bin_name)
        return bin_name
    return resolved


def locate(config: Optional[WorkerConfig] = None, compatible: CompatibilityRange = NGINX_COMPATIBLE) -> ResolvedBinary:
    """
    Find the first compatible OpenResty 'nginx' executable.

    Candidates are probed in priority order (custom path, $PATH, default
    install locations) and the search stops at the first compatible one.
    Raises BinaryNotFoundError when none qualifies.
    """
    log.debug("searching for OpenResty 'nginx' executable")

    for directory in search_paths(config):
        path_to_check = candidate_path(directory)
        version = is_openresty(path_to_check, compatible)
        if version is None:
            continue

        if path_to_check == NGINX_BIN_NAME:
            path_to_check = resolve_absolute(path_to_check)

        log.debug("found OpenResty 'nginx' executable at %s", path_to_check)
        return ResolvedBinary(path=path_to_check, version=version)

    raise BinaryNotFoundError(str(compatible))


def find_nginx_bin(config: Optional[WorkerConfig] = None) -> str:
    """Return the path of the compatible 'nginx' executable for ``config``."""
    return locate(config).path
