"""
Hand resolved secret values to the nginx worker through its environment.

The worker reads ``KONG_PROCESS_SECRETS_HTTP`` in its HTTP subsystem and
``KONG_PROCESS_SECRETS_STREAM`` in its stream subsystem. The values are set
on this process only for the duration of a spawn, so they never reach disk
or unrelated children.
"""
from __future__ import annotations

import base64
import hashlib
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from nginxctl.core.models import WorkerConfig
from nginxctl.utils import log
from nginxctl.utils.errors import SecretSerializationError

HTTP_SECRETS_ENV = "KONG_PROCESS_SECRETS_HTTP"
STREAM_SECRETS_ENV = "KONG_PROCESS_SECRETS_STREAM"

NONCE_SIZE = 12

# Environment mutation is process-global: set/spawn/unset must not interleave.
_environ_lock = threading.RLock()


def extract(config: WorkerConfig) -> Optional[Dict[str, Any]]:
    """Collect resolved values of every option configured through a secret reference."""
    if not config.refs:
        return None

    secrets: Dict[str, Any] = {}
    for name in config.refs:
        value = getattr(config, name, None)
        if value is not None:
            secrets[name] = value

    return secrets or None


def _namespace_key(namespace_path: Optional[Path]) -> Optional[bytes]:
    if namespace_path is None:
        return None

    path = Path(namespace_path)
    if not path.is_file():
        return None

    return hashlib.sha256(path.read_bytes()).digest()


def serialize(secrets: Dict[str, Any], namespace_path: Optional[Path] = None) -> str:
    """
    Encode ``secrets`` into one environment-safe string.

    When the namespace file (the prefix's ``.kong_env``) exists its SHA-256
    digest keys an AES-256-GCM encryption of the JSON payload; the result is
    urlsafe base64 of ``nonce || ciphertext``.
    """
    try:
        payload = json.dumps(secrets, separators=(",", ":"), sort_keys=True).encode("utf-8")
        key = _namespace_key(namespace_path)
        if key is not None:
            nonce = os.urandom(NONCE_SIZE)
            payload = nonce + AESGCM(key).encrypt(nonce, payload, None)
    except (TypeError, ValueError, OSError) as exc:
        raise SecretSerializationError(f"failed to serialize process secrets: {exc}") from exc

    return base64.urlsafe_b64encode(payload).decode("ascii")


def deserialize(value: str, namespace_path: Optional[Path] = None) -> Dict[str, Any]:
    """Inverse of serialize, as performed by the worker on startup."""
    try:
        payload = base64.urlsafe_b64decode(value.encode("ascii"))
        key = _namespace_key(namespace_path)
        if key is not None:
            nonce, ciphertext = payload[:NONCE_SIZE], payload[NONCE_SIZE:]
            payload = AESGCM(key).decrypt(nonce, ciphertext, None)
        return json.loads(payload.decode("utf-8"))
    except (InvalidTag, ValueError, OSError) as exc:
        raise SecretSerializationError(f"failed to deserialize process secrets: {exc}") from exc


def scrubbed_environ() -> Dict[str, str]:
    """
    Copy of the current environment without process secrets.

    Children other than the worker being started get this environment, so a
    bundle staged by a concurrent start never reaches them.
    """
    return {
        name: value
        for name, value in os.environ.items()
        if name not in (HTTP_SECRETS_ENV, STREAM_SECRETS_ENV)
    }


def _setenv(name: str, value: str) -> bool:
    try:
        os.environ[name] = value
    except (OSError, ValueError) as exc:
        log.error("could not set %s: %s", name, exc)
        return False
    return True


def set_process_secrets_env(config: WorkerConfig) -> bool:
    """
    Install the serialized secrets for each active protocol plane.

    Returns True when at least one variable was set, meaning the caller must
    call unset_process_secrets_env afterwards. Raises SecretSerializationError
    before touching the environment if the secrets cannot be serialized.
    """
    secrets = extract(config)
    if not secrets:
        return False

    serialized = serialize(secrets, config.kong_env)

    ok_http = False
    if config.has_http_planes:
        ok_http = _setenv(HTTP_SECRETS_ENV, serialized)

    ok_stream = False
    if config.has_stream_plane:
        ok_stream = _setenv(STREAM_SECRETS_ENV, serialized)

    return ok_http or ok_stream


def unset_process_secrets_env(has_process_secrets: bool) -> None:
    if not has_process_secrets:
        return

    for name in (HTTP_SECRETS_ENV, STREAM_SECRETS_ENV):
        try:
            os.environ.pop(name, None)
        except OSError as exc:
            log.debug("could not unset %s: %s", name, exc)


@contextmanager
def process_secrets_env(config: WorkerConfig) -> Iterator[bool]:
    """
    Expose process secrets to children spawned inside the block.

    Holds a process-wide lock for the whole block and always removes the
    variables on exit, whether the block succeeds or raises.
    """
    with _environ_lock:
        has_process_secrets = set_process_secrets_env(config)
        try:
            yield has_process_secrets
        finally:
            unset_process_secrets_env(has_process_secrets)
