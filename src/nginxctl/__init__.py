from nginxctl.core.models import ControlSettings, Listener, WorkerConfig
from nginxctl.meta import __version__
from nginxctl.runtime.signals import check_conf, quit, reload, start, stop
from nginxctl.utils.errors import (
    AlreadyRunningError,
    BinaryNotFoundError,
    ConfigInvalidError,
    ConfigLoadError,
    NginxCtlError,
    NotRunningError,
    SecretSerializationError,
    SignalError,
    SpawnError,
)

__all__ = [
    "__version__",
    "ControlSettings",
    "Listener",
    "WorkerConfig",
    "check_conf",
    "quit",
    "reload",
    "start",
    "stop",
    "AlreadyRunningError",
    "BinaryNotFoundError",
    "ConfigInvalidError",
    "ConfigLoadError",
    "NginxCtlError",
    "NotRunningError",
    "SecretSerializationError",
    "SignalError",
    "SpawnError",
]
