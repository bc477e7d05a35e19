from typing import Optional


class NginxCtlError(Exception):
    """
    Base class for lifecycle failures surfaced to the caller.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigLoadError(NginxCtlError):
    """Raised when the configuration file cannot be read or validated."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        loc = f" ({path})" if path else ""
        super().__init__(f"{message}{loc}")


class BinaryNotFoundError(NginxCtlError):
    """No compatible OpenResty 'nginx' executable was found."""

    def __init__(self, compatible: str):
        self.compatible = compatible
        super().__init__(
            f"could not find OpenResty 'nginx' executable. Kong requires version {compatible}"
        )


class AlreadyRunningError(NginxCtlError):
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"nginx is already running in {prefix}")


class NotRunningError(NginxCtlError):
    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"nginx not running in prefix: {prefix}")


class SpawnError(NginxCtlError):
    """
    The worker could not be started. Carries the exit code (None when the
    executable could not be spawned at all) and any captured output.
    """

    def __init__(self, message: str, exit_code: Optional[int] = None, output: str = ""):
        self.exit_code = exit_code
        self.output = output
        super().__init__(message)


class ConfigInvalidError(NginxCtlError):
    """The worker's configuration self-test failed."""

    def __init__(self, exit_code: int, output: str):
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"nginx configuration is invalid (exit code {exit_code}):\n{output}")


class SignalError(NginxCtlError):
    def __init__(self, signal: str, message: str = "could not send signal"):
        self.signal = signal
        super().__init__(message)


class SecretSerializationError(NginxCtlError):
    """Process secrets could not be serialized; nothing was spawned."""
