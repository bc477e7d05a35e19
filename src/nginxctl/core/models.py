import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ADDRESS_PATTERN = re.compile(
    r"^(?:\[(?P<ipv6>[0-9A-Fa-f:.]+)\]|(?P<host>[^:\s\[\]]+)):(?P<port>\d+)$"
)

Role = Literal["traditional", "control_plane", "data_plane"]


class Listener(BaseModel):
    """
    One listening socket of a protocol plane, e.g. ``0.0.0.0:8443 http2 ssl``.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    ip: str
    port: int = Field(ge=1, le=65535)
    ssl: bool = False
    http2: bool = False
    flags: List[str] = Field(default_factory=list)

    @classmethod
    def parse(cls, entry: str) -> "Listener":
        """Parse a ``host:port [flag ...]`` listen directive."""
        parts = entry.split()
        if not parts:
            raise ValueError("Listener entry cannot be empty.")

        address, *flags = parts
        match = _ADDRESS_PATTERN.fullmatch(address)
        if match is None:
            raise ValueError(f"Invalid listener address '{address}', expected host:port.")

        ip = match.group("ipv6") or match.group("host")
        return cls(
            ip=ip,
            port=int(match.group("port")),
            ssl="ssl" in flags,
            http2="http2" in flags,
            flags=[flag for flag in flags if flag not in ("ssl", "http2")],
        )

    def __str__(self) -> str:
        host = f"[{self.ip}]" if ":" in self.ip else self.ip
        extra = [flag for flag, on in (("ssl", self.ssl), ("http2", self.http2)) if on]
        return " ".join([f"{host}:{self.port}", *extra, *self.flags])


def _normalize_listeners(value: Any) -> List[Any]:
    # PyYAML reads a bare `off` as False.
    if value is None or value is False:
        return []

    if isinstance(value, str):
        value = value.split(",")

    if not isinstance(value, (list, tuple)):
        raise ValueError("Listeners must be a string, a list, or 'off'.")

    listeners: List[Any] = []
    for entry in value:
        if entry is False:
            continue
        if isinstance(entry, str):
            entry = entry.strip()
            if not entry or entry == "off":
                continue
            listeners.append(Listener.parse(entry))
        else:
            listeners.append(entry)

    return listeners


class WorkerConfig(BaseModel):
    """
    Read-only view of the Kong configuration consumed by the lifecycle core.

    Options that are not modelled explicitly are kept as extra attributes so
    that values resolved from secret references (``pg_password`` and the
    like) can be looked up by name.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    prefix: Path
    nginx_pid: Optional[Path] = None
    kong_env: Optional[Path] = None
    role: Role = "traditional"

    proxy_listeners: List[Listener] = Field(default_factory=list, alias="proxy_listen")
    admin_listeners: List[Listener] = Field(default_factory=list, alias="admin_listen")
    status_listeners: List[Listener] = Field(default_factory=list, alias="status_listen")
    stream_listeners: List[Listener] = Field(default_factory=list, alias="stream_listen")

    openresty_path: Optional[Path] = None
    nginx_main_daemon: bool = True

    # Option name -> secret reference, e.g. {"pg_password": "{vault://env/pg-pass}"}
    refs: Dict[str, str] = Field(default_factory=dict, alias="$refs")

    @field_validator(
        "proxy_listeners", "admin_listeners", "status_listeners", "stream_listeners",
        mode="before",
    )
    @classmethod
    def parse_listeners(cls, value: Any) -> List[Any]:
        return _normalize_listeners(value)

    @field_validator("openresty_path", mode="before")
    @classmethod
    def empty_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def derive_prefix_paths(self) -> "WorkerConfig":
        if self.nginx_pid is None:
            self.nginx_pid = self.prefix / "pids" / "nginx.pid"
        if self.kong_env is None:
            self.kong_env = self.prefix / ".kong_env"
        return self

    @property
    def has_http_planes(self) -> bool:
        """Whether the HTTP subsystem will be active in the worker."""
        return (
            self.role == "control_plane"
            or len(self.proxy_listeners) > 0
            or len(self.admin_listeners) > 0
            or len(self.status_listeners) > 0
        )

    @property
    def has_stream_plane(self) -> bool:
        return len(self.stream_listeners) > 0


class ControlSettings(BaseSettings):
    """
    Settings of the control tool itself, overridable with NGINXCTL_* variables.
    """
    model_config = SettingsConfigDict(env_prefix='NGINXCTL_', extra='ignore')

    conf: Path = Path("kong.yaml")
    log_level: str = "info"
