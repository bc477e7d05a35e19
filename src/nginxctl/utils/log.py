"""
Leveled log facade for lifecycle operations.

Messages go to stderr through a rich console so that data written to
stdout by the CLI stays clean. Arguments are interpolated with ``%``
formatting, and only when the message passes the current level.
"""
from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape

# Create a stderr console for logging
error_console = Console(stderr=True, highlight=False)

LEVELS: dict[str, int] = {
    "debug": 1,
    "verbose": 2,
    "info": 3,
    "warn": 4,
    "error": 5,
    "quiet": 6,
}

_STYLES: dict[str, str] = {
    "debug": "dim",
    "verbose": "cyan",
    "info": "white",
    "warn": "yellow",
    "error": "red",
}

_level = LEVELS["info"]


def set_level(name: str) -> None:
    """Set the minimum level that will be printed."""
    global _level
    key = name.strip().lower()
    if key == "warning":
        key = "warn"
    if key not in LEVELS:
        raise ValueError(f"unknown log level: {name}")
    _level = LEVELS[key]


def get_level() -> str:
    for name, value in LEVELS.items():
        if value == _level:
            return name
    return "info"


def enabled(name: str) -> bool:
    return LEVELS[name] >= _level


def log(name: str, message: str, *args: Any) -> None:
    if not enabled(name):
        return

    if args:
        message = message % args

    style = _STYLES.get(name, "white")
    prefix = "" if name == "info" else f"{name}: "
    error_console.print(f"[{style}]{escape(prefix + message)}[/{style}]", soft_wrap=True)


def debug(message: str, *args: Any) -> None:
    log("debug", message, *args)


def verbose(message: str, *args: Any) -> None:
    log("verbose", message, *args)


def info(message: str, *args: Any) -> None:
    log("info", message, *args)


def warn(message: str, *args: Any) -> None:
    log("warn", message, *args)


def error(message: str, *args: Any) -> None:
    log("error", message, *args)
