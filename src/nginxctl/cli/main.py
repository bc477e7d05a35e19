import typer
from pathlib import Path
from typing import Callable, Optional

from nginxctl.config.loader import load_worker_config
from nginxctl.core.models import ControlSettings, WorkerConfig
from nginxctl.meta import __version__
from nginxctl.runtime import pids, signals
from nginxctl.runtime.version import NGINX_COMPATIBLE
from nginxctl.utils import log
from nginxctl.utils.errors import NginxCtlError

app = typer.Typer(name="nginxctl", help="Control the nginx worker of a Kong prefix.", rich_markup_mode=None)

CONF_OPTION = typer.Option(None, "--conf", "-c", help="Configuration file (defaults to $NGINXCTL_CONF or kong.yaml).")
PREFIX_OPTION = typer.Option(None, "--prefix", "-p", help="Override the prefix directory.")
VERBOSE_OPTION = typer.Option(False, "--v", help="Verbose logging.")
DEBUG_OPTION = typer.Option(False, "--vv", help="Debug logging.")


def _configure_logging(settings: ControlSettings, v: bool, vv: bool) -> None:
    try:
        log.set_level(settings.log_level)
    except ValueError as exc:
        log.warn("%s, using 'info'", exc)
        log.set_level("info")

    if v:
        log.set_level("verbose")
    if vv:
        log.set_level("debug")


def _load(conf: Optional[Path], prefix: Optional[Path], v: bool, vv: bool) -> WorkerConfig:
    settings = ControlSettings()
    _configure_logging(settings, v, vv)

    conf_path = conf if conf is not None else settings.conf
    log.verbose("reading config file at %s", conf_path)
    return load_worker_config(conf_path, prefix=prefix)


def _run(operation: Callable[[WorkerConfig], bool], conf: Optional[Path], prefix: Optional[Path], v: bool, vv: bool) -> WorkerConfig:
    try:
        config = _load(conf, prefix, v, vv)
        operation(config)
    except NginxCtlError as exc:
        log.error("%s", exc.message)
        raise typer.Exit(code=1)
    return config


@app.command()
def start(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Start nginx in the configured prefix.
    """
    config = _run(signals.start, conf, prefix, v, vv)
    log.info("nginx started in %s", config.prefix)


@app.command()
def stop(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Stop nginx immediately (TERM).
    """
    _run(signals.stop, conf, prefix, v, vv)
    log.info("nginx stopped")


@app.command("quit")
def quit_(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Gracefully drain and stop nginx (QUIT).
    """
    _run(signals.quit, conf, prefix, v, vv)
    log.info("nginx quit signal sent")


@app.command()
def reload(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Reload the configuration of a running nginx.
    """
    _run(signals.reload, conf, prefix, v, vv)
    log.info("nginx reloaded")


@app.command()
def check(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Test the nginx configuration in the prefix.
    """
    _run(signals.check_conf, conf, prefix, v, vv)
    log.info("nginx configuration is valid")


@app.command()
def health(
    conf: Optional[Path] = CONF_OPTION,
    prefix: Optional[Path] = PREFIX_OPTION,
    v: bool = VERBOSE_OPTION,
    vv: bool = DEBUG_OPTION,
):
    """
    Report whether nginx is running in the prefix.
    """
    try:
        config = _load(conf, prefix, v, vv)
    except NginxCtlError as exc:
        log.error("%s", exc.message)
        raise typer.Exit(code=1)

    if not pids.is_running(config.nginx_pid):
        typer.echo(f"nginx.......not running ({config.prefix})")
        raise typer.Exit(code=1)

    typer.echo(f"nginx.......running ({config.prefix})")


@app.command()
def version():
    """
    Print the nginxctl version and the supported OpenResty versions.
    """
    typer.echo(f"nginxctl {__version__}")
    typer.echo(f"OpenResty {NGINX_COMPATIBLE}")


if __name__ == "__main__":
    app()
