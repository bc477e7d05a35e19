import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict
from pydantic import ValidationError

from nginxctl.core.models import WorkerConfig
from nginxctl.utils.errors import ConfigLoadError

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]+))?\}")

def interpolate_env_vars(content: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variables."""
    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, content)

def load_config(path: Path) -> Dict[str, Any]:
    """
    Load a Kong YAML configuration file with environment variable interpolation.

    A missing file yields an empty mapping; unreadable or malformed YAML
    raises ConfigLoadError.
    """
    if not path.exists():
        return {}

    try:
        content = path.read_text(encoding="utf-8")
        interpolated_content = interpolate_env_vars(content)
        full_config = yaml.safe_load(interpolated_content) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigLoadError(f"could not load configuration: {exc}", path=str(path)) from exc

    if not isinstance(full_config, dict):
        raise ConfigLoadError("configuration must be a mapping", path=str(path))

    return full_config

def load_worker_config(path: Path, **overrides: Any) -> WorkerConfig:
    """Load and validate a WorkerConfig, applying non-None overrides on top."""
    data = load_config(path)
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return WorkerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"invalid configuration: {exc}", path=str(path)) from exc
