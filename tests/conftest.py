import os
import pytest
import sys
from pathlib import Path

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from nginxctl.core.models import WorkerConfig
from nginxctl.runtime.process_secrets import HTTP_SECRETS_ENV, STREAM_SECRETS_ENV
from nginxctl.utils import log


@pytest.fixture
def prefix(tmp_path):
    """
    Returns a temporary Kong prefix directory, e.g. /tmp/.../kong-test.
    """
    path = tmp_path / "kong-test"
    path.mkdir()
    return path


@pytest.fixture
def make_config(prefix):
    """Factory building a WorkerConfig rooted at the temporary prefix."""
    def factory(**overrides):
        data = {"prefix": prefix}
        data.update(overrides)
        return WorkerConfig.model_validate(data)

    return factory


@pytest.fixture
def fake_nginx():
    """
    Factory writing an executable shell script that answers `-v` like OpenResty.
    """
    def factory(
        directory: Path,
        version: str = "1.25.3.1",
        banner: str = "nginx version: openresty/{version}",
        exit_code: int = 0,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        script = directory / "nginx"
        line = banner.format(version=version)
        script.write_text(f"#!/bin/sh\necho '{line}' >&2\nexit {exit_code}\n")
        script.chmod(0o755)
        return script

    return factory


@pytest.fixture(autouse=True)
def clean_secret_env():
    for name in (HTTP_SECRETS_ENV, STREAM_SECRETS_ENV):
        os.environ.pop(name, None)
    yield
    for name in (HTTP_SECRETS_ENV, STREAM_SECRETS_ENV):
        os.environ.pop(name, None)


@pytest.fixture(autouse=True)
def reset_log_level():
    yield
    log.set_level("info")
