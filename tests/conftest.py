import io
import logging
from pathlib import Path

import pytest

from bashfun.common.core import ActionCore


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def core(stdout: io.StringIO) -> ActionCore:
    return ActionCore(env={}, stdout=stdout)


@pytest.fixture
def file_commands(core: ActionCore, tmp_path: Path) -> dict[str, Path]:
    """Creates the file command targets the runner would provide."""
    paths = {}
    for channel in ("OUTPUT", "STATE", "ENV", "PATH"):
        path = tmp_path / f"github_{channel.lower()}"
        path.touch()
        core.env[f"GITHUB_{channel}"] = str(path)
        paths[channel] = path
    return paths


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("bashfun")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True