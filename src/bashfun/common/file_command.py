"""
File commands: key/value records appended to files the runner harvests after
the step finishes (``GITHUB_OUTPUT``, ``GITHUB_STATE``, ``GITHUB_ENV``,
``GITHUB_PATH``).
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any, Mapping

from bashfun.common.command import to_command_value
from bashfun.common.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["issue_file_command", "prepare_key_value_message", "to_command_value"]

DELIMITER_PREFIX = "ghadelimiter_"


def issue_file_command(command: str, message: Any, env: Mapping[str, str]) -> None:
    """Append ``message`` to the file named by ``GITHUB_{command}``.

    Args:
        command: Channel name, e.g. ``OUTPUT`` or ``STATE``
        message: Payload; non-string values are serialized as JSON
        env: Environment of the running step

    Raises:
        ConfigurationError: If the environment variable is unset or the file does not exist
    """
    file_path = env.get(f"GITHUB_{command}")
    if not file_path:
        raise ConfigurationError(f"Unable to find environment variable for file command {command}")

    path = Path(file_path)
    if not path.exists():
        raise ConfigurationError(f"Missing file at path: {file_path}")

    logger.debug(f"Appending {command} file command to {file_path}")
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{to_command_value(message)}\n")


def prepare_key_value_message(key: str, value: Any) -> str:
    delimiter = f"{DELIMITER_PREFIX}{uuid.uuid4()}"
    converted_value = to_command_value(value)

    if delimiter in key:
        raise ValueError(f"Unexpected input: name should not contain the delimiter {delimiter}")
    if delimiter in converted_value:
        raise ValueError(f"Unexpected input: value should not contain the delimiter {delimiter}")

    return f"{key}<<{delimiter}\n{converted_value}\n{delimiter}"
