from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Awaitable, Callable, Iterator, MutableMapping, TextIO, TypeVar

from bashfun.common.command import AnnotationProperties, issue_command, to_command_value
from bashfun.common.errors import ConfigurationError
from bashfun.common.file_command import issue_file_command, prepare_key_value_message

T = TypeVar("T")

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1


def _input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').replace('-', '_').upper()}"


def _message_text(message: str | BaseException) -> str:
    if isinstance(message, BaseException):
        return str(message)
    return message


def to_posix_path(pth: str) -> str:
    return pth.replace("\\", "/")


def to_win32_path(pth: str) -> str:
    return pth.replace("/", "\\")


def to_platform_path(pth: str) -> str:
    return pth.replace("/", os.sep).replace("\\", os.sep)


@dataclass
class ActionCore:
    """Execution context of a single action step.

    Holds the step environment, the stream the runner scrapes for workflow
    commands and the exit status the process should finish with. Every
    helper reads and writes through this object instead of process globals,
    so tests can build a fresh one per case.
    """

    env: MutableMapping[str, str] = field(default_factory=lambda: os.environ)
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    exit_code: ExitCode = ExitCode.SUCCESS

    # Inputs

    def get_input(self, name: str, required: bool = False, trim_whitespace: bool = True) -> str:
        """Gets the value of an input.

        Args:
            name: Name of the input as declared in action.yml
            required: Raise if the input was not supplied
            trim_whitespace: Strip leading and trailing whitespace

        Raises:
            ConfigurationError: If the input is required and missing
        """
        val = self.env.get(_input_env_name(name), "")
        if required and not val:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        if not trim_whitespace:
            return val
        return val.strip()

    def get_multiline_input(self, name: str, required: bool = False, trim_whitespace: bool = True) -> list[str]:
        lines = [line for line in self.get_input(name, required, trim_whitespace=False).split("\n") if line]
        if not trim_whitespace:
            return lines
        return [line.strip() for line in lines]

    def get_boolean_input(self, name: str, required: bool = False) -> bool:
        """Gets an input as a boolean following the YAML 1.2 core schema."""
        val = self.get_input(name, required)
        if val in TRUE_VALUES:
            return True
        if val in FALSE_VALUES:
            return False
        raise TypeError(
            f"Input does not meet YAML 1.2 'Core Schema' specification: {name}\n"
            "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
        )

    def get_state(self, name: str) -> str:
        return self.env.get(f"STATE_{name}", "")

    def is_debug(self) -> bool:
        return self.env.get("RUNNER_DEBUG") == "1"

    # File commands

    def set_output(self, name: str, value: Any) -> None:
        issue_file_command("OUTPUT", prepare_key_value_message(name, value), self.env)

    def save_state(self, name: str, value: Any) -> None:
        issue_file_command("STATE", prepare_key_value_message(name, value), self.env)

    def export_variable(self, name: str, value: Any) -> None:
        self.env[name] = to_command_value(value)
        issue_file_command("ENV", prepare_key_value_message(name, value), self.env)

    def add_path(self, input_path: str) -> None:
        issue_file_command("PATH", input_path, self.env)
        self.env["PATH"] = f"{input_path}{os.pathsep}{self.env.get('PATH', '')}"

    # Workflow commands

    def issue(self, name: str, properties: AnnotationProperties | None = None, message: str = "") -> None:
        props = properties.to_command_properties() if properties is not None else {}
        issue_command(name, props, message, self.stdout)

    def set_secret(self, secret: str) -> None:
        self.issue("add-mask", message=secret)

    def debug(self, message: str | BaseException) -> None:
        self.issue("debug", message=_message_text(message))

    def info(self, message: str) -> None:
        self.stdout.write(f"{message}\n")
        self.stdout.flush()

    def notice(self, message: str | BaseException, properties: AnnotationProperties | None = None) -> None:
        self.issue("notice", properties, _message_text(message))

    def warning(self, message: str | BaseException, properties: AnnotationProperties | None = None) -> None:
        self.issue("warning", properties, _message_text(message))

    def error(self, message: str | BaseException, properties: AnnotationProperties | None = None) -> None:
        self.issue("error", properties, _message_text(message))

    def set_failed(self, message: str | BaseException) -> None:
        """Marks the step as failed and reports ``message`` as an error.

        The process is not terminated; the caller exits with ``exit_code``.
        """
        self.exit_code = ExitCode.FAILURE
        self.error(message)

    def set_command_echo(self, enabled: bool) -> None:
        self.issue("echo", message="on" if enabled else "off")

    # Log groups

    def start_group(self, name: str) -> None:
        self.issue("group", message=name)

    def end_group(self) -> None:
        self.issue("endgroup")

    @contextmanager
    def grouped(self, name: str) -> Iterator[None]:
        self.start_group(name)
        try:
            yield
        finally:
            self.end_group()

    async def group(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Runs ``fn`` inside a foldable log group.

        The end marker is written even if ``fn`` raises.
        """
        self.start_group(name)
        try:
            return await fn()
        finally:
            self.end_group()
