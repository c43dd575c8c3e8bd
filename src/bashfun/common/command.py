"""
Workflow command formatting for the GitHub Actions runner.

The runner scrapes stdout for lines of the form
``::name key=value,key=value::message`` and turns them into annotations,
log groups, masks and so on.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, TextIO

from pydantic import BaseModel, Field


class AnnotationProperties(BaseModel):
    """Optional location and title attached to a notice, warning or error."""

    title: str | None = Field(default=None, description="Title shown for the annotation")
    file: str | None = Field(default=None, description="Path of the file the annotation refers to")
    start_line: int | None = Field(default=None, description="First line of the annotated range")
    end_line: int | None = Field(default=None, description="Last line of the annotated range")
    # Columns are only honoured by the runner when start_line == end_line
    start_column: int | None = Field(default=None, description="First column of the annotated range")
    end_column: int | None = Field(default=None, description="Last column of the annotated range")

    def to_command_properties(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "file": self.file,
            "line": self.start_line,
            "endLine": self.end_line,
            "col": self.start_column,
            "endColumn": self.end_column,
        }


def to_command_value(value: Any) -> str:
    """Serialize a value for a workflow command or a file command payload.

    ``None`` becomes an empty string, strings pass through and anything else
    is written as JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, separators=(",", ":"))


def escape_data(s: Any) -> str:
    # '%' goes first so the escapes introduced below are not escaped again
    return to_command_value(s).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(s: Any) -> str:
    return escape_data(s).replace(":", "%3A").replace(",", "%2C")


@dataclass
class Command:
    name: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    message: str | None = ""

    def __str__(self) -> str:
        props = ",".join(f"{key}={escape_property(val)}" for key, val in self.properties.items() if val)
        if props:
            return f"::{self.name} {props}::{escape_data(self.message)}"
        return f"::{self.name}::{escape_data(self.message)}"


def format_command(name: str, properties: Mapping[str, Any] | None = None, message: str | None = "") -> str:
    return str(Command(name, properties or {}, message))


def issue_command(
    name: str, properties: Mapping[str, Any] | None, message: str | None, stream: TextIO
) -> None:
    # Text mode translates "\n" into the host line terminator
    stream.write(format_command(name, properties, message) + "\n")
    stream.flush()
