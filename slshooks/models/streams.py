"""
Stream configuration models.

Each standard stream of a hook script is configured as one of:
- Inherited:  a truthy value, the host's own stream is shared
- Suppressed: a falsy value, the stream is not forwarded at all
- FileBacked: a path string, or a mapping with `name` plus open options
"""

from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

STREAM_NAMES = ("stdin", "stdout", "stderr")


class Inherited(BaseModel):
    """Share the host process's stream."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inherited"] = "inherited"


class Suppressed(BaseModel):
    """Do not forward the stream."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["suppressed"] = "suppressed"


class FileBacked(BaseModel):
    """Read from or write to a named file."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["file"] = "file"
    name: Path = Field(description="Path of the file backing the stream")
    flags: Optional[Literal["r", "r+", "w", "w+", "a", "a+", "x", "x+"]] = Field(
        default=None,
        description="Open mode; defaults to r for stdin and w otherwise",
    )
    buffering: int = Field(default=-1, description="Buffer size passed to open()")


StreamConfig = Union[Inherited, Suppressed, FileBacked]


def parse_stream_config(value: Any) -> StreamConfig:
    """Turn a raw configuration value into a StreamConfig variant."""
    if isinstance(value, (Inherited, Suppressed, FileBacked)):
        return value
    if isinstance(value, str) and value:
        return FileBacked(name=value)
    if isinstance(value, dict) and value:
        return FileBacked.model_validate(value)
    if value:
        return Inherited()
    return Suppressed()
