"""
Stream resolution for hook scripts.

Turns the stdin/stdout/stderr configuration into concrete handles once, when
the plugin is constructed. Handles are shared by every script run for the
rest of the process.
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Optional

from slshooks.config import RunOptionsConfig
from slshooks.models.streams import STREAM_NAMES, FileBacked, Inherited, StreamConfig

logger = logging.getLogger(__name__)


@dataclass
class ResolvedStreams:
    """Concrete stream handles; None means the stream is suppressed."""

    stdin: Optional[IO] = None
    stdout: Optional[IO] = None
    stderr: Optional[IO] = None
    used_standard_streams: set[str] = field(default_factory=set)
    opened: list[IO] = field(default_factory=list)

    def get(self, name: str) -> Optional[IO]:
        return getattr(self, name)

    def prepare_for_sharing(self) -> None:
        """Ready inherited host streams for many concurrent script runs.

        Output from the host and from scripts interleaves on these streams,
        so pending data is flushed and text streams switch to line buffering.
        """
        for name in sorted(self.used_standard_streams):
            if name == "stdin":
                continue
            stream = self.get(name)
            if stream is None:
                continue
            stream.flush()
            reconfigure = getattr(stream, "reconfigure", None)
            if reconfigure is not None:
                reconfigure(line_buffering=True)

    def close(self) -> None:
        """Close the file-backed handles opened during resolution."""
        while self.opened:
            handle = self.opened.pop()
            try:
                handle.close()
            except OSError as e:
                logger.debug(f"Failed to close {handle!r}: {e}")


class StreamResolver:
    """Resolves stream configuration into handles."""

    def __init__(self, options: RunOptionsConfig, base_dir: Optional[Path] = None):
        self.options = options
        self.base_dir = base_dir

    def resolve(self) -> ResolvedStreams:
        """Resolve all three streams. File open errors propagate."""
        streams = ResolvedStreams()
        try:
            for name in STREAM_NAMES:
                setattr(streams, name, self._resolve_one(name, self.options.stream(name), streams))
        except Exception:
            streams.close()
            raise
        return streams

    def _resolve_one(
        self, name: str, config: StreamConfig, streams: ResolvedStreams
    ) -> Optional[IO]:
        if isinstance(config, FileBacked):
            if self.base_dir is not None and not config.name.is_absolute():
                config = config.model_copy(update={"name": self.base_dir / config.name})
            handle = self.open_file(config, writable=name != "stdin")
            streams.opened.append(handle)
            logger.debug(f"{name} bound to file {config.name}")
            return handle
        if isinstance(config, Inherited):
            streams.used_standard_streams.add(name)
            return getattr(sys, name)
        return None

    @staticmethod
    def open_file(config: FileBacked, writable: bool) -> IO:
        """Open a binary file handle for a file-backed stream."""
        flags = config.flags or ("w" if writable else "r")
        return open(config.name, f"{flags}b", buffering=config.buffering)
