"""
Invocation context snapshot.

On `initialize` the host's invocation state is written to a temporary JSON
file whose path is published in SLS_CONTEXT, so hook scripts spawned later can
load it. The file lives exactly as long as the writer: close() removes it,
and close() is registered with atexit for exits that never reach it.
"""

import asyncio
import atexit
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from slshooks.config import CONTEXT_ENV_VAR
from slshooks.core.errors import ContextError
from slshooks.models.host import Host, InvocationContext

logger = logging.getLogger(__name__)


class ContextSnapshotWriter:
    """Writes and owns the transient invocation context file."""

    def __init__(self, env_var: str = CONTEXT_ENV_VAR):
        self.env_var = env_var
        self.path: Optional[Path] = None
        self._exit_hook_registered = False

    async def setup(self, host: Host) -> Path:
        """Snapshot the host state to a fresh file and publish its path."""
        try:
            payload = InvocationContext.from_host(host).to_json()
        except Exception as e:
            raise ContextError(f"Failed to serialize invocation context: {e}") from e

        try:
            path = await asyncio.to_thread(self._write, payload)
        except OSError as e:
            raise ContextError(f"Failed to write invocation context: {e}") from e

        if self.path is not None:
            self._remove(self.path)
        self.path = path
        os.environ[self.env_var] = str(path)

        if not self._exit_hook_registered:
            atexit.register(self.close)
            self._exit_hook_registered = True

        logger.debug(f"Invocation context written to {path}")
        return path

    @staticmethod
    def _write(payload: str) -> Path:
        fd, tmp_path = tempfile.mkstemp(prefix="sls-context-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
        except Exception:
            os.unlink(tmp_path)
            raise
        return Path(tmp_path)

    def close(self) -> None:
        """Remove the context file. Safe to call repeatedly; never raises."""
        if self._exit_hook_registered:
            atexit.unregister(self.close)
            self._exit_hook_registered = False

        if self.path is None:
            return
        path, self.path = self.path, None
        self._remove(path)
        if os.environ.get(self.env_var) == str(path):
            del os.environ[self.env_var]

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Failed to remove context file {path}: {e}")
