"""
Hook runner: hands a bound script to the execution engine.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Optional

from slshooks.config import CONTEXT_ENV_VAR, PLUGIN_NAME
from slshooks.core.engine import ExecutionOptions, ScriptEngine
from slshooks.core.streams import ResolvedStreams


def _log_to_stderr(message: str) -> None:
    print(f"{PLUGIN_NAME}: {message}", file=sys.stderr, flush=True)


class ExecutionOrchestrator:
    """Runs hook scripts with the resolved streams and engine options.

    With debug on, each run announces the script through `log` (the host's
    log when it has one, stderr otherwise), whatever logging is configured.
    """

    def __init__(
        self,
        engine: ScriptEngine,
        streams: ResolvedStreams,
        passthrough: Optional[dict[str, Any]] = None,
        debug: bool = False,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.engine = engine
        self.streams = streams
        self.passthrough = passthrough or {}
        self.debug = debug
        self.log = log or _log_to_stderr
        self.context_path: Optional[Path] = None

    def options(self) -> ExecutionOptions:
        env = {}
        if self.context_path is not None:
            env[CONTEXT_ENV_VAR] = str(self.context_path)
        return ExecutionOptions(
            stdin=self.streams.stdin,
            stdout=self.streams.stdout,
            stderr=self.streams.stderr,
            env=env,
            extra=dict(self.passthrough),
        )

    async def run(self, script_name: str) -> None:
        """Run one manifest script; engine failures propagate."""
        if self.debug:
            self.log(f"Running hook script {script_name}")
        await self.engine.run(script_name, self.options())
