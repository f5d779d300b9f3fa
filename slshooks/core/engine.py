"""
Script execution engine.

Runs manifest scripts selected by a name pattern as shell commands. Patterns
use `:` as the segment separator:

    build        exactly the script named "build"
    build:*      build:js, build:css (one segment)
    build:**     build:js, build:css:min (any depth)

Options understood (snake_case or camelCase):
    parallel           run the matched scripts concurrently
    max_parallel       cap on concurrent scripts when parallel
    continue_on_error  keep going after a failing script
    print_name         write "> name" to stdout before each script
"""

import asyncio
import io
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Optional, Protocol, Union

from slshooks.core.errors import ScriptFailedError, ScriptNotFoundError, ScriptsFailedError
from slshooks.core.manifest import read_scripts

logger = logging.getLogger(__name__)

_WILDCARD = re.compile(r"(\*\*|\*|\?)")


@dataclass
class ExecutionOptions:
    """Per-run options handed to an engine."""

    stdin: Optional[IO] = None
    stdout: Optional[IO] = None
    stderr: Optional[IO] = None
    env: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def option(self, name: str, default: Any = None) -> Any:
        """Look up a pass-through option by snake_case or camelCase name."""
        if name in self.extra:
            return self.extra[name]
        head, *rest = name.split("_")
        camel = head + "".join(part.title() for part in rest)
        return self.extra.get(camel, default)


class ScriptEngine(Protocol):
    """Anything that can run a manifest script pattern."""

    async def run(self, pattern: str, options: ExecutionOptions) -> None: ...


def compile_pattern(pattern: str) -> re.Pattern:
    parts = []
    for token in _WILDCARD.split(pattern):
        if token == "**":
            parts.append(".*")
        elif token == "*":
            parts.append("[^:]*")
        elif token == "?":
            parts.append("[^:]")
        else:
            parts.append(re.escape(token))
    return re.compile("".join(parts))


def match_scripts(pattern: str, names: list[str]) -> list[str]:
    """Return the script names selected by pattern, in manifest order."""
    if not _WILDCARD.search(pattern):
        return [pattern] if pattern in names else []
    regex = compile_pattern(pattern)
    return [name for name in names if regex.fullmatch(name)]


def _subprocess_target(handle: Optional[IO]) -> Union[IO, int, None]:
    """Map a resolved handle to a subprocess stdio argument."""
    if handle is None:
        return asyncio.subprocess.DEVNULL
    try:
        handle.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        # No descriptor to hand over; the child keeps the parent's stream
        return None
    if handle.writable():
        handle.flush()
    return handle


def _write_line(handle: Optional[IO], line: str) -> None:
    if handle is None:
        return
    if isinstance(handle, io.TextIOBase):
        handle.write(line)
    else:
        handle.write(line.encode("utf-8"))
    handle.flush()


class ShellScriptEngine:
    """Runs manifest scripts through the system shell."""

    def __init__(self, manifest_path: Path, cwd: Optional[Path] = None):
        self.manifest_path = manifest_path
        self.cwd = cwd or manifest_path.parent

    async def run(self, pattern: str, options: ExecutionOptions) -> None:
        scripts = dict(read_scripts(self.manifest_path))
        names = match_scripts(pattern, list(scripts))
        if not names:
            raise ScriptNotFoundError(pattern)
        for name in names:
            if not scripts[name]:
                raise ScriptNotFoundError(name)

        if options.option("parallel", False):
            failures = await self._run_parallel(names, scripts, options)
        else:
            failures = await self._run_sequential(names, scripts, options)

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise ScriptsFailedError(failures)

    async def _run_sequential(
        self, names: list[str], scripts: dict[str, str], options: ExecutionOptions
    ) -> list[ScriptFailedError]:
        failures = []
        for name in names:
            try:
                await self._run_script(name, scripts[name], options)
            except ScriptFailedError as e:
                if not options.option("continue_on_error", False):
                    raise
                failures.append(e)
        return failures

    async def _run_parallel(
        self, names: list[str], scripts: dict[str, str], options: ExecutionOptions
    ) -> list[ScriptFailedError]:
        max_parallel = options.option("max_parallel") or len(names)
        semaphore = asyncio.Semaphore(max_parallel)

        async def limited(name: str) -> None:
            async with semaphore:
                await self._run_script(name, scripts[name], options)

        results = await asyncio.gather(
            *[limited(name) for name in names], return_exceptions=True
        )
        failures = []
        for result in results:
            if isinstance(result, ScriptFailedError):
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
        return failures

    async def _run_script(self, name: str, command: str, options: ExecutionOptions) -> None:
        if options.option("print_name", False):
            _write_line(options.stdout, f"\n> {name}\n")

        logger.debug(f"Running script {name}: {command}")
        env = os.environ.copy()
        env.update(options.env)

        process = await asyncio.create_subprocess_shell(
            command,
            stdin=_subprocess_target(options.stdin),
            stdout=_subprocess_target(options.stdout),
            stderr=_subprocess_target(options.stderr),
            cwd=str(self.cwd),
            env=env,
        )
        returncode = await process.wait()
        if returncode != 0:
            logger.debug(f"Script {name} exited with code {returncode}")
            raise ScriptFailedError(name, returncode)
