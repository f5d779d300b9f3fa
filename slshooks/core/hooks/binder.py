"""
Hook binder: turns manifest scripts into lifecycle event handlers.

Any manifest script whose name starts with the hook prefix is bound to the
event named by the rest of the key:

    "scripts": {
        "hook:initialize": "python scripts/check_env.py",
        "hook:before:deploy:deploy": "make bundle"
    }

binds `initialize` and `before:deploy:deploy`. An `initialize` binding always
exists; without a real script it only prepares the invocation context.
"""

import logging
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional

from slshooks.core.hooks.models import INITIALIZE_EVENT, HookBinding
from slshooks.core.manifest import read_scripts

logger = logging.getLogger(__name__)


class HookBinder:
    """Discovers hook scripts in a manifest and binds them to events."""

    def __init__(
        self,
        prefix: str,
        run_hook: Callable[[str], Awaitable[None]],
        initialize: Callable[[], Awaitable[None]],
    ):
        self.prefix = prefix
        self._run_hook = run_hook
        self._initialize = initialize

    def discover(self, manifest_path: Path) -> dict[str, HookBinding]:
        """Read the manifest and return bindings keyed by event name."""
        entries = [(f"{self.prefix}{INITIALIZE_EVENT}", None), *read_scripts(manifest_path)]

        # Later entries override earlier ones with the same key
        scripts: dict[str, Optional[str]] = {}
        for name, command in entries:
            scripts[name] = command

        bindings: dict[str, HookBinding] = {}
        for name, command in scripts.items():
            if not name.startswith(self.prefix):
                continue
            binding = self._bind(name[len(self.prefix):], name, command)
            bindings[binding.event] = binding

        logger.debug(f"Bound {len(bindings)} hooks: {', '.join(bindings)}")
        return bindings

    def _bind(self, event: str, script_name: str, command: Optional[str]) -> HookBinding:
        if event == INITIALIZE_EVENT:
            synthetic = not command
            handler = partial(self._on_initialize, script_name, synthetic)
        else:
            synthetic = False
            handler = partial(self._run_hook, script_name)
        return HookBinding(
            event=event,
            script_name=script_name,
            handler=handler,
            command=command,
            synthetic=synthetic,
        )

    async def _on_initialize(self, script_name: str, synthetic: bool) -> None:
        await self._initialize()
        if not synthetic:
            await self._run_hook(script_name)
