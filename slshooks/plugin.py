"""
serverless-hooks plugin.

Binds host lifecycle events to manifest scripts. Construct it once per host
process; `hooks` maps event names to async handlers for the host to call.

    with ServerlessHooks(host) as plugin:
        await plugin.hooks["initialize"]()
        await plugin.hooks["deploy"]()
"""

import logging
from pathlib import Path
from typing import Optional

from slshooks.config import PLUGIN_NAME, PluginConfig, Settings
from slshooks.core.context import ContextSnapshotWriter
from slshooks.core.engine import ScriptEngine, ShellScriptEngine
from slshooks.core.hooks.binder import HookBinder
from slshooks.core.hooks.models import HookBinding, HookHandler
from slshooks.core.hooks.runner import ExecutionOrchestrator
from slshooks.core.streams import StreamResolver
from slshooks.models.host import Host

logger = logging.getLogger(__name__)


class ServerlessHooks:
    """Exposes manifest hook scripts as host lifecycle handlers."""

    plugin_name = PLUGIN_NAME

    def __init__(
        self,
        host: Host,
        engine: Optional[ScriptEngine] = None,
        settings: Optional[Settings] = None,
    ):
        self.host = host
        self.settings = settings or Settings()
        self.config = PluginConfig.from_service(host.service)
        self.hook_prefix = self.config.binding_prefix

        service_path = Path(host.service_path)
        self.manifest_path = service_path / self.config.manifest

        # Fails here, before any hook is usable, if a stream file can't be opened
        resolver = StreamResolver(self.config.execution_options, base_dir=service_path)
        self.streams = resolver.resolve()
        self.context = ContextSnapshotWriter()
        self.engine = engine or ShellScriptEngine(self.manifest_path, cwd=service_path)
        self.runner = ExecutionOrchestrator(
            self.engine,
            self.streams,
            passthrough=self.config.execution_options.passthrough,
            debug=self.settings.debug,
            log=getattr(host, "log", None),
        )

        binder = HookBinder(self.hook_prefix, run_hook=self.runner.run, initialize=self.on_initialize)
        self.bindings: dict[str, HookBinding] = binder.discover(self.manifest_path)
        self.hooks: dict[str, HookHandler] = {
            event: binding.handler for event, binding in self.bindings.items()
        }
        logger.debug(f"{self.plugin_name}: {len(self.hooks)} hooks from {self.manifest_path}")

    async def on_initialize(self) -> None:
        """Publish the invocation context before any hook script runs."""
        self.runner.context_path = await self.context.setup(self.host)
        self.streams.prepare_for_sharing()

    def close(self) -> None:
        """Remove the context file and close file-backed streams."""
        self.context.close()
        self.streams.close()

    def __enter__(self) -> "ServerlessHooks":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
