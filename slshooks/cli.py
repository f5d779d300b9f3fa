"""
sls-hooks CLI.

A minimal stand-in host for running hook scripts outside the orchestration
tool, e.g. in CI or while writing hooks.

Usage:
    sls-hooks list                         # Show bound hooks
    sls-hooks run deploy                   # Fire initialize, then deploy
    sls-hooks run package deploy           # Fire several events in order
    sls-hooks -s ../api run deploy         # Use another service directory
"""

import argparse
import asyncio
import signal
import sys
import uuid
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from slshooks import __version__
from slshooks.config import get_settings, load_yaml_config
from slshooks.core.errors import HookError
from slshooks.core.hooks.models import INITIALIZE_EVENT
from slshooks.lib.logger import setup_logging
from slshooks.models.host import HostState
from slshooks.plugin import ServerlessHooks


# --- Helpers ---


def _build_host(args: argparse.Namespace, commands: list[str]) -> HostState:
    service_path = Path(args.service_path).expanduser().resolve()
    config_file = service_path / args.config
    return HostState(
        service_path=service_path,
        invocation_id=str(uuid.uuid4()),
        version=__version__,
        cli_commands=commands,
        cli_options={"service_path": str(service_path), "config": args.config},
        service=load_yaml_config(config_file),
    )


def _load_plugin(host: HostState) -> ServerlessHooks:
    """Construct the plugin, exiting with status 1 on bad configuration."""
    try:
        return ServerlessHooks(host)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Failed to open stream: {e}", file=sys.stderr)
        sys.exit(1)


def _exit_on_signal(signum, frame) -> None:
    # Unwind through finally/with blocks so the context file gets removed
    raise SystemExit(128 + signum)


def _install_signal_handlers() -> dict:
    """Route termination signals through SystemExit; returns the old handlers."""
    previous = {}
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, _exit_on_signal)
    return previous


async def _fire_events(plugin: ServerlessHooks, events: list[str]) -> bool:
    """Fire initialize, then each event in order. Stops at the first failure."""
    ordered = [INITIALIZE_EVENT] + [e for e in events if e != INITIALIZE_EVENT]
    for event in ordered:
        handler = plugin.hooks.get(event)
        if handler is None:
            print(f"No hook bound to '{event}', skipping", file=sys.stderr)
            continue
        try:
            await handler()
        except HookError as e:
            print(f"Hook '{event}' failed: {e}", file=sys.stderr)
            return False
    return True


# --- Commands ---


def cmd_list(args: argparse.Namespace) -> None:
    """Print the hooks bound from the manifest."""
    plugin = _load_plugin(_build_host(args, ["list"]))

    with plugin:
        print(f"Hooks in {plugin.manifest_path} (prefix '{plugin.hook_prefix}'):")
        for binding in plugin.bindings.values():
            if binding.synthetic:
                print(f"  {binding.event:<30} (context only)")
            else:
                print(f"  {binding.event:<30} {binding.command}")


def cmd_run(args: argparse.Namespace) -> None:
    """Fire the given events against the manifest hooks."""
    plugin = _load_plugin(_build_host(args, list(args.events)))

    previous_handlers = _install_signal_handlers()
    try:
        with plugin:
            ok = asyncio.run(_fire_events(plugin, args.events))
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
    if not ok:
        sys.exit(1)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="sls-hooks",
        description="Run manifest scripts on lifecycle events",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--service-path", "-s", default=".",
        help="Service directory holding the manifest (default: .)",
    )
    parser.add_argument(
        "--config", "-c", default="serverless.yml",
        help="Service config file, relative to the service path",
    )
    subparsers = parser.add_subparsers(dest="command")

    # list
    subparsers.add_parser("list", help="Show bound hooks")

    # run
    run_parser = subparsers.add_parser("run", help="Fire lifecycle events")
    run_parser.add_argument("events", nargs="+", help="Event names to fire")

    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging("DEBUG" if settings.debug else None)

    if args.command == "list":
        cmd_list(args)
    elif args.command == "run":
        cmd_run(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
