"""
Manifest-driven lifecycle hooks.

Binds `<prefix>:<event>` manifest scripts to host events and runs them
through a script engine.
"""

from slshooks.core.hooks.binder import HookBinder
from slshooks.core.hooks.models import INITIALIZE_EVENT, HookBinding
from slshooks.core.hooks.runner import ExecutionOrchestrator

__all__ = ["ExecutionOrchestrator", "HookBinder", "HookBinding", "INITIALIZE_EVENT"]
