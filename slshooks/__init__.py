"""
Run manifest scripts on host lifecycle events.
"""

from slshooks.models.host import HostState
from slshooks.plugin import ServerlessHooks

__version__ = "0.1.0"

__all__ = ["HostState", "ServerlessHooks"]
