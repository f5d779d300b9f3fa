"""
Hook binding models.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

INITIALIZE_EVENT = "initialize"

HookHandler = Callable[[], Awaitable[None]]


@dataclass
class HookBinding:
    """A lifecycle event bound to a manifest script."""

    event: str
    script_name: str
    handler: HookHandler
    command: Optional[str] = None
    synthetic: bool = False
