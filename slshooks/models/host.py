"""
Host-facing models.

The host is the orchestration tool that fires lifecycle events. The hooks
plugin only ever reads from it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

# Top-level service fields copied into the invocation context
SERVICE_FIELDS = (
    "service", "custom", "plugins", "provider", "functions", "resources",
    "package", "frameworkVersion", "app", "tenant", "org", "layers", "outputs",
)


class Host(Protocol):
    """Read-only view of the host invocation.

    A host may also provide `log`, a callable taking one message string; hook
    diagnostics go there instead of stderr when it is present.
    """

    invocation_id: str
    version: str
    cli_commands: list[str]
    cli_options: dict[str, Any]
    service_path: Path
    service: Mapping[str, Any]


@dataclass
class HostState:
    """Plain Host implementation used by the CLI and in tests."""

    service_path: Path
    invocation_id: str = ""
    version: str = ""
    cli_commands: list[str] = field(default_factory=list)
    cli_options: dict[str, Any] = field(default_factory=dict)
    service: dict[str, Any] = field(default_factory=dict)
    log: Optional[Callable[[str], None]] = None


class InvocationContext(BaseModel):
    """Snapshot of the host invocation handed to hook scripts via SLS_CONTEXT."""

    model_config = ConfigDict(populate_by_name=True)

    invocation_id: Optional[str] = Field(default=None, alias="invocationId")
    version: Optional[str] = None
    cli_commands: list[str] = Field(default_factory=list, alias="cliCommands")
    cli_options: dict[str, Any] = Field(default_factory=dict, alias="cliOptions")
    service_path: str = Field(alias="servicePath")
    service: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_host(cls, host: Host) -> "InvocationContext":
        """Build a snapshot, keeping only the allow-listed truthy service fields."""
        service = {
            key: host.service[key]
            for key in SERVICE_FIELDS
            if host.service.get(key)
        }
        return cls(
            invocation_id=host.invocation_id,
            version=host.version,
            cli_commands=list(host.cli_commands or []),
            cli_options=dict(host.cli_options or {}),
            service_path=str(host.service_path),
            service=service,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
