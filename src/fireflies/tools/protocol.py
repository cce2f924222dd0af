# Tool protocol - simple, string-based handler interface for chat commands.
# Created: 2026-10-03


from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class ToolDefinition:
    """Describes a chat command handler."""

    name: str
    description: str
    usage: str
    parameters: dict[str, Any]  # JSON Schema

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "command": f"/{self.name}",
            "description": self.description,
            "usage": self.usage,
            "parameters": self.parameters,
        }


class ToolProtocol(Protocol):
    """Protocol for command handlers.

    Handlers take keyword parameters and return the assistant reply as a
    string. Failures are part of the reply, never raised.
    """

    @property
    def name(self) -> str:
        """Command name without the leading slash."""
        ...

    @property
    def definition(self) -> ToolDefinition:
        ...

    async def execute(self, **params: Any) -> str:
        """Run the command and return the chat reply."""
        ...


class BaseTool(ABC):
    """Base class for command handlers with common functionality."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Command name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Short description shown in help listings."""
        ...

    @property
    def usage(self) -> str:
        """Hint returned when the command is used without a payload."""
        return f"/{self.name}"

    @property
    def parameters(self) -> dict[str, Any]:
        """Parameter schema. Override in subclass."""
        return {"type": "object", "properties": {}, "required": []}

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            usage=self.usage,
            parameters=self.parameters,
        )

    @abstractmethod
    async def execute(self, **params: Any) -> str:
        """Execute the command."""
        ...
