"""Base tool provider definitions for toolbridge."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolDescriptor(BaseModel):
    """A tool as advertised by a provider (or, after namespacing, by the catalog)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Tool name, unique within its provider.")
    description: str = Field(default="", description="Human readable tool description.")
    input_schema: Mapping[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema describing the tool arguments.",
    )

    def renamed(self, name: str) -> ToolDescriptor:
        """Return a copy of this descriptor under a different name."""
        return self.model_copy(update={"name": name})

    def to_anthropic_tool(self) -> dict[str, Any]:
        """Convert to Anthropic tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": dict(self.input_schema),
        }


class ToolResult(BaseModel):
    """Outcome of a single tool invocation."""

    model_config = ConfigDict(frozen=True)

    content: Any = Field(default="", description="Text or structured result payload.")
    is_error: bool = Field(default=False, description="Provider flagged the call as failed.")


class ProviderHandle(ABC):
    """Abstract base class for tool providers.

    A provider is an opaque capability source: something that can list its tools
    and execute them by their local name. How it is reached (in-process,
    subprocess, network stream) is the implementation's business.

    Implementations should:
    - implement async :meth:`list_tools` and :meth:`invoke`
    - override :meth:`close` when they hold resources
    """

    @abstractmethod
    async def list_tools(self) -> list[ToolDescriptor]:
        """Return the tools exposed by this provider."""

    @abstractmethod
    async def invoke(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Execute the tool registered under *name* with *arguments*."""

    async def close(self) -> None:  # noqa: B027 - optional hook
        """Release provider resources."""
