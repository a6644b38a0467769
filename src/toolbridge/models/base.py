"""Model client contract: history and catalog in, ordered content blocks out."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from toolbridge.conversation.history import ConversationTurn
from toolbridge.providers.base import ToolDescriptor


class TextBlock(BaseModel):
    """Text content returned by the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class ToolRequestBlock(BaseModel):
    """Tool call requested by the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_request"] = "tool_request"
    id: str = ""
    name: str
    args: Mapping[str, Any] = Field(default_factory=dict)


ContentBlock = Annotated[Union[TextBlock, ToolRequestBlock], Field(discriminator="kind")]


class ModelResponse(BaseModel):
    """Ordered content blocks of one model reply."""

    model_config = ConfigDict(extra="allow")

    content: list[ContentBlock] = Field(default_factory=list)
    model: str | None = Field(default=None, description="Resolved model identifier.")
    stop_reason: str | None = Field(default=None, description="Stop reason.")
    usage: Mapping[str, int] | None = Field(default=None, description="Token usage.")

    @property
    def tool_requests(self) -> list[ToolRequestBlock]:
        return [b for b in self.content if isinstance(b, ToolRequestBlock)]


class ModelClient(ABC):
    """Abstract base class for language model clients."""

    @abstractmethod
    async def send(
        self,
        history: Sequence[ConversationTurn],
        tools: Sequence[ToolDescriptor] | None = None,
    ) -> ModelResponse:
        """Send the conversation (and tools, if any) and return the model reply.

        Implementations raise :class:`toolbridge.errors.ModelRequestError` on failure.
        """
