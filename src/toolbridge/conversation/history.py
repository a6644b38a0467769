"""
Conversation history.

Turns are a closed set of pydantic models tagged by ``kind``. Consumers handle
every kind explicitly and raise on anything else.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class UserText(BaseModel):
    """Text typed by the user."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["user_text"] = "user_text"
    text: str


class AssistantText(BaseModel):
    """Text produced by the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["assistant_text"] = "assistant_text"
    text: str


class AssistantToolRequest(BaseModel):
    """A tool call requested by the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_request"] = "tool_request"
    id: str = Field(..., min_length=1, description="Correlation id of the request.")
    name: str = Field(..., description="Tool name exactly as issued by the model.")
    args: Mapping[str, Any] = Field(default_factory=dict)


class ToolOutcome(BaseModel):
    """Result of a tool request, correlated by ``tool_use_id``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_outcome"] = "tool_outcome"
    tool_use_id: str
    content: str
    is_error: bool = False


ConversationTurn = Annotated[
    Union[UserText, AssistantText, AssistantToolRequest, ToolOutcome],
    Field(discriminator="kind"),
]


class ConversationHistory:
    """Ordered, append-only record of conversation turns.

    :meth:`clear` is the only way to remove turns, and it removes all of them.
    """

    def __init__(self) -> None:
        self._turns: list[ConversationTurn] = []
        self._request_ids: set[str] = set()

    def append(self, turn: ConversationTurn) -> None:
        if not isinstance(turn, (UserText, AssistantText, AssistantToolRequest, ToolOutcome)):
            raise TypeError(f"Unsupported conversation turn: {type(turn).__name__}")
        if isinstance(turn, AssistantToolRequest):
            self._request_ids.add(turn.id)
        self._turns.append(turn)

    def all(self) -> tuple[ConversationTurn, ...]:
        """Return a read-only snapshot of every turn, oldest first."""
        return tuple(self._turns)

    def has_request(self, request_id: str) -> bool:
        """True if a tool request with this correlation id was recorded."""
        return request_id in self._request_ids

    def clear(self) -> None:
        self._turns = []
        self._request_ids = set()
        logger.debug("Conversation history cleared")

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(tuple(self._turns))
