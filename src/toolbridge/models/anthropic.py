"""
Anthropic model client.

Direct integration with the Anthropic Messages API for Claude models.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

from toolbridge.conversation.history import (
    AssistantText,
    AssistantToolRequest,
    ConversationTurn,
    ToolOutcome,
    UserText,
)
from toolbridge.errors import ModelRequestError
from toolbridge.models.base import ModelClient, ModelResponse, TextBlock, ToolRequestBlock
from toolbridge.providers.base import ToolDescriptor

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1000

logger = logging.getLogger(__name__)


def _turn_to_block(turn: ConversationTurn) -> tuple[str, dict[str, Any]]:
    """Return ``(role, content_block)`` for a history turn."""
    if isinstance(turn, UserText):
        return "user", {"type": "text", "text": turn.text}
    if isinstance(turn, AssistantText):
        return "assistant", {"type": "text", "text": turn.text}
    if isinstance(turn, AssistantToolRequest):
        return "assistant", {
            "type": "tool_use",
            "id": turn.id,
            "name": turn.name,
            "input": dict(turn.args),
        }
    if isinstance(turn, ToolOutcome):
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": turn.tool_use_id,
            "content": turn.content,
        }
        if turn.is_error:
            block["is_error"] = True
        return "user", block
    raise TypeError(f"Unsupported conversation turn: {type(turn).__name__}")


def to_anthropic_messages(history: Sequence[ConversationTurn]) -> list[dict[str, Any]]:
    """Convert history turns to Anthropic messages.

    Consecutive turns with the same role are merged into one message so that
    roles alternate as the API expects.
    """
    messages: list[dict[str, Any]] = []
    for turn in history:
        role, block = _turn_to_block(turn)
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"].append(block)
        else:
            messages.append({"role": role, "content": [block]})
    return messages


class AnthropicModel(ModelClient):
    """Anthropic API model client.

    Environment variables:
        ANTHROPIC_API_KEY: Required. Your Anthropic API key.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Any = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Model identifier.
            max_tokens: Maximum tokens per response.
            client: Pre-built ``AsyncAnthropic`` client (mainly for tests).
        """
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._model = model or DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._client: Any = client

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        """Get or create the Anthropic client."""
        if self._client is None:
            from anthropic import AsyncAnthropic

            if not self._api_key:
                raise ModelRequestError(
                    "Anthropic API key not configured. "
                    "Set ANTHROPIC_API_KEY environment variable or pass api_key."
                )

            self._client = AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def send(
        self,
        history: Sequence[ConversationTurn],
        tools: Sequence[ToolDescriptor] | None = None,
    ) -> ModelResponse:
        client = self._get_client()

        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": to_anthropic_messages(history),
        }
        if tools:
            kwargs["tools"] = [t.to_anthropic_tool() for t in tools]

        try:
            response = await client.messages.create(**kwargs)
        except Exception as exc:
            raise ModelRequestError(str(exc) or type(exc).__name__) from exc
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> ModelResponse:
        """Parse Anthropic API response."""
        blocks: list[TextBlock | ToolRequestBlock] = []

        for block in response.content:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                blocks.append(TextBlock(text=block.text))
            elif block_type == "tool_use":
                blocks.append(
                    ToolRequestBlock(id=block.id, name=block.name, args=block.input or {})
                )
            else:
                logger.debug("Ignoring content block of type %s", block_type)

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }

        return ModelResponse(
            content=blocks,
            model=getattr(response, "model", None),
            stop_reason=getattr(response, "stop_reason", None),
            usage=usage,
        )
