"""Conversation turns and history."""

from toolbridge.conversation.history import (
    AssistantText,
    AssistantToolRequest,
    ConversationHistory,
    ConversationTurn,
    ToolOutcome,
    UserText,
)

__all__ = [
    "AssistantText",
    "AssistantToolRequest",
    "ConversationHistory",
    "ConversationTurn",
    "ToolOutcome",
    "UserText",
]
