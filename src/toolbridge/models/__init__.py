"""Language model clients."""

from .anthropic import AnthropicModel, to_anthropic_messages
from .base import ContentBlock, ModelClient, ModelResponse, TextBlock, ToolRequestBlock

__all__ = [
    "AnthropicModel",
    "ContentBlock",
    "ModelClient",
    "ModelResponse",
    "TextBlock",
    "ToolRequestBlock",
    "to_anthropic_messages",
]
