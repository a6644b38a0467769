"""toolbridge package."""

from .client import ToolbridgeClient
from .config.settings import ClientSettings, ProviderSpec, load_settings
from .conversation.history import (
    AssistantText,
    AssistantToolRequest,
    ConversationHistory,
    ConversationTurn,
    ToolOutcome,
    UserText,
)
from .engine.loop import AgentLoop, LoopConfig, QueryResult
from .errors import (
    ModelRequestError,
    ProviderConnectionError,
    ProviderNotFound,
    ToolbridgeError,
    ToolInvocationError,
    ToolNotFound,
)
from .models.base import ModelClient, ModelResponse, TextBlock, ToolRequestBlock
from .providers import (
    LocalToolProvider,
    ProviderHandle,
    ToolDescriptor,
    ToolResult,
    connect,
)
from .registry import RegistryMode, ToolDispatcher, ToolNameResolver, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AgentLoop",
    "AssistantText",
    "AssistantToolRequest",
    "ClientSettings",
    "ConversationHistory",
    "ConversationTurn",
    "LocalToolProvider",
    "LoopConfig",
    "ModelClient",
    "ModelRequestError",
    "ModelResponse",
    "ProviderConnectionError",
    "ProviderHandle",
    "ProviderNotFound",
    "ProviderSpec",
    "QueryResult",
    "RegistryMode",
    "TextBlock",
    "ToolDescriptor",
    "ToolDispatcher",
    "ToolInvocationError",
    "ToolNameResolver",
    "ToolNotFound",
    "ToolOutcome",
    "ToolRegistry",
    "ToolRequestBlock",
    "ToolResult",
    "ToolbridgeError",
    "UserText",
    "ToolbridgeClient",
    "connect",
    "load_settings",
]
