"""Tool providers and the provider factory registry."""

from .base import ProviderHandle, ToolDescriptor, ToolResult
from .local import LocalToolProvider
from .registry import ProviderFactoryRegistry, connect, get_registry

from . import builtin  # noqa: E402,F401  registers the "builtin" provider

__all__ = [
    "LocalToolProvider",
    "ProviderFactoryRegistry",
    "ProviderHandle",
    "ToolDescriptor",
    "ToolResult",
    "connect",
    "get_registry",
]
