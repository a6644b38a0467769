"""
Tool catalog, name resolution and dispatch.
"""

from toolbridge.registry.dispatcher import ToolDispatcher
from toolbridge.registry.resolver import MatchStrategy, Resolution, ToolNameResolver
from toolbridge.registry.tool_registry import (
    DEFAULT_PROVIDER_ID,
    DEFAULT_SEPARATOR,
    CatalogEntry,
    RegistryMode,
    ToolRegistry,
)

__all__ = [
    "DEFAULT_PROVIDER_ID",
    "DEFAULT_SEPARATOR",
    "CatalogEntry",
    "MatchStrategy",
    "RegistryMode",
    "Resolution",
    "ToolDispatcher",
    "ToolNameResolver",
    "ToolRegistry",
]
