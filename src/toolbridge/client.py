"""
ToolbridgeClient - Main facade class for toolbridge.

Connects tool providers, builds the catalog and runs queries through the
agent loop.
"""

from __future__ import annotations

import logging
from typing import Any

from toolbridge.config.settings import ClientSettings, ProviderSpec
from toolbridge.conversation.history import ConversationHistory
from toolbridge.engine.loop import AgentLoop, QueryResult
from toolbridge.errors import ProviderConnectionError
from toolbridge.models.anthropic import AnthropicModel
from toolbridge.models.base import ModelClient
from toolbridge.providers.base import ProviderHandle, ToolDescriptor
from toolbridge.providers.registry import connect
from toolbridge.registry.dispatcher import ToolDispatcher
from toolbridge.registry.resolver import ToolNameResolver
from toolbridge.registry.tool_registry import DEFAULT_PROVIDER_ID, RegistryMode, ToolRegistry

logger = logging.getLogger(__name__)


class ToolbridgeClient:
    """Interactive tool-use client.

    Example:
        ```python
        async with ToolbridgeClient() as client:
            await client.connect_single("builtin")
            print(await client.process_query("What time is it?"))
        ```
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        model: ModelClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Client settings. Defaults to built-in defaults.
            model: Model client. Defaults to :class:`AnthropicModel`.
        """
        self.settings = settings or ClientSettings()
        self._model = model or AnthropicModel(
            model=self.settings.model, max_tokens=self.settings.max_tokens
        )
        self._history = ConversationHistory()
        self._registry: ToolRegistry | None = None
        self._loop: AgentLoop | None = None

    @property
    def mode(self) -> RegistryMode | None:
        return self._registry.mode if self._registry else None

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def registry(self) -> ToolRegistry:
        if self._registry is None:
            raise RuntimeError("No providers connected.")
        return self._registry

    def tools(self) -> list[ToolDescriptor]:
        return self._registry.catalog() if self._registry else []

    def _build(self, mode: RegistryMode) -> ToolRegistry:
        if self._registry is not None:
            raise RuntimeError("Providers are already connected.")
        registry = ToolRegistry(mode=mode, separator=self.settings.separator)
        loop_config = self.settings.loop
        self._loop = AgentLoop(
            model=self._model,
            registry=registry,
            config=loop_config,
            history=self._history,
            resolver=ToolNameResolver(
                registry, allow_flexible_match=self.settings.allow_flexible_match
            ),
            dispatcher=ToolDispatcher(
                registry,
                timeout=loop_config.tool_timeout,
                validate_arguments=self.settings.validate_arguments,
            ),
        )
        self._registry = registry
        return registry

    async def _attach(
        self, registry: ToolRegistry, provider_id: str, target: str, options: dict[str, Any]
    ) -> None:
        handle: ProviderHandle = await connect(target, **options)
        try:
            await registry.add_provider(provider_id, handle)
        except Exception as exc:
            await handle.close()
            raise ProviderConnectionError(target, str(exc)) from exc

    async def connect_single(self, target: str, **options: Any) -> list[ToolDescriptor]:
        """Connect one provider whose tools keep their own names."""
        registry = self._build(RegistryMode.SINGLE)
        await self._attach(registry, DEFAULT_PROVIDER_ID, target, options)
        return registry.catalog()

    async def connect_multi(self, providers: dict[str, ProviderSpec]) -> list[ToolDescriptor]:
        """Connect several providers, prefixing each tool with its provider id."""
        registry = self._build(RegistryMode.MULTI)
        for provider_id, spec in providers.items():
            logger.info("Connecting to %s provider", provider_id)
            await self._attach(registry, provider_id, spec.target, spec.options)
        return registry.catalog()

    async def run(self, query: str) -> QueryResult:
        if self._loop is None:
            raise RuntimeError("No providers connected.")
        return await self._loop.run(query)

    async def process_query(self, query: str) -> str:
        result = await self.run(query)
        return result.text

    def clear_history(self) -> None:
        self._history.clear()

    async def close(self) -> None:
        if self._registry is not None:
            await self._registry.close()

    async def __aenter__(self) -> ToolbridgeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
