"""
Tool Registry.

Aggregates the tools of one or more providers into a single flat catalog.

In single-provider mode tools keep their own names and belong to the implicit
provider ``"default"``. In multi-provider mode every tool is namespaced as
``<provider_id><separator><local_name>``, which keeps names unique even when two
providers expose a tool with the same name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from toolbridge.providers.base import ProviderHandle, ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_ID = "default"
DEFAULT_SEPARATOR = "_"


class RegistryMode(str, Enum):
    """Namespacing policy of the registry."""

    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class CatalogEntry:
    """A catalog tool together with its owner."""

    provider_id: str
    local_name: str
    descriptor: ToolDescriptor

    @property
    def name(self) -> str:
        """Effective (possibly prefixed) name."""
        return self.descriptor.name


class ToolRegistry:
    """
    Registry of providers and their namespaced tools.

    Registration order is preserved: it is the order of :meth:`catalog` and the
    tie-break order of name resolution.
    """

    def __init__(
        self,
        mode: RegistryMode | str = RegistryMode.SINGLE,
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        if not separator:
            raise ValueError("Separator must be a non-empty string.")
        self._mode = RegistryMode(mode)
        self._separator = separator
        self._handles: dict[str, ProviderHandle] = {}
        self._entries: list[CatalogEntry] = []

    @property
    def mode(self) -> RegistryMode:
        return self._mode

    @property
    def separator(self) -> str:
        return self._separator

    def effective_name(self, provider_id: str, local_name: str) -> str:
        """Name under which *local_name* of *provider_id* appears in the catalog."""
        if self._mode is RegistryMode.SINGLE:
            return local_name
        return f"{provider_id}{self._separator}{local_name}"

    def register(
        self,
        provider_id: str,
        handle: ProviderHandle,
        descriptors: list[ToolDescriptor],
    ) -> list[CatalogEntry]:
        """Register a provider handle and its tool descriptors.

        Args:
            provider_id: Provider identifier. Ignored in single mode, where the
                implicit ``"default"`` id is used.
            handle: Provider that will execute the tools.
            descriptors: Tools as named by the provider.

        Returns:
            The catalog entries added for this provider.

        Raises:
            ValueError: On an invalid or duplicate provider id, or a second
                provider in single mode.
        """
        if self._mode is RegistryMode.SINGLE:
            if self._handles:
                raise ValueError("Single-provider registry already has a provider.")
            provider_id = DEFAULT_PROVIDER_ID
        else:
            if not provider_id:
                raise ValueError("Provider id must be a non-empty string.")
            if self._separator in provider_id:
                raise ValueError(
                    f"Provider id '{provider_id}' must not contain the separator "
                    f"'{self._separator}'."
                )
            if provider_id in self._handles:
                raise ValueError(f"Provider '{provider_id}' is already registered.")

        seen: set[str] = set()
        added: list[CatalogEntry] = []
        for descriptor in descriptors:
            if descriptor.name in seen:
                raise ValueError(
                    f"Provider '{provider_id}' lists tool '{descriptor.name}' more than once."
                )
            seen.add(descriptor.name)
            added.append(
                CatalogEntry(
                    provider_id=provider_id,
                    local_name=descriptor.name,
                    descriptor=descriptor.renamed(
                        self.effective_name(provider_id, descriptor.name)
                    ),
                )
            )

        self._handles[provider_id] = handle
        self._entries.extend(added)
        logger.info(
            "Registered provider %s with tools: %s",
            provider_id,
            [e.local_name for e in added],
        )
        return added

    async def add_provider(self, provider_id: str, handle: ProviderHandle) -> list[CatalogEntry]:
        """List the tools of *handle* and register them."""
        descriptors = await handle.list_tools()
        return self.register(provider_id, handle, descriptors)

    def catalog(self) -> list[ToolDescriptor]:
        """Return all tool descriptors under their effective names."""
        return [e.descriptor for e in self._entries]

    def entries(self) -> list[CatalogEntry]:
        """Return all catalog entries in registration order."""
        return list(self._entries)

    def names(self) -> list[str]:
        return [e.name for e in self._entries]

    def get_entry(self, effective_name: str) -> CatalogEntry | None:
        for entry in self._entries:
            if entry.name == effective_name:
                return entry
        return None

    def get_handle(self, provider_id: str) -> ProviderHandle | None:
        return self._handles.get(provider_id)

    def provider_ids(self) -> list[str]:
        return list(self._handles.keys())

    async def close(self) -> None:
        """Close every provider handle; one failing close does not stop the rest."""
        for provider_id, handle in self._handles.items():
            try:
                await handle.close()
                logger.info("Closed connection to %s", provider_id)
            except Exception as exc:
                logger.error("Error closing provider %s: %s", provider_id, exc)

    def __len__(self) -> int:
        return len(self._entries)
