"""Routes resolved tool names to the provider that owns them."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, UnknownType

from toolbridge.errors import ProviderNotFound, ToolbridgeError, ToolInvocationError
from toolbridge.providers.base import ToolResult
from toolbridge.registry.tool_registry import DEFAULT_PROVIDER_ID, RegistryMode, ToolRegistry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Invokes catalog tools on their owning provider.

    One blocking round trip per call: no retries, no batching.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        timeout: float | None = None,
        validate_arguments: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Registry owning the provider handles.
            timeout: Seconds allowed per tool call; ``None`` waits forever.
            validate_arguments: Check arguments against the tool's input schema
                before calling the provider.
        """
        self._registry = registry
        self._timeout = timeout
        self._validate_arguments = validate_arguments

    def route(self, effective_name: str) -> tuple[str, str]:
        """Return ``(provider_id, local_name)`` for an effective name.

        In multi mode the name is split on the *first* separator only, since
        local tool names may contain the separator themselves.
        """
        if self._registry.mode is RegistryMode.SINGLE:
            return DEFAULT_PROVIDER_ID, effective_name

        provider_id, sep, local_name = effective_name.partition(self._registry.separator)
        if not sep or not local_name:
            raise ProviderNotFound(provider_id, effective_name)
        return provider_id, local_name

    async def dispatch(self, effective_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Invoke *effective_name* with *arguments*.

        Raises:
            ProviderNotFound: If the name does not route to a registered provider.
            ToolInvocationError: If the provider fails, times out, or the
                arguments do not match the tool schema.
        """
        provider_id, local_name = self.route(effective_name)
        handle = self._registry.get_handle(provider_id)
        if handle is None:
            raise ProviderNotFound(provider_id, effective_name)

        if self._validate_arguments:
            self._check_arguments(effective_name, arguments)

        logger.info("Calling tool %s on %s", local_name, provider_id)
        logger.debug("Tool %s arguments: %s", effective_name, json.dumps(arguments, default=str))

        try:
            result = await asyncio.wait_for(
                handle.invoke(local_name, arguments),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ToolInvocationError(
                effective_name, f"Tool {effective_name} timed out after {self._timeout}s"
            ) from exc
        except ToolInvocationError:
            raise
        except ToolbridgeError as exc:
            raise ToolInvocationError(effective_name, str(exc)) from exc
        except Exception as exc:
            raise ToolInvocationError(effective_name, str(exc) or type(exc).__name__) from exc

        return result

    def _check_arguments(self, effective_name: str, arguments: Mapping[str, Any]) -> None:
        entry = self._registry.get_entry(effective_name)
        if entry is None:
            return
        schema = dict(entry.descriptor.input_schema)
        try:
            Draft7Validator.check_schema(schema)
            errors = sorted(
                Draft7Validator(schema).iter_errors(dict(arguments)),
                key=lambda e: [str(p) for p in e.path],
            )
        except (SchemaError, UnknownType) as exc:
            logger.debug("Input schema of %s is invalid: %s", effective_name, exc)
            raise ToolInvocationError(
                effective_name, f"Invalid input schema for {effective_name}"
            ) from exc
        if errors:
            details = "; ".join(e.message for e in errors)
            raise ToolInvocationError(effective_name, f"Invalid arguments: {details}")
