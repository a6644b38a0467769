"""
In-process tool provider.

Exposes plain Python callables (sync or async) as tools. Useful for embedding
toolbridge in another application and for testing without external processes.
"""

from __future__ import annotations

import inspect
import logging
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from toolbridge.errors import ToolbridgeError, ToolInvocationError
from toolbridge.providers.base import ProviderHandle, ToolDescriptor, ToolResult

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def schema_from_signature(func: Callable[..., Any]) -> dict[str, Any]:
    """Build a JSON Schema for *func*'s keyword arguments.

    Parameters without a default are required. Annotations that do not map to
    a JSON type are left untyped.
    """
    try:
        hints = typing.get_type_hints(func)
    except Exception:
        hints = {}

    properties: dict[str, Any] = {}
    required: list[str] = []
    for param in inspect.signature(func).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = typing.get_origin(hints.get(param.name)) or hints.get(param.name)
        json_type = _JSON_TYPES.get(annotation)
        properties[param.name] = {"type": json_type} if json_type else {}
        if param.default is inspect.Parameter.empty:
            required.append(param.name)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


@dataclass
class _LocalTool:
    descriptor: ToolDescriptor
    func: Callable[..., Any]


class LocalToolProvider(ProviderHandle):
    """Provider backed by Python callables.

    Example:
        ```python
        provider = LocalToolProvider()

        @provider.tool(description="Echo the input back")
        def echo(text: str) -> str:
            return text
        ```
    """

    def __init__(self) -> None:
        self._tools: dict[str, _LocalTool] = {}
        self._closed = False

    def add_tool(
        self,
        func: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
        input_schema: Mapping[str, Any] | None = None,
    ) -> ToolDescriptor:
        """Register *func* as a tool and return its descriptor."""
        tool_name = name or func.__name__
        if tool_name in self._tools:
            raise ValueError(f"Tool '{tool_name}' is already registered")

        descriptor = ToolDescriptor(
            name=tool_name,
            description=description or inspect.getdoc(func) or "",
            input_schema=dict(input_schema) if input_schema else schema_from_signature(func),
        )
        self._tools[tool_name] = _LocalTool(descriptor=descriptor, func=func)
        return descriptor

    def tool(
        self,
        name: str | None = None,
        description: str | None = None,
        input_schema: Mapping[str, Any] | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`add_tool`."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add_tool(func, name=name, description=description, input_schema=input_schema)
            return func

        return decorator

    @property
    def closed(self) -> bool:
        return self._closed

    async def list_tools(self) -> list[ToolDescriptor]:
        return [t.descriptor for t in self._tools.values()]

    async def invoke(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        if self._closed:
            raise ToolInvocationError(name, "Provider is closed")

        tool = self._tools.get(name)
        if tool is None:
            raise ToolInvocationError(name, f"Unknown tool: {name}")

        try:
            result = tool.func(**dict(arguments))
            if inspect.isawaitable(result):
                result = await result
        except ToolbridgeError:
            raise
        except Exception as exc:
            logger.debug("Local tool %s raised", name, exc_info=True)
            raise ToolInvocationError(name, str(exc) or type(exc).__name__) from exc

        if isinstance(result, ToolResult):
            return result
        return ToolResult(content=result if result is not None else "")

    async def close(self) -> None:
        self._closed = True
