"""
Built-in demo provider.

A handful of harmless tools for checking a toolbridge setup end to end
without starting an external tool server.
"""

from __future__ import annotations

import contextlib
from datetime import datetime, timezone

from toolbridge.providers.local import LocalToolProvider


def create_provider() -> LocalToolProvider:
    """Create the built-in provider."""
    provider = LocalToolProvider()

    @provider.tool(description="Echo the given text back unchanged.")
    def echo(text: str) -> str:
        return text

    @provider.tool(description="Return the current UTC time in ISO 8601 format.")
    def utc_now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @provider.tool(description="Add two numbers.")
    def add(a: float, b: float) -> dict[str, float]:
        return {"result": a + b}

    return provider


def _register() -> None:
    """Register the built-in provider with the global factory registry."""
    from toolbridge.providers.registry import get_registry

    registry = get_registry()
    with contextlib.suppress(ValueError):
        registry.register_factory("builtin", create_provider)


_register()
