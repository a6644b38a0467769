"""Tests for the in-process tool provider."""

from __future__ import annotations

import pytest

from toolbridge.errors import ToolInvocationError
from toolbridge.providers.base import ToolResult
from toolbridge.providers.builtin import create_provider
from toolbridge.providers.local import LocalToolProvider, schema_from_signature


def test_schema_from_signature():
    def write_file(path: str, content: str, overwrite: bool = False, *args, **kwargs) -> None:
        pass

    schema = schema_from_signature(write_file)

    assert schema == {
        "type": "object",
        "properties": {
            "path": {"type": "string"},
            "content": {"type": "string"},
            "overwrite": {"type": "boolean"},
        },
        "required": ["path", "content"],
    }


def test_schema_untyped_and_generic_params():
    def search(query, tags: list[str] | None = None, limit: int = 10):
        pass

    schema = schema_from_signature(search)

    assert schema["properties"]["query"] == {}
    assert schema["properties"]["limit"] == {"type": "integer"}
    assert schema["required"] == ["query"]


class TestLocalToolProvider:
    """Tests for LocalToolProvider."""

    @pytest.mark.asyncio
    async def test_decorator_registers_tool(self):
        provider = LocalToolProvider()

        @provider.tool()
        def shout(text: str) -> str:
            """Upper-case the text."""
            return text.upper()

        tools = await provider.list_tools()
        assert [t.name for t in tools] == ["shout"]
        assert tools[0].description == "Upper-case the text."

        result = await provider.invoke("shout", {"text": "hi"})
        assert result == ToolResult(content="HI")

    @pytest.mark.asyncio
    async def test_async_tool(self):
        provider = LocalToolProvider()

        async def fetch(url: str) -> dict:
            return {"url": url, "status": 200}

        provider.add_tool(fetch, name="http_get", description="GET a URL")

        result = await provider.invoke("http_get", {"url": "https://example.com"})
        assert result.content == {"url": "https://example.com", "status": 200}

    @pytest.mark.asyncio
    async def test_none_result_is_empty(self):
        provider = LocalToolProvider()
        provider.add_tool(lambda: None, name="noop")

        result = await provider.invoke("noop", {})
        assert result.content == ""
        assert not result.is_error

    @pytest.mark.asyncio
    async def test_tool_result_passthrough(self):
        provider = LocalToolProvider()
        provider.add_tool(lambda: ToolResult(content="denied", is_error=True), name="guarded")

        result = await provider.invoke("guarded", {})
        assert result.is_error

    @pytest.mark.asyncio
    async def test_exception_wrapped(self):
        provider = LocalToolProvider()

        def divide(a: int, b: int) -> float:
            return a / b

        provider.add_tool(divide)

        with pytest.raises(ToolInvocationError, match="division by zero"):
            await provider.invoke("divide", {"a": 1, "b": 0})

    @pytest.mark.asyncio
    async def test_bad_arguments_wrapped(self):
        provider = LocalToolProvider()
        provider.add_tool(lambda text: text, name="echo")

        with pytest.raises(ToolInvocationError):
            await provider.invoke("echo", {"wrong": 1})

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(ToolInvocationError, match="Unknown tool"):
            await LocalToolProvider().invoke("missing", {})

    @pytest.mark.asyncio
    async def test_closed_provider(self):
        provider = LocalToolProvider()
        provider.add_tool(lambda: "x", name="x")

        await provider.close()

        assert provider.closed
        with pytest.raises(ToolInvocationError, match="closed"):
            await provider.invoke("x", {})

    def test_duplicate_name_rejected(self):
        provider = LocalToolProvider()
        provider.add_tool(lambda: 1, name="one")
        with pytest.raises(ValueError):
            provider.add_tool(lambda: 2, name="one")

    def test_explicit_schema_kept(self):
        provider = LocalToolProvider()
        schema = {"type": "object", "properties": {"q": {"type": "string"}}}
        descriptor = provider.add_tool(lambda **kw: kw, name="raw", input_schema=schema)
        assert descriptor.input_schema == schema


class TestBuiltinProvider:
    """Tests for the built-in demo provider."""

    @pytest.mark.asyncio
    async def test_tools(self):
        provider = create_provider()
        names = [t.name for t in await provider.list_tools()]
        assert names == ["echo", "utc_now", "add"]

    @pytest.mark.asyncio
    async def test_echo_and_add(self):
        provider = create_provider()
        assert (await provider.invoke("echo", {"text": "hello"})).content == "hello"
        assert (await provider.invoke("add", {"a": 2, "b": 3.5})).content == {"result": 5.5}

    @pytest.mark.asyncio
    async def test_utc_now(self):
        result = await create_provider().invoke("utc_now", {})
        assert result.content.endswith("+00:00")
