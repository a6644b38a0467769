"""Tests for the tool registry."""

from __future__ import annotations

import pytest

from conftest import RecordingProvider
from toolbridge.providers.base import ToolDescriptor
from toolbridge.registry.tool_registry import (
    DEFAULT_PROVIDER_ID,
    RegistryMode,
    ToolRegistry,
)


class TestSingleMode:
    """Tests for single-provider registries."""

    def test_names_are_unprefixed(self):
        registry = ToolRegistry()
        registry.register("anything", RecordingProvider(), [ToolDescriptor(name="read_file")])

        assert registry.mode == RegistryMode.SINGLE
        assert registry.names() == ["read_file"]
        assert registry.provider_ids() == [DEFAULT_PROVIDER_ID]

    def test_second_provider_rejected(self):
        registry = ToolRegistry()
        registry.register("a", RecordingProvider(), [ToolDescriptor(name="x")])

        with pytest.raises(ValueError):
            registry.register("b", RecordingProvider(), [ToolDescriptor(name="y")])


class TestMultiMode:
    """Tests for multi-provider registries."""

    def test_effective_names_are_prefixed(self, multi_registry):
        registry, _, _ = multi_registry
        assert registry.names() == [
            "filesystem_write_file",
            "filesystem_read_file",
            "github_create_repository",
        ]

    def test_catalog_keeps_descriptions_and_schema(self, multi_registry):
        registry, _, _ = multi_registry
        tool = registry.catalog()[0]
        assert tool.description == "Write a file"
        assert tool.input_schema["type"] == "object"

    def test_same_local_name_on_two_providers(self):
        registry = ToolRegistry(mode="multi")
        registry.register("alpha", RecordingProvider(), [ToolDescriptor(name="search")])
        registry.register("beta", RecordingProvider(), [ToolDescriptor(name="search")])

        assert registry.names() == ["alpha_search", "beta_search"]

    def test_custom_separator(self):
        registry = ToolRegistry(mode=RegistryMode.MULTI, separator="__")
        registry.register("fs", RecordingProvider(), [ToolDescriptor(name="read_file")])
        assert registry.names() == ["fs__read_file"]

    def test_entries_track_owner(self, multi_registry):
        registry, _, _ = multi_registry
        entry = registry.get_entry("github_create_repository")
        assert entry is not None
        assert entry.provider_id == "github"
        assert entry.local_name == "create_repository"
        assert registry.get_entry("missing") is None

    @pytest.mark.parametrize("provider_id", ["", "my_provider"])
    def test_invalid_provider_id(self, provider_id):
        registry = ToolRegistry(mode=RegistryMode.MULTI)
        with pytest.raises(ValueError):
            registry.register(provider_id, RecordingProvider(), [])

    def test_duplicate_provider_id(self, multi_registry):
        registry, _, _ = multi_registry
        with pytest.raises(ValueError):
            registry.register("github", RecordingProvider(), [])

    def test_duplicate_tool_within_provider(self):
        registry = ToolRegistry(mode=RegistryMode.MULTI)
        with pytest.raises(ValueError):
            registry.register(
                "fs",
                RecordingProvider(),
                [ToolDescriptor(name="read"), ToolDescriptor(name="read")],
            )
        assert registry.provider_ids() == []


def test_empty_separator_rejected():
    with pytest.raises(ValueError):
        ToolRegistry(separator="")


@pytest.mark.asyncio
async def test_add_provider_lists_tools():
    registry = ToolRegistry(mode=RegistryMode.MULTI)
    provider = RecordingProvider(["a", "b"])

    added = await registry.add_provider("p", provider)

    assert [e.name for e in added] == ["p_a", "p_b"]
    assert registry.get_handle("p") is provider
    assert len(registry) == 2


@pytest.mark.asyncio
async def test_close_continues_after_failure():
    class BrokenProvider(RecordingProvider):
        async def close(self) -> None:
            raise RuntimeError("boom")

    registry = ToolRegistry(mode=RegistryMode.MULTI)
    broken = BrokenProvider()
    healthy = RecordingProvider()
    registry.register("broken", broken, [])
    registry.register("healthy", healthy, [])

    await registry.close()

    assert healthy.closed
