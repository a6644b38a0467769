from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from toolbridge.errors import ProviderConnectionError
from toolbridge.providers.base import ProviderHandle, ToolDescriptor, ToolResult
from toolbridge.providers.local import LocalToolProvider
from toolbridge.providers.registry import ProviderFactoryRegistry, connect, get_registry


class DummyProvider(ProviderHandle):
    def __init__(self, label: str = "dummy") -> None:
        self.label = label

    async def list_tools(self) -> list[ToolDescriptor]:
        return [ToolDescriptor(name="ping")]

    async def invoke(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        return ToolResult(content="pong")

    async def close(self) -> None:
        pass


class OtherDummyProvider(DummyProvider):
    pass


async def create_async_provider(label: str = "async") -> DummyProvider:
    return DummyProvider(label)


def create_not_a_provider() -> object:
    return object()


@pytest.fixture(autouse=True)
def _isolated_registry() -> Iterator[None]:
    saved = ProviderFactoryRegistry._instance
    ProviderFactoryRegistry._instance = None
    yield
    ProviderFactoryRegistry._instance = saved


def test_registry_is_singleton() -> None:
    r1 = ProviderFactoryRegistry()
    r2 = get_registry()
    assert r1 is r2


def test_register_and_get_factory() -> None:
    registry = ProviderFactoryRegistry()

    registry.register_factory("Dummy ", DummyProvider)
    assert registry.get_factory("dummy") is DummyProvider
    assert "dummy" in registry.list_factories()


def test_register_same_factory_twice_is_allowed() -> None:
    registry = ProviderFactoryRegistry()
    registry.register_factory("dummy", DummyProvider)
    registry.register_factory("dummy", DummyProvider)


def test_register_duplicate_name_rejected() -> None:
    registry = ProviderFactoryRegistry()

    registry.register_factory("dummy", DummyProvider)
    with pytest.raises(ValueError):
        registry.register_factory("dummy", OtherDummyProvider)


def test_register_invalid() -> None:
    registry = ProviderFactoryRegistry()
    with pytest.raises(ValueError):
        registry.register_factory("  ", DummyProvider)
    with pytest.raises(TypeError):
        registry.register_factory("x", "not callable")  # type: ignore[arg-type]


@dataclass(frozen=True)
class _FakeEntryPoint:
    name: str
    value: Any

    def load(self) -> Any:
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class _FakeEntryPoints:
    def __init__(self, items: Iterable[_FakeEntryPoint]) -> None:
        self._items = list(items)

    def select(self, *, group: str) -> list[_FakeEntryPoint]:
        return list(self._items)


def test_entry_point_auto_discovery(monkeypatch: pytest.MonkeyPatch) -> None:
    from toolbridge.providers import registry as registry_module

    def fake_entry_points() -> _FakeEntryPoints:
        return _FakeEntryPoints(
            [
                _FakeEntryPoint(name="dummy", value=DummyProvider),
                _FakeEntryPoint(name="broken", value=ImportError("missing dep")),
                _FakeEntryPoint(name="constant", value=42),
            ]
        )

    monkeypatch.setattr(registry_module.metadata, "entry_points", fake_entry_points)

    registry = ProviderFactoryRegistry()
    assert registry.list_factories() == ["dummy"]


@pytest.mark.asyncio
async def test_connect_registered_name() -> None:
    get_registry().register_factory("dummy", DummyProvider)

    handle = await connect("dummy", label="custom")

    assert isinstance(handle, DummyProvider)
    assert handle.label == "custom"


@pytest.mark.asyncio
async def test_connect_import_path() -> None:
    handle = await connect("toolbridge.providers.builtin:create_provider")

    assert isinstance(handle, LocalToolProvider)
    assert [t.name for t in await handle.list_tools()] == ["echo", "utc_now", "add"]


@pytest.mark.asyncio
async def test_connect_awaits_async_factory() -> None:
    handle = await connect(f"{__name__}:create_async_provider")
    assert isinstance(handle, DummyProvider)
    assert handle.label == "async"


@pytest.mark.asyncio
async def test_connect_unknown_name() -> None:
    with pytest.raises(ProviderConnectionError) as exc_info:
        await connect("definitely-not-registered")
    assert exc_info.value.target == "definitely-not-registered"


@pytest.mark.asyncio
async def test_connect_bad_import_path() -> None:
    with pytest.raises(ProviderConnectionError):
        await connect("toolbridge.nonexistent_module:factory")


@pytest.mark.asyncio
async def test_connect_factory_failure() -> None:
    def failing_factory() -> ProviderHandle:
        raise OSError("server binary not found")

    get_registry().register_factory("failing", failing_factory)

    with pytest.raises(ProviderConnectionError, match="server binary not found"):
        await connect("failing")


@pytest.mark.asyncio
async def test_connect_rejects_non_handle() -> None:
    with pytest.raises(ProviderConnectionError, match="not a ProviderHandle"):
        await connect(f"{__name__}:create_not_a_provider")
