"""Global registry of tool provider factories and the ``connect`` entry point."""

from __future__ import annotations

import importlib
import inspect
import logging
from collections.abc import Callable, Iterable
from importlib import metadata
from threading import RLock
from typing import Any

from toolbridge.errors import ProviderConnectionError
from toolbridge.providers.base import ProviderHandle

_ENTRY_POINT_GROUP = "toolbridge.providers"
_log = logging.getLogger(__name__)

ProviderFactory = Callable[..., Any]


class ProviderFactoryRegistry:
    """Singleton registry of provider factories.

    A factory is any callable returning a :class:`ProviderHandle` (or an
    awaitable resolving to one): a ``ProviderHandle`` subclass, a function or
    a coroutine function.
    """

    _instance: ProviderFactoryRegistry | None = None
    _instance_lock: RLock = RLock()

    def __new__(cls) -> ProviderFactoryRegistry:
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
        return cls._instance

    _initialized: bool = False

    def __init__(self) -> None:
        if self._initialized:
            return
        self._factories: dict[str, ProviderFactory] = {}
        self._lock: RLock = RLock()
        self._initialized = True
        self._discover_entry_points()

    def register_factory(self, name: str, factory: ProviderFactory) -> None:
        """Register a provider factory under the given name."""

        normalized = name.strip().lower()
        if not normalized:
            raise ValueError("Provider name must be a non-empty string.")
        if not callable(factory):
            raise TypeError("factory must be callable.")
        with self._lock:
            existing = self._factories.get(normalized)
            if existing is not None and existing is not factory:
                raise ValueError(f"Provider '{normalized}' is already registered.")
            self._factories[normalized] = factory

    def get_factory(self, name: str) -> ProviderFactory | None:
        """Return the factory registered under *name*, if any."""

        with self._lock:
            return self._factories.get(name.strip().lower())

    def list_factories(self) -> list[str]:
        """Return a sorted list of registered provider names."""

        with self._lock:
            return sorted(self._factories.keys())

    def _discover_entry_points(self) -> None:
        """Load and register provider factories from entry points."""

        try:
            entry_points = metadata.entry_points()
        except Exception:  # pragma: no cover
            _log.debug("Failed to read provider entry points.", exc_info=True)
            return

        for entry_point in self._select_entry_points(entry_points, _ENTRY_POINT_GROUP):
            try:
                factory = entry_point.load()
            except Exception:
                _log.debug(
                    "Failed to load provider entry point '%s'.", entry_point.name, exc_info=True
                )
                continue

            if not callable(factory):
                _log.debug(
                    "Provider entry point '%s' resolved to non-callable %r; skipping.",
                    entry_point.name,
                    factory,
                )
                continue

            try:
                self.register_factory(entry_point.name, factory)
            except Exception:
                _log.debug(
                    "Failed to register provider entry point '%s'.", entry_point.name, exc_info=True
                )
                continue

    @staticmethod
    def _select_entry_points(entry_points: Any, group: str) -> Iterable[Any]:
        select = getattr(entry_points, "select", None)
        if callable(select):
            result: Iterable[Any] = select(group=group)
            return result
        return []


def get_registry() -> ProviderFactoryRegistry:
    """Return the global provider factory registry singleton."""

    return ProviderFactoryRegistry()


def _load_import_path(target: str) -> ProviderFactory:
    """Import ``module:attribute`` and return the attribute."""
    module_name, _, attr_path = target.partition(":")
    if not module_name or not attr_path:
        raise ValueError(f"Expected 'module:attribute', got '{target}'")

    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


async def connect(target: str, **options: Any) -> ProviderHandle:
    """Establish a provider from a registered name or a ``module:attribute`` path.

    Args:
        target: Registered provider name (e.g. ``builtin``) or import path to a
            factory (e.g. ``my_tools.server:create_provider``).
        **options: Keyword arguments passed to the factory.

    Returns:
        The connected provider handle.

    Raises:
        ProviderConnectionError: If the factory cannot be found or fails.
    """
    factory = get_registry().get_factory(target)
    try:
        if factory is None:
            if ":" not in target:
                available = ", ".join(get_registry().list_factories())
                raise ValueError(f"Unknown provider. Available: [{available}]")
            factory = _load_import_path(target)

        handle = factory(**options)
        if inspect.isawaitable(handle):
            handle = await handle
    except ProviderConnectionError:
        raise
    except Exception as exc:
        raise ProviderConnectionError(target, str(exc)) from exc

    if not isinstance(handle, ProviderHandle):
        raise ProviderConnectionError(
            target, f"factory returned {type(handle).__name__}, not a ProviderHandle"
        )

    _log.info("Connected to provider %s", target)
    return handle
