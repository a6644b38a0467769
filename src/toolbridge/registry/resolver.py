"""
Tool name resolution.

Models do not always use the exact catalog name of a tool: they drop the
provider prefix or paraphrase the name slightly. The resolver maps such a name
to one catalog entry by trying three strategies in strict priority order:

1. exact   - the requested name is an effective catalog name
2. suffix  - the requested name is a tool's local name (its final segment,
             without the provider prefix)
3. flexible - case-insensitive substring match between the requested name and
             a tool's local name, in either direction

The first catalog entry, in registration order, that satisfies a strategy wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from toolbridge.errors import ToolNotFound
from toolbridge.registry.tool_registry import CatalogEntry, ToolRegistry

logger = logging.getLogger(__name__)


class MatchStrategy(str, Enum):
    """Strategy that produced a resolution."""

    EXACT = "exact"
    SUFFIX = "suffix"
    FLEXIBLE = "flexible"


@dataclass(frozen=True)
class Resolution:
    """A successful name resolution."""

    requested: str
    entry: CatalogEntry
    strategy: MatchStrategy

    @property
    def name(self) -> str:
        return self.entry.name


def _exact(requested: str, entry: CatalogEntry) -> bool:
    return entry.name == requested


def _suffix(requested: str, entry: CatalogEntry) -> bool:
    return entry.local_name == requested


def _flexible(requested: str, entry: CatalogEntry) -> bool:
    wanted = requested.lower()
    local = entry.local_name.lower()
    return wanted in local or local in wanted


class ToolNameResolver:
    """Maps model-issued tool names onto the registry catalog."""

    def __init__(self, registry: ToolRegistry, allow_flexible_match: bool = True) -> None:
        self._registry = registry
        self._strategies: list[tuple[MatchStrategy, Callable[[str, CatalogEntry], bool]]] = [
            (MatchStrategy.EXACT, _exact),
            (MatchStrategy.SUFFIX, _suffix),
        ]
        if allow_flexible_match:
            self._strategies.append((MatchStrategy.FLEXIBLE, _flexible))

    def match(self, requested: str) -> Resolution | None:
        """Resolve *requested*, reporting the strategy used. ``None`` if nothing matches."""
        if not requested or not requested.strip():
            return None

        entries = self._registry.entries()
        for strategy, predicate in self._strategies:
            for entry in entries:
                if predicate(requested, entry):
                    if strategy is not MatchStrategy.EXACT:
                        logger.debug(
                            "Resolved tool %r to %r (%s match)",
                            requested,
                            entry.name,
                            strategy.value,
                        )
                    return Resolution(requested=requested, entry=entry, strategy=strategy)
        return None

    def resolve(self, requested: str) -> str | None:
        """Return the effective name for *requested*, or ``None`` when not found."""
        resolution = self.match(requested)
        return resolution.name if resolution else None

    def require(self, requested: str) -> str:
        """Like :meth:`resolve` but raises :class:`ToolNotFound` instead of returning ``None``."""
        resolved = self.resolve(requested)
        if resolved is None:
            available = self._registry.names()
            logger.warning("Tool not found: %s. Available tools: %s", requested, available)
            raise ToolNotFound(requested, available)
        return resolved
