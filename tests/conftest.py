"""Pytest configuration and shared fixtures for toolbridge tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from toolbridge.conversation.history import ConversationTurn
from toolbridge.errors import ToolInvocationError
from toolbridge.models.base import ModelClient, ModelResponse, TextBlock, ToolRequestBlock
from toolbridge.providers.base import ProviderHandle, ToolDescriptor, ToolResult
from toolbridge.registry.tool_registry import RegistryMode, ToolRegistry


class RecordingProvider(ProviderHandle):
    """Provider that records invocations and returns canned results."""

    def __init__(
        self,
        tool_names: Sequence[str] = ("echo",),
        results: Mapping[str, Any] | None = None,
        failing: Sequence[str] = (),
    ) -> None:
        self._tool_names = list(tool_names)
        self._results = dict(results or {})
        self._failing = set(failing)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def list_tools(self) -> list[ToolDescriptor]:
        return [
            ToolDescriptor(
                name=name,
                description=f"The {name} tool",
                input_schema={"type": "object", "properties": {}},
            )
            for name in self._tool_names
        ]

    async def invoke(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        self.calls.append((name, dict(arguments)))
        if name in self._failing:
            raise ToolInvocationError(name, f"{name} failed")
        return ToolResult(content=self._results.get(name, f"{name} ok"))

    async def close(self) -> None:
        self.closed = True


class ScriptedModel(ModelClient):
    """Model that replays a fixed list of responses, then answers with text."""

    def __init__(
        self,
        responses: Sequence[ModelResponse] = (),
        repeat_last: bool = False,
        error: Exception | None = None,
    ) -> None:
        self._responses = list(responses)
        self._repeat_last = repeat_last
        self._error = error
        self.calls: list[tuple[tuple[ConversationTurn, ...], list[ToolDescriptor] | None]] = []

    async def send(
        self,
        history: Sequence[ConversationTurn],
        tools: Sequence[ToolDescriptor] | None = None,
    ) -> ModelResponse:
        self.calls.append((tuple(history), list(tools) if tools is not None else None))
        if self._error is not None:
            raise self._error
        if self._responses:
            if self._repeat_last and len(self._responses) == 1:
                return self._responses[0]
            return self._responses.pop(0)
        return text_response("done")

    @property
    def call_count(self) -> int:
        return len(self.calls)


def text_response(*texts: str) -> ModelResponse:
    return ModelResponse(content=[TextBlock(text=t) for t in texts])


def tool_response(*requests: tuple[str, str, dict[str, Any]], text: str | None = None) -> ModelResponse:
    blocks: list[TextBlock | ToolRequestBlock] = []
    if text is not None:
        blocks.append(TextBlock(text=text))
    blocks.extend(ToolRequestBlock(id=i, name=n, args=a) for i, n, a in requests)
    return ModelResponse(content=blocks)


@pytest.fixture
def recording_provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def multi_registry() -> tuple[ToolRegistry, RecordingProvider, RecordingProvider]:
    """Multi-provider registry with a filesystem and a github provider."""
    registry = ToolRegistry(mode=RegistryMode.MULTI)
    filesystem = RecordingProvider(["write_file", "read_file"])
    github = RecordingProvider(["create_repository"])
    registry.register(
        "filesystem",
        filesystem,
        [
            ToolDescriptor(name="write_file", description="Write a file"),
            ToolDescriptor(name="read_file", description="Read a file"),
        ],
    )
    registry.register(
        "github",
        github,
        [ToolDescriptor(name="create_repository", description="Create a repository")],
    )
    return registry, filesystem, github
