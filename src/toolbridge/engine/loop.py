"""Bounded agentic tool-use loop.

One user query runs through a small state machine::

    IDLE -> AWAITING_MODEL -> PROCESSING_RESPONSE -> (AWAITING_MODEL | IDLE)

Each round sends the whole conversation and the tool catalog to the model,
records every content block of the reply in order, and executes the tool
requests one after another. The query ends when a reply contains no tool
request or when the round budget is spent.

Tool failures (unknown tool, unknown provider, provider error) are written to
the history as error outcomes and the loop carries on. A failed model call
ends the current query with an error message; turns already recorded stay.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolbridge.conversation.history import (
    AssistantText,
    AssistantToolRequest,
    ConversationHistory,
    ToolOutcome,
    UserText,
)
from toolbridge.errors import (
    ErrorType,
    ModelRequestError,
    ProviderNotFound,
    ToolInvocationError,
    ToolNotFound,
)
from toolbridge.models.base import ModelClient, ModelResponse, TextBlock, ToolRequestBlock
from toolbridge.providers.base import ToolResult
from toolbridge.registry.dispatcher import ToolDispatcher
from toolbridge.registry.resolver import ToolNameResolver
from toolbridge.registry.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = "Maximum tool iterations reached."


class LoopState(str, Enum):
    """Processing state of the loop."""

    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    PROCESSING_RESPONSE = "processing_response"


class LoopConfig(BaseModel):
    """Configuration for the agent loop."""

    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    max_iterations: int = Field(default=3, ge=1, le=20, description="Model rounds per query.")
    model_timeout: float | None = Field(
        default=None, gt=0, description="Seconds allowed per model call; None waits forever."
    )
    tool_timeout: float | None = Field(
        default=None, gt=0, description="Seconds allowed per tool call; None waits forever."
    )


class IterationState(BaseModel):
    """Round counter for a single query."""

    count: int = 0
    max: int = 3

    @property
    def exhausted(self) -> bool:
        return self.count >= self.max


class QueryResult(BaseModel):
    """Result of processing one user query."""

    model_config = ConfigDict(extra="allow")

    text: str = Field(..., description="Accumulated response shown to the user.")
    rounds: int = Field(default=0, description="Model calls made.")
    tool_calls: int = Field(default=0, description="Tool requests seen.")
    truncated: bool = Field(default=False, description="Round budget ran out.")
    error: str | None = Field(default=None, description="Model failure message, if any.")
    error_type: ErrorType | None = Field(default=None)
    duration_ms: int = Field(default=0)

    @property
    def success(self) -> bool:
        return self.error is None


def stringify_content(content: Any) -> str:
    """Render tool result content as text; structured values become JSON."""
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False, default=str)


class AgentLoop:
    """Runs user queries against a model with access to the registry's tools."""

    def __init__(
        self,
        model: ModelClient,
        registry: ToolRegistry,
        config: LoopConfig | None = None,
        history: ConversationHistory | None = None,
        resolver: ToolNameResolver | None = None,
        dispatcher: ToolDispatcher | None = None,
    ) -> None:
        self._model = model
        self._registry = registry
        self._config = config or LoopConfig()
        self._history = history if history is not None else ConversationHistory()
        self._resolver = resolver or ToolNameResolver(registry)
        self._dispatcher = dispatcher or ToolDispatcher(
            registry, timeout=self._config.tool_timeout
        )
        self._state = LoopState.IDLE
        self._iteration = IterationState(max=self._config.max_iterations)

    @property
    def history(self) -> ConversationHistory:
        return self._history

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def config(self) -> LoopConfig:
        return self._config

    def reset(self) -> None:
        """Discard the whole conversation."""
        self._history.clear()

    async def process_query(self, query: str) -> str:
        """Run *query* and return the text shown to the user."""
        result = await self.run(query)
        return result.text

    async def run(self, query: str) -> QueryResult:
        """Run one user query through the bounded tool-use loop."""
        start_time = time.monotonic()
        self._history.append(UserText(text=query))
        self._iteration = IterationState(max=self._config.max_iterations)

        buffer: list[str] = []
        tool_calls = 0
        truncated = False

        try:
            while not self._iteration.exhausted:
                self._iteration.count += 1
                round_no = self._iteration.count

                response = await self._call_model()

                self._state = LoopState.PROCESSING_RESPONSE
                tool_use_detected = False
                for block in response.content:
                    if isinstance(block, TextBlock):
                        buffer.append(block.text + "\n")
                        self._history.append(AssistantText(text=block.text))
                    elif isinstance(block, ToolRequestBlock):
                        tool_use_detected = True
                        tool_calls += 1
                        buffer.append(await self._handle_tool_request(block))
                    else:
                        raise TypeError(f"Unsupported content block: {type(block).__name__}")

                if not tool_use_detected:
                    logger.debug("Round %d produced a final answer", round_no)
                    break

                if self._iteration.exhausted:
                    logger.info("Maximum tool iterations (%d) reached", self._iteration.max)
                    buffer.append(TRUNCATION_NOTICE)
                    truncated = True

        except ModelRequestError as exc:
            logger.exception("Error processing query")
            return QueryResult(
                text=f"Sorry, I encountered an error: {exc}",
                rounds=self._iteration.count,
                tool_calls=tool_calls,
                error=str(exc),
                error_type=exc.error_type,
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )
        finally:
            self._state = LoopState.IDLE

        return QueryResult(
            text="".join(buffer),
            rounds=self._iteration.count,
            tool_calls=tool_calls,
            truncated=truncated,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

    async def _call_model(self) -> ModelResponse:
        self._state = LoopState.AWAITING_MODEL
        catalog = self._registry.catalog()
        try:
            return await asyncio.wait_for(
                self._model.send(self._history.all(), catalog or None),
                timeout=self._config.model_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ModelRequestError(
                f"Model request timed out after {self._config.model_timeout}s",
                ErrorType.TIMEOUT,
            ) from exc
        except ModelRequestError:
            raise
        except Exception as exc:
            raise ModelRequestError(str(exc) or type(exc).__name__) from exc

    def _correlation_id(self, block: ToolRequestBlock) -> str:
        if block.id and not self._history.has_request(block.id):
            return block.id
        generated = f"toolu_{uuid.uuid4().hex[:24]}"
        logger.warning(
            "Tool request %s has a missing or duplicate id %r; using %s",
            block.name,
            block.id,
            generated,
        )
        return generated

    async def _handle_tool_request(self, block: ToolRequestBlock) -> str:
        """Record, resolve and execute one tool request; return its response note."""
        request_id = self._correlation_id(block)
        logger.info("Model requested tool: %s", block.name)

        # The request is recorded before resolution so it exists even on failure
        self._history.append(AssistantToolRequest(id=request_id, name=block.name, args=block.args))

        try:
            effective_name = self._resolver.require(block.name)
        except ToolNotFound as exc:
            self._record_outcome(request_id, f"Error: {exc}", is_error=True)
            return f"[Error: {exc}]\n"

        try:
            result: ToolResult = await self._dispatcher.dispatch(effective_name, block.args)
            content = stringify_content(result.content)
        except (ToolInvocationError, ProviderNotFound) as exc:
            logger.warning("Tool error: %s", exc)
            self._record_outcome(request_id, f"Error: {exc}", is_error=True)
            return f"[Tool error: {exc}]\n"
        except Exception as exc:
            logger.exception("Unexpected error handling tool %s", effective_name)
            message = str(exc) or type(exc).__name__
            self._record_outcome(request_id, f"Error: {message}", is_error=True)
            return f"[Tool error: {message}]\n"

        self._record_outcome(request_id, content, is_error=result.is_error)
        return f"[Used tool: {effective_name}]\n"

    def _record_outcome(self, request_id: str, content: str, *, is_error: bool) -> None:
        self._history.append(ToolOutcome(tool_use_id=request_id, content=content, is_error=is_error))
