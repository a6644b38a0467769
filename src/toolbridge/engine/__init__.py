"""
Agent engine - the bounded tool-use loop.

For one user query the engine:
1. Sends the conversation and tool catalog to the model
2. Resolves and executes each requested tool in order
3. Feeds the outcomes back until the model answers or the round budget runs out
"""

from toolbridge.engine.loop import (
    TRUNCATION_NOTICE,
    AgentLoop,
    IterationState,
    LoopConfig,
    LoopState,
    QueryResult,
    stringify_content,
)

__all__ = [
    "TRUNCATION_NOTICE",
    "AgentLoop",
    "IterationState",
    "LoopConfig",
    "LoopState",
    "QueryResult",
    "stringify_content",
]
