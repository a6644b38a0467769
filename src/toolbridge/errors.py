"""Exception taxonomy and error classification for toolbridge.

Only a :class:`ProviderConnectionError` during startup is fatal to the process.
A :class:`ModelRequestError` aborts the current query; every other error is
recorded in the conversation as a failed tool outcome.
"""

from __future__ import annotations

from enum import Enum


class ErrorType(str, Enum):
    """Classification of model request errors."""

    TIMEOUT = "timeout"
    BILLING = "billing"  # Credits exhausted, payment required
    RATE_LIMIT = "rate_limit"  # Too many requests (429)
    AUTH = "auth"  # API key invalid or missing
    MODEL_UNAVAILABLE = "model_unavailable"
    NETWORK = "network"
    UNKNOWN = "unknown"


_BILLING_PATTERNS = (
    "insufficient_quota",
    "billing",
    "credit balance",
    "payment required",
    "exceeded your current quota",
)

_RATE_LIMIT_PATTERNS = (
    "rate_limit",
    "rate limit",
    "too many requests",
    "429",
    "overloaded",
)

_AUTH_PATTERNS = (
    "invalid_api_key",
    "invalid x-api-key",
    "authentication",
    "unauthorized",
    "api key",
    "401",
)

_MODEL_UNAVAILABLE_PATTERNS = (
    "model not found",
    "not_found_error",
    "does not exist",
)

_NETWORK_PATTERNS = (
    "connection",
    "network",
    "dns",
    "socket",
    "econnrefused",
    "econnreset",
)


def classify_error(error_text: str) -> ErrorType:
    """Classify a model request error from its message.

    Args:
        error_text: Error message raised by the model client.

    Returns:
        ErrorType classification for the error
    """
    if not error_text:
        return ErrorType.UNKNOWN

    error_lower = error_text.lower()

    # Billing first: retrying would not help
    for pattern in _BILLING_PATTERNS:
        if pattern in error_lower:
            return ErrorType.BILLING

    for pattern in _RATE_LIMIT_PATTERNS:
        if pattern in error_lower:
            return ErrorType.RATE_LIMIT

    for pattern in _AUTH_PATTERNS:
        if pattern in error_lower:
            return ErrorType.AUTH

    for pattern in _MODEL_UNAVAILABLE_PATTERNS:
        if pattern in error_lower:
            return ErrorType.MODEL_UNAVAILABLE

    for pattern in _NETWORK_PATTERNS:
        if pattern in error_lower:
            return ErrorType.NETWORK

    return ErrorType.UNKNOWN


class ToolbridgeError(Exception):
    """Base class for all toolbridge errors."""


class ProviderConnectionError(ToolbridgeError):
    """A tool provider could not be connected during startup."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Failed to connect to provider '{target}': {reason}")


class ToolNotFound(ToolbridgeError):
    """No catalog entry matches the tool name requested by the model."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = list(available or [])
        super().__init__(f"Tool {name} not found")


class ProviderNotFound(ToolbridgeError):
    """A resolved tool name points at a provider id that is not registered."""

    def __init__(self, provider_id: str, tool_name: str) -> None:
        self.provider_id = provider_id
        self.tool_name = tool_name
        super().__init__(f"No provider registered as '{provider_id}' for tool {tool_name}")


class ToolInvocationError(ToolbridgeError):
    """A provider failed while executing a tool."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ModelRequestError(ToolbridgeError):
    """The model call failed; fatal for the current query only."""

    def __init__(self, message: str, error_type: ErrorType | None = None) -> None:
        self.error_type = error_type or classify_error(message)
        super().__init__(message)
