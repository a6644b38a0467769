"""Interactive chat session: reads queries and handles the session commands."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from toolbridge.client import ToolbridgeClient
from toolbridge.conversation.history import (
    AssistantText,
    AssistantToolRequest,
    ConversationTurn,
    ToolOutcome,
    UserText,
)

COMMANDS = ("quit", "clear", "tools", "mode", "history", "history_full")
PREVIEW_LENGTH = 50


def _preview(text: str) -> str:
    return text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")


def role_of(turn: ConversationTurn) -> str:
    # Tool outcomes travel back to the model as user messages
    if isinstance(turn, (UserText, ToolOutcome)):
        return "User"
    if isinstance(turn, (AssistantText, AssistantToolRequest)):
        return "Assistant"
    raise TypeError(f"Unsupported conversation turn: {type(turn).__name__}")


def summarize_turn(turn: ConversationTurn) -> str:
    """One-line preview of a turn."""
    if isinstance(turn, (UserText, AssistantText)):
        return _preview(turn.text)
    if isinstance(turn, AssistantToolRequest):
        return f"Tool Call: {turn.name}"
    if isinstance(turn, ToolOutcome):
        return "Tool Result"
    raise TypeError(f"Unsupported conversation turn: {type(turn).__name__}")


def describe_turn(turn: ConversationTurn) -> list[str]:
    """Full rendering of a turn, one entry per line."""
    if isinstance(turn, (UserText, AssistantText)):
        return [turn.text]
    if isinstance(turn, AssistantToolRequest):
        return [
            f"Tool Call: {turn.name}",
            f"Arguments: {json.dumps(dict(turn.args), indent=2, default=str)}",
        ]
    if isinstance(turn, ToolOutcome):
        lines = [f"Tool Result: {turn.content}"]
        if turn.is_error:
            lines.append("(Error)")
        return lines
    raise TypeError(f"Unsupported conversation turn: {type(turn).__name__}")


class ChatSession:
    """Read-eval-print loop over a connected :class:`ToolbridgeClient`."""

    def __init__(
        self,
        client: ToolbridgeClient,
        console: Console | None = None,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        self._client = client
        self._console = console or Console()
        self._read_line = read_line or self._console.input

    def show_tools(self) -> None:
        self._console.print("\n[bold]Available Tools:[/bold]")
        for index, tool in enumerate(self._client.tools(), start=1):
            self._console.print(f"{index}. [cyan]{escape(tool.name)}[/cyan]: {escape(tool.description)}")

    def show_mode(self) -> None:
        mode = self._client.mode
        self._console.print(f"Current mode: {mode.value if mode else 'disconnected'}")

    def show_history_summary(self) -> None:
        self._console.print("\n[bold]Conversation History (Summary):[/bold]")
        turns = self._client.history.all()
        if not turns:
            self._console.print("No history yet.")
            return
        for index, turn in enumerate(turns, start=1):
            self._console.print(f"{index}. {role_of(turn)}: {escape(summarize_turn(turn))}")

    def show_history_full(self) -> None:
        self._console.print("\n[bold]Conversation History (Complete):[/bold]")
        turns = self._client.history.all()
        if not turns:
            self._console.print("No history yet.")
            return
        for index, turn in enumerate(turns, start=1):
            self._console.print(f"\n--- {index}. {role_of(turn)} ---")
            for line in describe_turn(turn):
                self._console.print(escape(line))
            self._console.print("---")

    def handle_command(self, line: str) -> bool | None:
        """Run a session command.

        Returns:
            ``False`` to quit, ``True`` if *line* was a command, ``None`` if it
            is a query.
        """
        command = line.strip().lower()
        if command == "quit":
            return False
        if command == "clear":
            self._client.clear_history()
            self._console.print("Conversation history cleared.")
        elif command == "tools":
            self.show_tools()
        elif command == "mode":
            self.show_mode()
        elif command == "history":
            self.show_history_summary()
        elif command == "history_full":
            self.show_history_full()
        else:
            return None
        return True

    async def run(self) -> None:
        mode = self._client.mode
        self._console.print("[bold blue]toolbridge[/bold blue] client started!")
        self._console.print(f"Mode: {mode.value if mode else 'disconnected'}")
        self._console.print("Commands: " + ", ".join(f"'{c}'" for c in COMMANDS))
        self._console.print(f"Available tools: {[t.name for t in self._client.tools()]}")

        while True:
            try:
                line = await asyncio.to_thread(self._read_line, "Query: ")
            except (EOFError, KeyboardInterrupt):
                break

            handled = self.handle_command(line)
            if handled is False:
                break
            if handled or not line.strip():
                continue

            self._console.print("[bold]Assistant:[/bold]")
            result = await self._client.run(line)
            style = "red" if result.error else None
            self._console.print(escape(result.text), style=style)
