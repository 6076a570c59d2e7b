"""Domain models for the chat assistant."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Message:
    """A chat turn shown to the user."""

    id: str
    role: str
    text: str
    timestamp: int
    image: str | None = None


@dataclass(frozen=True)
class ToolCall:
    """A function invocation requested by the chat provider."""

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class AssistantReply:
    """A single assistant message returned by the chat provider."""

    content: str | None
    tool_calls: list[ToolCall] = field(default_factory=list)
