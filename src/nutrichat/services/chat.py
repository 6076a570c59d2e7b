"""Chat provider access for the coaching assistant."""

import json
from dataclasses import asdict, dataclass
from typing import Protocol

from nutrichat.domain.chat import AssistantReply, ToolCall
from nutrichat.domain.profile import UserProfile

SYSTEM_PROMPT_TEMPLATE = """
You are Cal AI, your friendly fitness coach and nutrition orchestrator.
Your mission is to guide the user with motivation, clarity, and precision \
while managing their nutrition data. Speak in a supportive, energetic tone \
like a personal trainer, and use relevant emojis to keep the conversation fun \
and engaging.

You have four tools available:
1. appendMealData(tool) -> store a meal row.
2. updateProfileData(tool) -> update the user's profile targets.
3. getUserData(tool) -> fetch the user's profile info.
4. getReport(tool) -> generate or fetch the daily report.

Rules
The image analysis is done before reaching you (passed as text context if \
available). You will always receive structured info if the user provides \
food data.

When analyzing a meal:
1. Call appendMealData.
2. After success, confirm naturally in a coach style (repeat the macros).
3. End with a motivational phrase.

Profile Update Logic
- Call getUserData first.
- Compare and call updateProfileData with ONLY changed fields.
- Confirm to user.

Current Date: {today}
Current User Profile: {profile}
"""

_CONTENT_REQUIRED_ROLES = {"user", "system", "tool"}


class MissingCredentialsError(RuntimeError):
    """Raised when a provider call is attempted without an API key."""


class ChatClient(Protocol):
    """Interface for an OpenAI-compatible chat completions provider."""

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]] | None,
        temperature: float,
    ) -> AssistantReply:
        """Return the first assistant message for a conversation."""


@dataclass
class CoachChatService:
    """Builds provider requests for the coach persona."""

    client: ChatClient | None
    model: str
    temperature: float

    async def send(
        self,
        messages: list[dict[str, object]],
        profile: UserProfile,
        today: str,
        tools: list[dict[str, object]] | None = None,
    ) -> AssistantReply:
        """Send the conversation with the coach system prompt."""
        if self.client is None:
            raise MissingCredentialsError(
                "DeepSeek API Key is missing. "
                "Please check your settings or environment variables."
            )
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            today=today, profile=json.dumps(asdict(profile))
        )
        conversation = [{"role": "system", "content": system_prompt}]
        conversation.extend(to_provider_message(message) for message in messages)
        return await self.client.complete(
            model=self.model,
            messages=conversation,
            tools=tools,
            temperature=self.temperature,
        )

    async def ask(self, prompt: str) -> str:
        """Send a single user prompt without tools and return the text."""
        if self.client is None:
            raise MissingCredentialsError("DeepSeek API Key is missing.")
        reply = await self.client.complete(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            tools=None,
            temperature=self.temperature,
        )
        return reply.content or ""


def to_provider_message(message: dict[str, object]) -> dict[str, object]:
    """Normalize a conversation entry for the provider.

    User, system and tool turns must carry string content. Assistant turns may
    carry null content only when they hold tool calls.
    """
    role = message.get("role")
    if role == "model":
        role = "assistant"
    raw_content = message.get("content") or message.get("text")
    payload: dict[str, object] = {"role": role}
    if role in _CONTENT_REQUIRED_ROLES:
        payload["content"] = raw_content or ""
    elif not raw_content and (message.get("tool_calls") or message.get("tool_call_id")):
        payload["content"] = None
    else:
        payload["content"] = raw_content or ""
    for key in ("tool_calls", "tool_call_id", "name"):
        if message.get(key):
            payload[key] = message[key]
    return payload


def assistant_tool_message(reply: AssistantReply) -> dict[str, object]:
    """Return the assistant turn that requested tool calls."""
    return {
        "role": "assistant",
        "content": reply.content,
        "tool_calls": [tool_call_payload(call) for call in reply.tool_calls],
    }


def tool_call_payload(call: ToolCall) -> dict[str, object]:
    """Encode a tool call in the provider's wire format."""
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": call.arguments},
    }
