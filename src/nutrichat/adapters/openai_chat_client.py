"""OpenAI-compatible chat completions client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrichat.domain.chat import AssistantReply, ToolCall
from nutrichat.services.chat import ChatClient


@dataclass
class OpenAIChatClient(ChatClient):
    """Chat client backed by any OpenAI-compatible endpoint (DeepSeek by default)."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "OpenAIChatClient":
        """Create a chat client for the given endpoint."""
        return cls(client=AsyncOpenAI(api_key=api_key, base_url=base_url))

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        tools: list[dict[str, object]] | None,
        temperature: float,
    ) -> AssistantReply:
        """Call chat completions and return the first choice's message."""
        request_payload: dict[str, object] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if tools:
            request_payload["tools"] = tools

        response = await self.client.chat.completions.create(**request_payload)
        if not response.choices:
            raise RuntimeError("Chat provider returned no choices")
        message = response.choices[0].message
        tool_calls = [
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "",
            )
            for call in message.tool_calls or []
        ]
        return AssistantReply(content=message.content, tool_calls=tool_calls)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
