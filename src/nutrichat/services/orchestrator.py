"""Tool-augmented conversation loop for the coach assistant."""

import logging
from dataclasses import dataclass
from uuid import uuid4

from nutrichat.domain.chat import Message
from nutrichat.domain.state import AppState
from nutrichat.services.chat import CoachChatService, assistant_tool_message
from nutrichat.services.classifier import MealClassifierService, parse_meal_estimate
from nutrichat.services.food_log import now_millis, today_iso
from nutrichat.services.notifications import NotificationService
from nutrichat.services.tools import TOOL_SCHEMA, ToolExecutor

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PROMPT = "Analyze this food"
UNSTRUCTURED_ANALYSIS_NOTE = (
    "[System: The analysis did not follow the expected format. "
    "Confirm the macros with the user before logging.]"
)


@dataclass
class ConversationOrchestrator:
    """Turns one user turn into tool side effects and one assistant reply.

    At most two provider round trips are made: the first may request tool
    calls, the second turns the tool outputs into the final reply. Each call
    takes a new request generation; a call that has been superseded by a newer
    one stops before running tools and never appends its reply.
    """

    chat_service: CoachChatService
    classifier: MealClassifierService
    tool_executor: ToolExecutor
    notifications: NotificationService
    history_window: int = 10

    async def handle(
        self,
        state: AppState,
        text: str,
        image: str | None = None,
        audio: str | None = None,
    ) -> Message | None:
        """Process a user turn and return the appended assistant message."""
        history = state.messages[-self.history_window :]
        state.messages.append(
            Message(
                id=str(uuid4()),
                role="user",
                text=text,
                image=image,
                timestamp=now_millis(),
            )
        )
        state.generation += 1
        generation = state.generation
        state.in_flight += 1
        try:
            await self.notifications.log_input(text, image, audio)
            reply_text = await self._respond(
                state, generation, history, text, image, audio
            )
        except Exception as exc:
            logger.exception("Conversation request failed")
            reply_text = f"⚠️ AI Error: {exc}"
        finally:
            state.in_flight -= 1

        if reply_text is None or generation != state.generation:
            logger.info("Dropping reply for superseded request %s", generation)
            return None
        reply = Message(
            id=str(uuid4()), role="model", text=reply_text, timestamp=now_millis()
        )
        state.messages.append(reply)
        return reply

    async def _respond(  # noqa: PLR0913
        self,
        state: AppState,
        generation: int,
        history: list[Message],
        text: str,
        image: str | None,
        audio: str | None,
    ) -> str | None:
        context = await self.build_context(text, image, audio)
        today = today_iso()
        conversation: list[dict[str, object]] = [
            {"role": message.role, "content": message.text} for message in history
        ]
        conversation.append({"role": "user", "content": context})

        reply = await self.chat_service.send(
            conversation, state.profile, today, tools=TOOL_SCHEMA
        )
        if reply.tool_calls:
            if generation != state.generation:
                return None
            tool_outputs: list[dict[str, object]] = []
            for call in reply.tool_calls:
                output = await self.tool_executor.execute(
                    state, call.name, call.arguments
                )
                tool_outputs.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "name": call.name,
                        "content": output,
                    }
                )
            follow_up = [*conversation, assistant_tool_message(reply), *tool_outputs]
            reply = await self.chat_service.send(
                follow_up, state.profile, today, tools=TOOL_SCHEMA
            )
        return reply.content or ""

    async def build_context(
        self, text: str, image: str | None, audio: str | None
    ) -> str:
        """Fold classifier results for attached media into the user turn."""
        context = text
        if image:
            try:
                analysis = await self.classifier.analyze_image(image)
                context = (
                    f"{text or DEFAULT_IMAGE_PROMPT}\n\n"
                    f"[System: The user uploaded an image. Analysis]:\n{analysis}"
                    f"{annotate_analysis(analysis)}"
                )
            except Exception:
                logger.exception("Image analysis raised")
                context += "\n\n[System Error: Image analysis failed.]"
        if audio:
            try:
                analysis = await self.classifier.analyze_audio(audio)
                if analysis and not analysis.startswith("Error"):
                    context = (
                        f"[System: Voice note analysis]:\n{analysis}"
                        f"{annotate_analysis(analysis)}"
                    )
                else:
                    context = "[System: Voice note analysis failed.]"
            except Exception:
                logger.exception("Audio analysis raised")
                context += "\n\n[System Error: Audio analysis failed]"
        return context


def annotate_analysis(analysis: str) -> str:
    """Return a note to append when classifier text breaks the line grammar.

    Error strings are left alone; they already explain themselves.
    """
    if not analysis or analysis.startswith("Error"):
        return ""
    if parse_meal_estimate(analysis) is not None:
        return ""
    return f"\n\n{UNSTRUCTURED_ANALYSIS_NOTE}"
