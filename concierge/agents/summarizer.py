"""Compresses recent conversation history into a short brief for prompting."""
from __future__ import annotations

from typing import Optional

from loguru import logger

from concierge.core.models import Context, LLMSettings
from concierge.services.completion import CompletionService

HISTORY_WINDOW = 5
EMPTY_HISTORY_SUMMARY = "This is the start of our conversation."
EMPTY_SUMMARY = "Conversation summary unavailable"
FAILED_SUMMARY = "Recent conversation context available"

SYSTEM_PROMPT = (
    "Summarize this conversation in 1-2 sentences, focusing on what the user is looking for."
)


class ConversationSummarizer:
    def __init__(
        self,
        completion: CompletionService,
        settings: Optional[LLMSettings] = None,
    ) -> None:
        self._completion = completion
        self.settings = settings or LLMSettings(model="gpt-3.5-turbo", temperature=0.3, max_tokens=100)

    async def summarize(self, context: Context) -> str:
        """Return a 1-2 sentence brief; failures yield a generic string."""
        history = context.conversation_history
        if not history:
            return EMPTY_HISTORY_SUMMARY

        lines = "\n".join(f"User: {message.content}" for message in history[-HISTORY_WINDOW:])
        try:
            result = await self._completion.complete(
                SYSTEM_PROMPT,
                f"Conversation:\n{lines}",
                settings=self.settings,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error generating conversation summary: {}", exc)
            return FAILED_SUMMARY

        if not result.ok:
            logger.error("Error generating conversation summary: {}", result.error)
            return FAILED_SUMMARY
        return result.text or EMPTY_SUMMARY
