"""Intent classification with an LLM primary path and a keyword fallback."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from concierge.core.models import CapabilityKind, Context, Intent, LLMSettings, Urgency
from concierge.services.completion import CompletionService

HISTORY_WINDOW = 3
FALLBACK_CONFIDENCE = 0.6
FALLBACK_INTENT_NAME = "fallback_classification"

# Ordered; the first matching row wins.
CAPABILITY_KEYWORDS: Tuple[Tuple[CapabilityKind, Tuple[str, ...]], ...] = (
    (CapabilityKind.RESTAURANT, ("restaurant", "food", "meal")),
    (CapabilityKind.BANK, ("bank", "payment", "money")),
    (CapabilityKind.TRAVEL, ("travel", "flight", "hotel")),
    (CapabilityKind.HEALTHCARE, ("doctor", "health", "medical")),
    (CapabilityKind.ENTERTAINMENT, ("movie", "show", "event")),
)

URGENCY_KEYWORDS: Tuple[Tuple[Urgency, Tuple[str, ...]], ...] = (
    (Urgency.URGENT, ("urgent", "emergency", "asap")),
    (Urgency.HIGH, ("important", "soon")),
)

SYSTEM_PROMPT = """You are an expert intent classifier for a personal assistant that connects users with service agents.
Analyze user inputs and classify them into the appropriate capability.

Available capabilities:
- RESTAURANT: dining, reservations, food orders
- BANK: finance, payments, account management
- TRAVEL: flights, hotels, trips, bookings
- HEALTHCARE: appointments, medical, wellness
- ENTERTAINMENT: events, movies, shows, tickets
- GENERAL: everything else

Respond with JSON only, in this format:
{
  "name": "intent_name",
  "confidence": 0.95,
  "primaryCapability": "RESTAURANT",
  "secondaryCapabilities": ["BANK"],
  "requiresMultiple": false,
  "parameters": {"location": "NYC", "time": "tonight"},
  "urgency": "medium"
}"""


class ClassificationPayload(BaseModel):
    """Shape the classifier model must return; anything else triggers the fallback."""

    model_config = ConfigDict(strict=True, extra="ignore")

    name: Optional[str] = None
    confidence: float = Field(allow_inf_nan=False)
    primary_capability: str = Field(
        validation_alias=AliasChoices("primaryCapability", "primaryAgent", "primary_capability"),
    )
    secondary_capabilities: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("secondaryCapabilities", "secondaryAgents", "secondary_capabilities"),
    )
    requires_multiple: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("requiresMultiple", "requiresMultipleAgents", "requires_multiple"),
    )
    parameters: Optional[Dict[str, Any]] = None
    urgency: Optional[str] = None


def normalize_capability(label: Any) -> CapabilityKind:
    if isinstance(label, str):
        try:
            return CapabilityKind[label.strip().upper()]
        except KeyError:
            pass
    return CapabilityKind.GENERAL


def normalize_urgency(label: Any) -> Urgency:
    if isinstance(label, str):
        try:
            return Urgency(label.strip().lower())
        except ValueError:
            pass
    return Urgency.MEDIUM


def _strip_code_fence(content: str) -> str:
    if "```json" in content:
        return content.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in content:
        return content.split("```", 1)[1].split("```", 1)[0].strip()
    return content.strip()


def keyword_intent(text: str) -> Intent:
    """Deterministic, I/O-free classification used when the model is unavailable."""
    lowered = text.lower()
    capability = _first_match(lowered, CAPABILITY_KEYWORDS, CapabilityKind.GENERAL)
    urgency = _first_match(lowered, URGENCY_KEYWORDS, Urgency.MEDIUM)
    return Intent(
        name=FALLBACK_INTENT_NAME,
        confidence=FALLBACK_CONFIDENCE,
        primary_capability=capability,
        urgency=urgency,
    )


def _first_match(text: str, table: Iterable[Tuple[Any, Tuple[str, ...]]], default: Any) -> Any:
    for value, keywords in table:
        if any(keyword in text for keyword in keywords):
            return value
    return default


class IntentClassifier:
    """Maps an utterance plus recent context to an :class:`Intent`."""

    def __init__(
        self,
        completion: CompletionService,
        settings: Optional[LLMSettings] = None,
    ) -> None:
        self._completion = completion
        self.settings = settings or LLMSettings(model="gpt-4", temperature=0.1, max_tokens=500)

    async def classify(self, text: str, context: Context) -> Intent:
        """Classify ``text``; never raises."""
        prompt = self.build_prompt(text, context)
        try:
            result = await self._completion.complete(SYSTEM_PROMPT, prompt, settings=self.settings)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Intent classification call raised; using keyword fallback: {}", exc)
            return keyword_intent(text)

        if not result.ok:
            logger.warning("Intent classification failed; using keyword fallback: {}", result.error)
            return keyword_intent(text)
        if not result.text:
            logger.warning("Intent classification returned no content; using keyword fallback")
            return keyword_intent(text)

        try:
            payload = ClassificationPayload.model_validate_json(_strip_code_fence(result.text))
        except ValidationError as exc:
            logger.warning(
                "Unparsable classification ({} errors); using keyword fallback",
                exc.error_count(),
            )
            logger.debug("Raw classification output: {!r}", result.text)
            return keyword_intent(text)

        return self.to_intent(payload)

    @staticmethod
    def to_intent(payload: ClassificationPayload) -> Intent:
        return Intent(
            name=payload.name or "general_inquiry",
            confidence=payload.confidence,
            primary_capability=normalize_capability(payload.primary_capability),
            secondary_capabilities=frozenset(
                normalize_capability(label) for label in payload.secondary_capabilities or []
            ),
            requires_multiple=bool(payload.requires_multiple),
            parameters=dict(payload.parameters or {}),
            urgency=normalize_urgency(payload.urgency),
        )

    @staticmethod
    def build_prompt(text: str, context: Context) -> str:
        prompt = f'Classify this user input: "{text}"'

        recent = context.conversation_history[-HISTORY_WINDOW:]
        if recent:
            prompt += "\n\nRecent conversation context:\n"
            for index, message in enumerate(recent, start=1):
                prompt += f'{index}. "{message.content}"\n'

        preferred = context.user_preferences.preferred_agents
        if preferred:
            prompt += f"\nUser's preferred agents: {', '.join(preferred)}"

        return prompt
