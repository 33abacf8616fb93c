"""LLM-powered specialist that serves a single capability kind."""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Dict, List, Optional

from concierge.agents.base import Agent
from concierge.core.models import AgentConfig, CapabilityKind, Context, Intent, LLMSettings, Message, Response

if TYPE_CHECKING:
    from concierge.services.completion import CompletionService

SPECIALIST_CONFIDENCE = 0.9

DEFAULT_PERSONAS: Dict[CapabilityKind, str] = {
    CapabilityKind.RESTAURANT: "You are a dining specialist who recommends restaurants and handles reservations.",
    CapabilityKind.BANK: "You are a banking specialist who helps with payments, accounts, and financial services.",
    CapabilityKind.TRAVEL: "You are a travel specialist who helps plan trips, flights, and hotel stays.",
    CapabilityKind.HEALTHCARE: "You are a healthcare coordinator who helps find providers and book appointments.",
    CapabilityKind.ENTERTAINMENT: "You are an entertainment specialist who finds events, shows, and tickets.",
    CapabilityKind.GENERAL: "You are a general services specialist who connects users with local professionals.",
}

CAPABILITY_TAGS: Dict[CapabilityKind, List[str]] = {
    CapabilityKind.RESTAURANT: ["restaurant_search", "reservations", "food_orders"],
    CapabilityKind.BANK: ["payments", "account_management", "financial_guidance"],
    CapabilityKind.TRAVEL: ["flight_search", "hotel_booking", "trip_planning"],
    CapabilityKind.HEALTHCARE: ["provider_search", "appointment_booking", "wellness_guidance"],
    CapabilityKind.ENTERTAINMENT: ["event_search", "ticketing", "recommendations"],
    CapabilityKind.GENERAL: ["service_matching", "general_assistance"],
}


def specialist_config(kind: CapabilityKind, model: str = "gpt-4", **metadata: str) -> AgentConfig:
    return AgentConfig(
        id=f"{kind.value}-specialist-001",
        name=f"{kind.value.title()} Specialist",
        kind=kind,
        llm=LLMSettings(model=model, temperature=0.7, max_tokens=800),
        metadata=dict(metadata),
    )


class SpecialistAgent(Agent):
    """Agent that answers delegated turns for one capability using an LLM."""

    def __init__(self, config: AgentConfig, completion: CompletionService) -> None:
        if config.kind is CapabilityKind.ROOT:
            raise ValueError("A specialist cannot serve the root capability")
        super().__init__(config, completion)
        self.system_prompt: str = config.metadata.get(
            "system_prompt",
            DEFAULT_PERSONAS[config.kind],
        )

    def can_handle(self, intent: Intent) -> bool:
        kind = self.identity.kind
        return intent.primary_capability is kind or kind in intent.secondary_capabilities

    def get_capabilities(self) -> List[str]:
        return list(CAPABILITY_TAGS[self.identity.kind])

    async def process(self, message: Message, context: Context) -> Response:
        if not self.validate_message(message):
            return self.handle_error(ValueError("Malformed message"), "validate")

        user_prompt = self._build_prompt(message)
        if user_prompt is None:
            return self.handle_error(ValueError("No input to process"), "extract")

        result = await self.complete(self.system_prompt, user_prompt)
        if not result.ok:
            return self.handle_error(RuntimeError(result.error or "completion failed"), "respond")
        if not result.text:
            return self.handle_error(RuntimeError("Empty completion"), "respond")

        self.log.info("Answered delegated request {}", message.id)
        return self.create_response(result.text, SPECIALIST_CONFIDENCE)

    @staticmethod
    def _build_prompt(message: Message) -> Optional[str]:
        text = message.text
        if not text:
            return None
        details = {
            key: value
            for key, value in message.payload.data.items()
            if key not in ("text", "query")
        }
        prompt = text
        if message.payload.intent_label:
            prompt += f"\n\nDetected intent: {message.payload.intent_label}"
        if details:
            prompt += f"\nRequest details: {json.dumps(details, default=str, sort_keys=True)}"
        return prompt
