"""Root agent: classifies each turn and routes it to a specialist or answers itself."""
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Dict, List, Optional

from concierge.agents.base import Agent
from concierge.agents.classifier import IntentClassifier
from concierge.agents.summarizer import ConversationSummarizer
from concierge.core.models import (
    Action,
    AgentConfig,
    CapabilityKind,
    Context,
    Intent,
    LLMSettings,
    Message,
    RedirectAction,
    Response,
    WorkflowAction,
)
from concierge.orchestration.registry import AgentRegistry

if TYPE_CHECKING:
    from concierge.services.completion import CompletionService

ROOT_AGENT_ID = "charlie-root-001"

DELEGATION_THRESHOLD = 0.8
REDIRECT_THRESHOLD = 0.7
CLARIFICATION_THRESHOLD = 0.6
NO_INPUT_CONFIDENCE = 0.5
STATIC_FALLBACK_CONFIDENCE = 0.8

NO_INPUT_TEXT = "I didn't receive any input. How can I help you today?"
EMPTY_COMPLETION_TEXT = (
    "I'm here to help you find the right service agents. What do you need assistance with?"
)
STATIC_FALLBACK_PREFIX = "I'm here to help you find the right service agents. "
STATIC_FALLBACK_QUESTIONS: Dict[CapabilityKind, str] = {
    CapabilityKind.RESTAURANT: "Are you looking for dining recommendations or restaurant reservations?",
    CapabilityKind.BANK: "Do you need help with banking or financial services?",
    CapabilityKind.TRAVEL: "Are you planning a trip or looking for travel assistance?",
    CapabilityKind.HEALTHCARE: "Do you need help finding healthcare services or booking appointments?",
    CapabilityKind.ENTERTAINMENT: "Are you looking for entertainment options or event tickets?",
}
STATIC_FALLBACK_DEFAULT = "Could you tell me more about what kind of help you need?"

CLARIFYING_QUESTIONS = (
    "Could you provide more details about what you're looking for?",
    "What's your timeline for this request?",
    "Do you have any specific preferences or requirements?",
)

CAPABILITIES = [
    "intent_classification",
    "agent_orchestration",
    "context_management",
    "conversation_routing",
    "fallback_handling",
    "multi_agent_coordination",
]

PERSONA_PROMPT = """You are Charlie, a helpful and professional personal assistant.
You help users find and connect with service agents like plumbers, tutors, consultants, etc.

Key guidelines:
- Be warm, professional, and helpful
- Ask clarifying questions when needed
- Suggest specific next steps
- If you can't help directly, recommend the right type of specialist
- Keep responses concise but informative

Current conversation context: {summary}

Detected intent: {intent} (confidence: {confidence})
User preferences: {style} communication style"""


def default_root_config(model: str = "gpt-4") -> AgentConfig:
    return AgentConfig(
        id=ROOT_AGENT_ID,
        name="Charlie",
        kind=CapabilityKind.ROOT,
        max_concurrency=100,
        timeout=30.0,
        retry_attempts=3,
        llm=LLMSettings(provider="openai", model=model, temperature=0.7, max_tokens=1000),
    )


def static_fallback_text(capability: CapabilityKind) -> str:
    return STATIC_FALLBACK_PREFIX + STATIC_FALLBACK_QUESTIONS.get(capability, STATIC_FALLBACK_DEFAULT)


class RootAgent(Agent):
    """Orchestrator that classifies, delegates, and degrades gracefully."""

    def __init__(
        self,
        config: AgentConfig,
        completion: CompletionService,
        registry: Optional[AgentRegistry] = None,
        classifier: Optional[IntentClassifier] = None,
        summarizer: Optional[ConversationSummarizer] = None,
    ) -> None:
        super().__init__(config, completion)
        self.registry = registry if registry is not None else AgentRegistry()
        self.classifier = classifier or IntentClassifier(completion)
        self.summarizer = summarizer or ConversationSummarizer(completion)
        self._slots = asyncio.Semaphore(max(1, config.max_concurrency))

    def can_handle(self, intent: Intent) -> bool:
        return True

    def get_capabilities(self) -> List[str]:
        return list(CAPABILITIES)

    def register_agent(self, agent: Agent) -> None:
        self.registry.register(agent)

    async def process(self, message: Message, context: Context) -> Response:
        """Dispatch one turn. Always returns a response, never raises."""
        async with self._slots:
            phase = "extract"
            try:
                self.log.info("Processing user request {}", message.id)
                text = (message.text or "").strip()
                if not text:
                    return self.create_response(NO_INPUT_TEXT, NO_INPUT_CONFIDENCE)

                phase = "classify"
                intent = await self.classifier.classify(text, context)
                self.log.info(
                    "Intent classified: {} (confidence={:.2f}, primary={}, urgency={})",
                    intent.name,
                    intent.confidence,
                    intent.primary_capability.value,
                    intent.urgency.value,
                )

                if self.should_delegate(intent):
                    phase = "delegate"
                    response = await self._delegate(intent, message, context)
                    if response is not None:
                        return response

                phase = "respond"
                return await self._handle_directly(intent, text, context)
            except Exception as exc:  # noqa: BLE001
                self.log.exception("Error processing message {}", message.id)
                return self.handle_error(exc, phase)

    def should_delegate(self, intent: Intent) -> bool:
        return (
            intent.confidence > DELEGATION_THRESHOLD
            and intent.primary_capability is not self.identity.kind
        )

    async def _delegate(self, intent: Intent, message: Message, context: Context) -> Optional[Response]:
        """Return the specialist's response, or ``None`` to fall through to direct handling."""
        target = self.registry.lookup(intent.primary_capability)
        if target is None:
            self.log.warning(
                "No specialized agent found for {}; handling directly",
                intent.primary_capability.value,
            )
            return None

        delegated = message.derive(
            sender=self.identity,
            recipient=target.identity,
            intent_label=intent.name,
            parameters=intent.parameters,
        )
        try:
            response = await target.process(delegated, context)
        except Exception as exc:  # noqa: BLE001
            self.log.error(
                "Delegation to {} failed; handling directly: {}",
                intent.primary_capability.value,
                exc,
            )
            return None

        self.log.info(
            "Delegated to {} (confidence={})",
            target.identity.name,
            response.confidence,
        )
        return response

    async def _handle_directly(self, intent: Intent, text: str, context: Context) -> Response:
        summary = await self.summarizer.summarize(context)
        system_prompt = PERSONA_PROMPT.format(
            summary=summary,
            intent=intent.name,
            confidence=intent.confidence,
            style=context.user_preferences.communication_style,
        )

        result = await self.complete(system_prompt, text)
        if not result.ok:
            self.log.error("LLM response generation failed: {}", result.error)
            return self.static_fallback(intent)

        return self.create_response(
            result.text or EMPTY_COMPLETION_TEXT,
            intent.confidence,
            self.suggest_actions(intent),
        )

    def suggest_actions(self, intent: Intent) -> List[Action]:
        actions: List[Action] = []
        capability = intent.primary_capability
        if capability is not self.identity.kind and intent.confidence > REDIRECT_THRESHOLD:
            actions.append(
                RedirectAction(
                    capability=capability,
                    reason=(
                        f"Based on your request, I think our {capability.value} "
                        "specialist can help you better."
                    ),
                )
            )
        if intent.confidence < CLARIFICATION_THRESHOLD:
            actions.append(
                WorkflowAction(
                    workflow_type="clarification",
                    suggested_questions=CLARIFYING_QUESTIONS,
                )
            )
        return actions

    def static_fallback(self, intent: Intent) -> Response:
        return self.create_response(
            static_fallback_text(intent.primary_capability),
            STATIC_FALLBACK_CONFIDENCE,
        )
