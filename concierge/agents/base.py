"""Base agent definition shared by the orchestrator and specialists."""
from __future__ import annotations

import abc
from typing import Iterable, List, Optional

from loguru import logger

from concierge.core.models import (
    Action,
    AgentConfig,
    AgentIdentity,
    AgentStatus,
    Context,
    EscalateAction,
    Intent,
    LLMSettings,
    Message,
    Response,
)
from concierge.services.completion import Completion, CompletionService

APOLOGY_TEXT = "I'm sorry, I encountered an issue processing your request. Please try again."


class Agent(abc.ABC):
    """Abstract dispatch target encapsulating lifecycle hooks and message handling."""

    def __init__(self, config: AgentConfig, completion: CompletionService) -> None:
        self.config = config
        self.identity = AgentIdentity(id=config.id, name=config.name, kind=config.kind)
        self._completion = completion
        self.is_active = config.enabled
        self.log = logger.bind(agent=config.name)

    @property
    def agent_id(self) -> str:
        return self.identity.id

    async def initialize(self) -> None:
        """Mark the agent as available for routing."""
        self.log.info("Initializing agent {}", self.identity.name)
        self.is_active = True

    async def shutdown(self) -> None:
        """Mark the agent as unavailable for routing."""
        self.log.info("Shutting down agent {}", self.identity.name)
        self.is_active = False

    def get_status(self) -> AgentStatus:
        return AgentStatus(active=self.is_active, config=self.config)

    @abc.abstractmethod
    def can_handle(self, intent: Intent) -> bool:
        """Declare static eligibility for an intent."""

    @abc.abstractmethod
    async def process(self, message: Message, context: Context) -> Response:
        """Do the work for one message.

        Expected failures must come back as a zero-confidence response with an
        escalate action rather than as an exception.
        """

    @abc.abstractmethod
    def get_capabilities(self) -> List[str]:
        """Static self-description used for listings."""

    def validate_message(self, message: Message) -> bool:
        return bool(
            message.id
            and message.sender
            and message.recipient
            and message.payload
            and message.session_id
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        settings: Optional[LLMSettings] = None,
    ) -> Completion:
        """Run one completion; exceptions from the service become failures."""
        try:
            return await self._completion.complete(
                system_prompt,
                user_prompt,
                settings=settings or self.config.llm,
            )
        except Exception as exc:  # noqa: BLE001
            return Completion.failure(str(exc) or type(exc).__name__)

    def create_response(
        self,
        text: str,
        confidence: float = 1.0,
        actions: Iterable[Action] = (),
    ) -> Response:
        return Response(
            agent_id=self.agent_id,
            text=text,
            confidence=confidence,
            actions=tuple(actions),
        )

    def handle_error(self, error: BaseException, phase: str) -> Response:
        """Convert an unrecovered failure into a zero-confidence response."""
        self.log.error("Error in {} ({}): {}", self.identity.name, phase, error)
        return self.create_response(
            APOLOGY_TEXT,
            confidence=0.0,
            actions=[EscalateAction(error=str(error) or type(error).__name__, context=phase)],
        )
