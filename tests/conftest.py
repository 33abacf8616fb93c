"""Shared fakes for the dispatch tests; no network access anywhere."""
from __future__ import annotations

import dataclasses
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from concierge.agents import classifier, summarizer
from concierge.agents.base import Agent
from concierge.agents.root_agent import RootAgent, default_root_config
from concierge.core.models import (
    AgentConfig,
    CapabilityKind,
    Context,
    Intent,
    LLMSettings,
    Message,
    Response,
    UserMessage,
)
from concierge.orchestration.registry import AgentRegistry
from concierge.services.completion import Completion


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeCompletion:
    """Scripted completion service.

    Each reply may be a string (success), a :class:`Completion`, an exception
    instance (raised) or ``None`` (failure).
    """

    def __init__(
        self,
        *,
        classify: Any = None,
        summarize: Any = None,
        respond: Any = None,
        specialist: Any = None,
    ) -> None:
        self.replies = {
            "classify": classify,
            "summarize": summarize,
            "respond": respond,
            "specialist": specialist,
        }
        self.calls: List[Tuple[str, str, str, LLMSettings]] = []

    @staticmethod
    def role_of(system_prompt: str) -> str:
        if system_prompt == classifier.SYSTEM_PROMPT:
            return "classify"
        if system_prompt == summarizer.SYSTEM_PROMPT:
            return "summarize"
        if system_prompt.startswith("You are Charlie"):
            return "respond"
        return "specialist"

    async def complete(self, system_prompt: str, user_prompt: str, *, settings: LLMSettings) -> Completion:
        role = self.role_of(system_prompt)
        self.calls.append((role, system_prompt, user_prompt, settings))
        reply = self.replies[role]
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, Completion):
            return reply
        if reply is None:
            return Completion.failure(f"{role} not scripted")
        return Completion.success(reply)

    def roles(self) -> List[str]:
        return [call[0] for call in self.calls]

    def last(self, role: str) -> Tuple[str, str, str, LLMSettings]:
        return [call for call in self.calls if call[0] == role][-1]


class StubAgent(Agent):
    """Specialist double that records what it receives."""

    def __init__(
        self,
        kind: CapabilityKind,
        *,
        reply: Optional[Response] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        config = AgentConfig(id=f"{kind.value}-stub", name=f"{kind.value} stub", kind=kind)
        super().__init__(config, FakeCompletion())
        self.reply = reply or Response(agent_id=config.id, text=f"{kind.value} handled it", confidence=0.9)
        self.error = error
        self.received: List[Tuple[Message, Context]] = []

    def can_handle(self, intent: Intent) -> bool:
        return intent.primary_capability is self.identity.kind

    async def process(self, message: Message, context: Context) -> Response:
        self.received.append((message, context))
        if self.error is not None:
            raise self.error
        return self.reply

    def get_capabilities(self) -> List[str]:
        return ["stub"]


def intent_json(capability: str, confidence: float, **extra: Any) -> str:
    payload: Dict[str, Any] = {
        "name": extra.pop("name", f"{capability.lower()}_request"),
        "confidence": confidence,
        "primaryCapability": capability,
    }
    payload.update(extra)
    return json.dumps(payload)


def make_root(completion: FakeCompletion, registry: Optional[AgentRegistry] = None, **overrides: Any) -> RootAgent:
    config = dataclasses.replace(default_root_config(), **overrides)
    return RootAgent(config, completion, registry=registry if registry is not None else AgentRegistry())


def make_context(*history: str, **preferences: Any) -> Context:
    context = Context(
        user_id="user-1",
        conversation_history=[UserMessage(content=text, user_id="user-1") for text in history],
    )
    for key, value in preferences.items():
        setattr(context.user_preferences, key, value)
    return context


def make_message(text: str, root: RootAgent, context: Optional[Context] = None) -> Message:
    return Message.user_request(
        text,
        context=context or make_context(),
        recipient=root.identity,
        session_id="session-1",
        correlation_id="corr-1",
    )
