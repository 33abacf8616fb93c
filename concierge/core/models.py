"""Core data models shared across dispatch components."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class CapabilityKind(Enum):
    """Closed set of capabilities an agent can serve."""

    ROOT = "root"
    RESTAURANT = "restaurant"
    BANK = "bank"
    TRAVEL = "travel"
    HEALTHCARE = "healthcare"
    ENTERTAINMENT = "entertainment"
    GENERAL = "general"


class Urgency(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MessageKind(Enum):
    USER_REQUEST = "user_request"
    AGENT_RESPONSE = "agent_response"
    AGENT_DELEGATION = "agent_delegation"
    CONTEXT_UPDATE = "context_update"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class AgentIdentity:
    """Identifies a capability endpoint; one per live agent."""

    id: str
    name: str
    kind: CapabilityKind
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class LLMSettings:
    """Language-model parameters for a single completion call."""

    provider: str = "openai"
    model: str = "gpt-4"
    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass(frozen=True, slots=True)
class AgentConfig:
    """Static construction-time settings of an agent."""

    id: str
    name: str
    kind: CapabilityKind
    enabled: bool = True
    max_concurrency: int = 100
    timeout: float = 30.0
    retry_attempts: int = 3
    llm: LLMSettings = field(default_factory=LLMSettings)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AgentStatus:
    active: bool
    config: AgentConfig


@dataclass(slots=True)
class UserPreferences:
    preferred_agents: List[str] = field(default_factory=list)
    communication_style: str = "professional"
    timezone: str = "UTC"
    language: str = "en"
    notifications: Dict[str, bool] = field(
        default_factory=lambda: {"email": True, "sms": False, "push": True}
    )


@dataclass(slots=True)
class UserMessage:
    """One user turn from the conversation history."""

    content: str
    user_id: str = "anonymous"
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utcnow)
    intent: Optional[str] = None
    sentiment: Optional[str] = None


@dataclass(slots=True)
class Context:
    """Per-session conversational state supplied by the transport layer.

    The dispatcher only reads from it. ``shared_state`` is passed by reference;
    collaborators that mutate it concurrently for one session must synchronize
    on their own.
    """

    user_id: str = "anonymous"
    conversation_history: List[UserMessage] = field(default_factory=list)
    user_preferences: UserPreferences = field(default_factory=UserPreferences)
    active_agents: List[AgentIdentity] = field(default_factory=list)
    shared_state: Dict[str, Any] = field(default_factory=dict)
    session_start_time: datetime = field(default_factory=utcnow)
    last_activity: datetime = field(default_factory=utcnow)


@dataclass(frozen=True, slots=True)
class MessagePayload:
    intent_label: str
    context: Context
    data: Dict[str, Any] = field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None


@dataclass(frozen=True, slots=True)
class Message:
    """Canonical message passed along the dispatch chain."""

    sender: AgentIdentity
    recipient: AgentIdentity
    payload: MessagePayload
    session_id: str
    correlation_id: str
    kind: MessageKind = MessageKind.USER_REQUEST
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def user_request(
        cls,
        text: str,
        *,
        context: Context,
        recipient: AgentIdentity,
        session_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        sender_name: str = "Anonymous User",
    ) -> Message:
        """Build the inbound message for one user turn."""
        sender = AgentIdentity(id="user", name=sender_name, kind=CapabilityKind.GENERAL)
        return cls(
            sender=sender,
            recipient=recipient,
            payload=MessagePayload(
                intent_label="unknown",
                context=context,
                data={"text": text, "query": text},
            ),
            session_id=session_id or new_id(),
            correlation_id=correlation_id or new_id(),
        )

    @property
    def text(self) -> Optional[str]:
        data = self.payload.data
        return data.get("text") or data.get("query")

    def derive(
        self,
        *,
        sender: AgentIdentity,
        recipient: AgentIdentity,
        intent_label: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Message:
        """Return a delegated copy with a fresh id and the same session/correlation."""
        payload = dataclasses.replace(
            self.payload,
            intent_label=intent_label,
            data={**self.payload.data, **(parameters or {})},
        )
        return dataclasses.replace(
            self,
            sender=sender,
            recipient=recipient,
            kind=MessageKind.AGENT_DELEGATION,
            payload=payload,
            id=new_id(),
            timestamp=utcnow(),
        )


def clamp_confidence(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


@dataclass(frozen=True, slots=True)
class Intent:
    """Structured classifier judgment for one turn."""

    name: str
    confidence: float
    primary_capability: CapabilityKind
    secondary_capabilities: FrozenSet[CapabilityKind] = frozenset()
    requires_multiple: bool = False
    parameters: Dict[str, Any] = field(default_factory=dict)
    urgency: Urgency = Urgency.MEDIUM

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))


@dataclass(frozen=True, slots=True)
class RedirectAction:
    capability: CapabilityKind
    reason: str
    requires_confirmation: bool = False
    kind: str = field(default="redirect", init=False)


@dataclass(frozen=True, slots=True)
class WorkflowAction:
    workflow_type: str
    suggested_questions: Tuple[str, ...] = ()
    requires_confirmation: bool = False
    kind: str = field(default="workflow", init=False)


@dataclass(frozen=True, slots=True)
class ApiCallAction:
    endpoint: str
    method: str = "GET"
    params: Dict[str, Any] = field(default_factory=dict)
    requires_confirmation: bool = True
    kind: str = field(default="api_call", init=False)


@dataclass(frozen=True, slots=True)
class EscalateAction:
    error: str
    context: str
    requires_confirmation: bool = False
    kind: str = field(default="escalate", init=False)


Action = Union[RedirectAction, WorkflowAction, ApiCallAction, EscalateAction]


@dataclass(frozen=True, slots=True)
class Response:
    """Outcome of one dispatched turn."""

    agent_id: str
    text: str
    confidence: float
    actions: Tuple[Action, ...] = ()
    next_suggested_agents: Tuple[AgentIdentity, ...] = ()
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=utcnow)
