"""Chat endpoint: turns an HTTP request into one dispatched turn."""
from __future__ import annotations

import dataclasses
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from concierge.agents.root_agent import RootAgent
from concierge.core.models import Context, Message, Response, UserMessage, UserPreferences
from concierge.runtime import get_root_agent

router = APIRouter(prefix="/agents", tags=["chat"])


class HistoryEntry(BaseModel):
    content: str
    user_id: Optional[str] = None


class PreferencesModel(BaseModel):
    preferred_agents: List[str] = Field(default_factory=list)
    communication_style: str = "professional"
    timezone: str = "UTC"
    language: str = "en"


class ChatRequest(BaseModel):
    message: str = Field(..., description="User message to dispatch")
    conversation_id: Optional[str] = None
    session_id: Optional[str] = None
    user_id: str = "anonymous"
    history: List[HistoryEntry] = Field(default_factory=list)
    preferences: Optional[PreferencesModel] = None


class ActionModel(BaseModel):
    type: str
    payload: Dict[str, Any]
    requires_confirmation: bool = False


class ReplyModel(BaseModel):
    id: str
    message: str
    confidence: float
    timestamp: datetime
    agent_id: str
    actions: List[ActionModel] = Field(default_factory=list)
    next_suggested_agents: List[Dict[str, Any]] = Field(default_factory=list)


class ChatResponse(BaseModel):
    success: bool = True
    response: ReplyModel
    conversation_id: str


def to_reply(response: Response) -> ReplyModel:
    actions = []
    for action in response.actions:
        payload = dataclasses.asdict(action)
        kind = payload.pop("kind")
        requires_confirmation = payload.pop("requires_confirmation")
        actions.append(
            ActionModel(
                type=kind,
                payload=_plain(payload),
                requires_confirmation=requires_confirmation,
            )
        )
    return ReplyModel(
        id=response.id,
        message=response.text,
        confidence=response.confidence,
        timestamp=response.timestamp,
        agent_id=response.agent_id,
        actions=actions,
        next_suggested_agents=[_plain(dataclasses.asdict(a)) for a in response.next_suggested_agents],
    )


def _plain(value: Any) -> Any:
    """Replace enum members with their values so the payload serializes cleanly."""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return getattr(value, "value", value)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    root: RootAgent = Depends(get_root_agent),
) -> ChatResponse:
    """Dispatch a natural language message through the root agent."""
    if not request.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")

    preferences = (
        UserPreferences(**request.preferences.model_dump())
        if request.preferences
        else UserPreferences()
    )
    context = Context(
        user_id=request.user_id,
        conversation_history=[
            UserMessage(content=entry.content, user_id=entry.user_id or request.user_id)
            for entry in request.history
        ],
        user_preferences=preferences,
    )
    message = Message.user_request(
        request.message,
        context=context,
        recipient=root.identity,
        session_id=request.session_id,
    )

    response = await root.process(message, context)
    return ChatResponse(
        response=to_reply(response),
        conversation_id=request.conversation_id or str(uuid.uuid4()),
    )
