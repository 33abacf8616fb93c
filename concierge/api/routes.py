"""HTTP API exposing agent listings and health for introspection."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from concierge.agents.base import Agent
from concierge.agents.root_agent import RootAgent
from concierge.runtime import get_root_agent

router = APIRouter(prefix="/agents", tags=["agents"])


class StatusModel(BaseModel):
    active: bool
    enabled: bool
    max_concurrency: int
    timeout: float
    retry_attempts: int
    provider: str
    model: str


class AgentModel(BaseModel):
    id: str
    name: str
    type: str
    version: str
    capabilities: List[str]
    status: StatusModel

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentModel":
        state = agent.get_status()
        return cls(
            id=agent.identity.id,
            name=agent.identity.name,
            type=agent.identity.kind.value,
            version=agent.identity.version,
            capabilities=agent.get_capabilities(),
            status=StatusModel(
                active=state.active,
                enabled=state.config.enabled,
                max_concurrency=state.config.max_concurrency,
                timeout=state.config.timeout,
                retry_attempts=state.config.retry_attempts,
                provider=state.config.llm.provider,
                model=state.config.llm.model,
            ),
        )


class AgentListResponse(BaseModel):
    agents: List[AgentModel]
    total: int
    active: int


class AgentDetailResponse(BaseModel):
    agent: AgentModel


class HealthResponse(BaseModel):
    agent: str
    healthy: bool
    status: str
    timestamp: datetime


def _all_agents(root: RootAgent) -> List[Agent]:
    return [root, *root.registry]


def _find_agent(root: RootAgent, agent_id: str) -> Agent:
    if agent_id == root.agent_id:
        return root
    agent = root.registry.find_by_id(agent_id)
    if agent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")
    return agent


@router.get("", response_model=AgentListResponse)
async def list_agents(root: RootAgent = Depends(get_root_agent)) -> AgentListResponse:
    agents = [AgentModel.from_agent(agent) for agent in _all_agents(root)]
    return AgentListResponse(
        agents=agents,
        total=len(agents),
        active=sum(1 for agent in agents if agent.status.active),
    )


@router.get("/{agent_id}", response_model=AgentDetailResponse)
async def get_agent(agent_id: str, root: RootAgent = Depends(get_root_agent)) -> AgentDetailResponse:
    return AgentDetailResponse(agent=AgentModel.from_agent(_find_agent(root, agent_id)))


@router.get("/{agent_id}/health", response_model=HealthResponse)
async def agent_health(agent_id: str, root: RootAgent = Depends(get_root_agent)) -> HealthResponse:
    agent = _find_agent(root, agent_id)
    active = agent.get_status().active
    return HealthResponse(
        agent=agent_id,
        healthy=active,
        status="active" if active else "inactive",
        timestamp=datetime.now(timezone.utc),
    )
