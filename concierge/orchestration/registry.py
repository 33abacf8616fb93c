"""Registry mapping capability kinds to the live agent serving them."""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from loguru import logger

from concierge.core.models import CapabilityKind

if TYPE_CHECKING:
    from concierge.agents.base import Agent


class AgentRegistry:
    """One agent per capability kind, written at bootstrap and read afterwards."""

    def __init__(self) -> None:
        self._agents: Dict[CapabilityKind, Agent] = {}

    def register(self, agent: Agent) -> None:
        kind = agent.identity.kind
        previous = self._agents.get(kind)
        if previous is not None and previous is not agent:
            logger.warning(
                "Replacing {} agent {} with {}",
                kind.value,
                previous.identity.name,
                agent.identity.name,
            )
        self._agents[kind] = agent
        logger.info("Registered {} agent: {}", kind.value, agent.identity.name)

    def unregister(self, kind: CapabilityKind) -> Optional[Agent]:
        return self._agents.pop(kind, None)

    def get(self, kind: CapabilityKind) -> Optional[Agent]:
        return self._agents.get(kind)

    def lookup(self, kind: CapabilityKind) -> Optional[Agent]:
        """Like :meth:`get`, but inactive agents count as a miss."""
        agent = self._agents.get(kind)
        if agent is None or not agent.is_active:
            return None
        return agent

    def find_by_id(self, agent_id: str) -> Optional[Agent]:
        for agent in self._agents.values():
            if agent.agent_id == agent_id:
                return agent
        return None

    def kinds(self) -> List[CapabilityKind]:
        return list(self._agents)

    def agents(self) -> List[Agent]:
        return list(self._agents.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._agents

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)
