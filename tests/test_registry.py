"""Tests for the capability registry."""
from __future__ import annotations

import pytest

from concierge.core.models import CapabilityKind
from concierge.orchestration.registry import AgentRegistry

from conftest import StubAgent


def test_register_and_lookup() -> None:
    registry = AgentRegistry()
    bank = StubAgent(CapabilityKind.BANK)

    registry.register(bank)

    assert CapabilityKind.BANK in registry
    assert registry.get(CapabilityKind.BANK) is bank
    assert registry.lookup(CapabilityKind.BANK) is bank
    assert registry.kinds() == [CapabilityKind.BANK]
    assert len(registry) == 1


def test_miss_is_not_an_error() -> None:
    registry = AgentRegistry()

    assert registry.get(CapabilityKind.TRAVEL) is None
    assert registry.lookup(CapabilityKind.TRAVEL) is None
    assert registry.find_by_id("nope") is None


@pytest.mark.anyio
async def test_lookup_skips_inactive_agents() -> None:
    registry = AgentRegistry()
    travel = StubAgent(CapabilityKind.TRAVEL)
    registry.register(travel)

    await travel.shutdown()

    assert registry.get(CapabilityKind.TRAVEL) is travel
    assert registry.lookup(CapabilityKind.TRAVEL) is None


def test_registering_same_kind_replaces_previous() -> None:
    registry = AgentRegistry()
    first = StubAgent(CapabilityKind.RESTAURANT)
    second = StubAgent(CapabilityKind.RESTAURANT)

    registry.register(first)
    registry.register(second)

    assert registry.get(CapabilityKind.RESTAURANT) is second
    assert registry.agents() == [second]


def test_unregister_and_find_by_id() -> None:
    registry = AgentRegistry()
    clinic = StubAgent(CapabilityKind.HEALTHCARE)
    registry.register(clinic)

    assert registry.find_by_id(clinic.agent_id) is clinic
    assert registry.unregister(CapabilityKind.HEALTHCARE) is clinic
    assert CapabilityKind.HEALTHCARE not in registry
    assert list(registry) == []
