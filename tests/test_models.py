from __future__ import annotations

import dataclasses

import pytest

from concierge.core.models import (
    AgentIdentity,
    CapabilityKind,
    Context,
    Intent,
    Message,
    MessageKind,
)

ROOT = AgentIdentity(id="root", name="Root", kind=CapabilityKind.ROOT)
BANK = AgentIdentity(id="bank", name="Bank", kind=CapabilityKind.BANK)


@pytest.mark.parametrize(("value", "expected"), [(2.0, 1.0), (-1.0, 0.0), (0.3, 0.3)])
def test_intent_confidence_is_clamped(value: float, expected: float) -> None:
    intent = Intent(name="x", confidence=value, primary_capability=CapabilityKind.GENERAL)

    assert intent.confidence == pytest.approx(expected)


def test_intent_is_immutable() -> None:
    intent = Intent(name="x", confidence=0.5, primary_capability=CapabilityKind.GENERAL)

    with pytest.raises(dataclasses.FrozenInstanceError):
        intent.confidence = 0.9  # type: ignore[misc]


def test_user_request_carries_text_and_query() -> None:
    context = Context()
    message = Message.user_request("hello", context=context, recipient=ROOT)

    assert message.kind is MessageKind.USER_REQUEST
    assert message.text == "hello"
    assert message.payload.data == {"text": "hello", "query": "hello"}
    assert message.payload.context is context
    assert message.session_id and message.correlation_id


def test_derive_keeps_session_and_correlation() -> None:
    parent = Message.user_request(
        "pay rent",
        context=Context(),
        recipient=ROOT,
        session_id="s-1",
        correlation_id="c-1",
    )

    child = parent.derive(sender=ROOT, recipient=BANK, intent_label="pay_bill", parameters={"amount": 1200})

    assert child.id != parent.id
    assert (child.session_id, child.correlation_id) == ("s-1", "c-1")
    assert child.sender == ROOT
    assert child.recipient == BANK
    assert child.payload.intent_label == "pay_bill"
    assert child.payload.data == {"text": "pay rent", "query": "pay rent", "amount": 1200}
    assert parent.payload.data == {"text": "pay rent", "query": "pay rent"}
    assert parent.kind is MessageKind.USER_REQUEST
