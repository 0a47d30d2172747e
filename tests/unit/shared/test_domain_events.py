"""Unit tests for domain event primitives and the in-memory bus."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.orders.events import OrderFiscalDataUpdated, OrderStatusChanged
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def test_event_name_is_class_name():
    event = OrderStatusChanged(aggregate_id=uuid4(), from_status="pending", to_status="processing")
    assert event.event_name == "OrderStatusChanged"
    assert isinstance(event.occurred_on, datetime)


def test_events_are_immutable():
    event = OrderStatusChanged(aggregate_id=uuid4())
    with pytest.raises(AttributeError):
        event.to_status = "shipped"


def test_log_context_is_json_friendly():
    order_id = uuid4()
    event = OrderFiscalDataUpdated(aggregate_id=order_id, fields=("nfe_access_key", "nfe_url"))

    context = event.to_log_context()

    assert context["aggregate_id"] == str(order_id)
    assert context["fields"] == ["nfe_access_key", "nfe_url"]
    assert isinstance(context["occurred_on"], str)
    assert context["changed_by"] is None


def test_subscribe_is_idempotent():
    bus = InMemoryEventBus()
    handler = MagicMock()
    bus.subscribe(OrderStatusChanged, handler)
    bus.subscribe(OrderStatusChanged, handler)

    bus.publish(OrderStatusChanged(aggregate_id=uuid4()))

    handler.handle.assert_called_once()


def test_publish_on_commit_waits_for_commit(django_capture_on_commit_callbacks):
    bus = InMemoryEventBus()
    handler = MagicMock()
    bus.subscribe(OrderStatusChanged, handler)
    event = OrderStatusChanged(aggregate_id=uuid4())

    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        bus.publish_on_commit(event)
    handler.handle.assert_not_called()

    for callback in callbacks:
        callback()
    handler.handle.assert_called_once_with(event)
