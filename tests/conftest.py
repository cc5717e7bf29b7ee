"""Pytest fixtures shared by the order-relay tests."""

from __future__ import annotations

import pytest

from order_relay.adapters.memory import InMemoryOrderStore, ManualDelayScheduler
from order_relay.config import RelaySettings
from order_relay.messaging.memory import InMemoryMessageBus, InMemoryPublisher


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings()


@pytest.fixture
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def clock() -> ManualDelayScheduler:
    return ManualDelayScheduler()


@pytest.fixture
def bus() -> InMemoryMessageBus:
    return InMemoryMessageBus()


@pytest.fixture
def publisher(bus: InMemoryMessageBus) -> InMemoryPublisher:
    return InMemoryPublisher(bus)
