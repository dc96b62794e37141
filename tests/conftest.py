from __future__ import annotations

from typing import Any, List

import pytest

from conflux.core.adapter import AdapterRegistry
from conflux.core.manager import ConfigurationManager
from conflux.core.types import ManagerOptions
from fakes import FakeAdapter, FakeClock, UnknownProviderFactory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def registry(adapter: FakeAdapter) -> AdapterRegistry:
    reg = AdapterRegistry()
    reg.register("fake", lambda: adapter)
    return reg


@pytest.fixture
def make_manager(registry, clock):
    """Build a manager over the fake adapter with the given providers attached."""
    managers: List[ConfigurationManager] = []

    def _make(*providers, **options: Any) -> ConfigurationManager:
        options.setdefault("environment", "fake")
        manager = ConfigurationManager(
            ManagerOptions(**options),
            adapters=registry,
            provider_factory=UnknownProviderFactory(),
            clock=clock,
        )
        for provider in providers:
            manager.attach_provider(provider)
        managers.append(manager)
        return manager

    yield _make
    for manager in managers:
        manager.close()
