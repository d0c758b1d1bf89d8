"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import asyncio

import pytest

from loph.core.engine import FallbackOrchestrator
from loph.core.errors import ProviderError
from loph.core.routing_types import ProviderDescriptor
from loph.memory.ephemeral_memory import EphemeralMemoryStore


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeProvider:
    """Async provider that answers, fails, or hangs, and records its calls."""

    def __init__(self, name: str, reply: str | None = None, hang: bool = False):
        self.name = name
        self.reply = reply
        self.hang = hang
        self.calls: list[tuple[str, list]] = []

    async def __call__(self, prompt: str, context=()) -> str:
        self.calls.append((prompt, list(context)))
        if self.hang:
            await asyncio.Event().wait()
        if self.reply is None:
            raise ProviderError(self.name, "boom")
        return self.reply

    def descriptor(self, order: int = 0, timeout_ms: int = 1000) -> ProviderDescriptor:
        return ProviderDescriptor(self.name, self, timeout_ms, order)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory(clock: FakeClock) -> EphemeralMemoryStore:
    return EphemeralMemoryStore(ttl_ms=60_000, clock=clock)


@pytest.fixture
def make_orchestrator(memory: EphemeralMemoryStore):
    """Build an orchestrator over fake providers sharing the test's memory store."""

    def _make(providers, image_generation=None, image_reading=None):
        return FallbackOrchestrator(
            providers=[p.descriptor(order=i) for i, p in enumerate(providers)],
            memory=memory,
            image_generation=image_generation.descriptor() if image_generation else None,
            image_reading=image_reading.descriptor() if image_reading else None,
        )

    return _make


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run without real provider credentials."""
    for var in ["OPENROUTER_API_KEY", "HUGGINGFACE_API_KEY"]:
        monkeypatch.delenv(var, raising=False)
    yield
