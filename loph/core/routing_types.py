"""Routing and orchestration data contracts for `loph.core.engine`.

Architectural role:
    Defines the closed intent set produced by `loph.nlp.intent_router`, the
    provider descriptor shape that configures the fallback chain, and the result
    object handed back to transport adapters.

Control-flow interaction:
    `engine.FallbackOrchestrator.resolve` maps an `Intent` to a handling path and
    walks `ProviderDescriptor` lists in `order`. Transport adapters consume
    `OrchestrationResult.final_response` and discard the object.

Determinism:
    All types here are structural and state-free.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence, Union


class Intent(Enum):
    """Closed set of request categories, in classifier priority order."""

    ARITHMETIC = "arithmetic"
    IMAGE_GENERATION = "image_generation"
    IMAGE_READING = "image_reading"
    TECHNICAL = "technical"
    GENERAL = "general"


ProviderInvoke = Callable[[str, Sequence[Any]], Union[str, Awaitable[str]]]


@dataclass(frozen=True)
class ProviderDescriptor:
    """One backend entry in a fallback chain or a dedicated capability slot.

    Attributes:
        name: Label reported as `respondedModel` on success.
        invoke: `(prompt, context) -> text`. Sync callables run in a worker
            thread, coroutine functions are awaited on the loop.
        timeout_ms: Per-attempt deadline.
        order: Position in the chain; lower runs first.
    """

    name: str
    invoke: ProviderInvoke
    timeout_ms: int
    order: int = 0


@dataclass
class OrchestrationResult:
    """Final answer plus auxiliary tags for one resolved request."""

    final_response: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderAttempt:
    """Failure record for one provider inside an exhausted chain."""

    name: str
    error: str
