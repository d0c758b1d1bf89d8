"""Error taxonomy for request orchestration.

Recovery policy:
    - `EvaluationError` is recovered by the orchestrator as a fixed reply.
    - `ProviderError` is recovered inside the fallback loop.
    - `AggregateFailureError` and `SpecializedCapabilityError` subclasses are the
      only errors that leave `FallbackOrchestrator.resolve`.
"""


class LophError(Exception):
    """Base class for every error raised by the orchestration layer."""


class EvaluationError(LophError, ValueError):
    """Arithmetic expression could not be evaluated."""


class ProviderError(LophError):
    """A single provider attempt failed (network, status, payload, key)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderTimeoutError(ProviderError):
    """A provider attempt exceeded its deadline."""

    def __init__(self, provider: str, timeout_ms: int):
        super().__init__(provider, f"timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class AggregateFailureError(LophError):
    """Every provider in the fallback chain failed."""

    def __init__(self, attempts):
        self.attempts = list(attempts)
        names = ", ".join(a.name for a in self.attempts) or "none configured"
        super().__init__(f"No provider could answer (tried: {names})")


class SpecializedCapabilityError(LophError):
    """A single-backend capability failed; there is no fallback for it."""


class ImageGenerationError(SpecializedCapabilityError):
    pass


class ImageReadingError(SpecializedCapabilityError):
    pass
