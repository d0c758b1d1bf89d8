"""Fallback-chain assembly for the general-purpose text providers.

Architectural role:
    Turns the configured `PROVIDER_CHAIN` names into immutable
    `ProviderDescriptor` objects consumed by `loph.core.engine`. This is the only
    place that knows which adapter class serves which chain entry.

Chain naming:
    - `openrouter`   -> `OpenRouterAdapter`
    - `huggingface`  -> `HuggingFaceAdapter`
    - `ollama:<m>`   -> `OllamaAdapter(model=<m>)`

Determinism:
    Chain order equals configuration order; descriptors are built once at startup.
"""

from loph.core.routing_types import ProviderDescriptor
from loph.llm.client import HuggingFaceAdapter, OllamaAdapter, OpenRouterAdapter
from loph.llm.provider_config import (
    HUGGINGFACE_TIMEOUT_MS,
    OLLAMA_TIMEOUT_MS,
    OPENROUTER_TIMEOUT_MS,
    PROVIDER_CHAIN,
)


def build_provider(name: str, order: int) -> ProviderDescriptor:
    """Build one descriptor from a chain entry name.

    Raises:
        ValueError: unknown provider name or `ollama:` entry without a model.
    """
    if name == "openrouter":
        adapter = OpenRouterAdapter(timeout_ms=OPENROUTER_TIMEOUT_MS)
        return ProviderDescriptor(adapter.name, adapter, OPENROUTER_TIMEOUT_MS, order)

    if name == "huggingface":
        adapter = HuggingFaceAdapter(timeout_ms=HUGGINGFACE_TIMEOUT_MS)
        return ProviderDescriptor(adapter.name, adapter, HUGGINGFACE_TIMEOUT_MS, order)

    if name.startswith("ollama:"):
        model = name.split(":", 1)[1].strip()
        if not model:
            raise ValueError(f"Missing model in provider entry: {name!r}")
        adapter = OllamaAdapter(model=model, timeout_ms=OLLAMA_TIMEOUT_MS)
        return ProviderDescriptor(adapter.name, adapter, OLLAMA_TIMEOUT_MS, order)

    raise ValueError(f"Unknown provider in chain: {name!r}")


def build_provider_chain(names=None) -> list[ProviderDescriptor]:
    """Return descriptors for `names` (default: configured chain) in order."""
    chain_names = PROVIDER_CHAIN if names is None else names
    return [build_provider(name, order) for order, name in enumerate(chain_names)]
