"""LLM access package.

Architectural role:
    Provides provider configuration, transport adapters and fallback-chain
    assembly used by `loph.core.engine` to invoke text-generation backends.

Module split:
    - `provider_config`: environment-driven chain, timeouts and credentials.
    - `client`: provider-specific HTTP adapters and response parsing.
    - `service`: chain-entry name -> `ProviderDescriptor` construction.
"""
