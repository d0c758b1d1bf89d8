"""Core orchestration package.

Architectural role:
    Exposes the request-orchestration layer that sits between the bot handler and
    lower-level subsystems (intent routing, memory, provider adapters).

Composition:
    - `engine`: fallback orchestrator and per-attempt deadline handling.
    - `activation`: per-user activation gate.
    - `routing_types`: intent enum, provider descriptor and result contracts.
    - `errors`: error taxonomy shared by every layer.

Determinism and side effects:
    Package import itself is deterministic and side-effect free.
"""
