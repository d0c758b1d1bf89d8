"""NLP utilities for intent routing and local arithmetic.

Module scope:
- Rule-table intent classification and technical prompt rewriting (`intent_router`).
- Restricted arithmetic evaluation (`calculator`).

Determinism profile:
- Fully deterministic, no model or network dependency.
"""
