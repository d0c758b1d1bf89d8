"""Chat-bot boundary package.

Architectural role:
- `constants`: control tokens and fixed replies.
- `handler`: group filtering, control tokens, activation gating and reply shaping
  around the orchestration core.
"""
