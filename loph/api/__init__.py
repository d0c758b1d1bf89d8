"""Loph transport adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates gating and orchestration to `loph.bot.handler`.
"""
