"""Memory subsystem package.

Architectural role:
    `ephemeral_memory` holds the short per-user window of recent interactions used
    as conversational context. Nothing in this package touches disk.
"""
