"""Core engine package for the Hokm bot."""

__all__ = [
    "cards",
    "deck",
    "trick",
    "mechanics",
    "rules_schema",
    "policies",
    "state",
    "store",
    "timer",
    "events",
    "service",
]
