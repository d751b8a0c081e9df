"""
players - Decision Providers

This package contains every kind of participant:
- LLM players (any model LiteLLM can route to)
- Rule-based placeholder players (no API key needed)
- Human players (decisions submitted from outside)

All providers must implement the base.DecisionProvider interface.
"""

__version__ = "1.0.0"
