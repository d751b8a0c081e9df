"""
Exception hierarchy for the Alchemist market engine.

Feasibility shortfalls (not enough silver, herbs or potions) are NOT
exceptions: the sanitizer clamps them and reports violation strings.
The classes below cover the failures that cannot be recovered locally.
"""


class GameError(Exception):
    """Base class for all engine errors."""


class ConfigError(GameError, ValueError):
    """Invalid run configuration. Fatal before the first round starts."""


class ActionSchemaError(GameError, ValueError):
    """
    A decision response failed the fixed action schema.

    Attributes:
        raw: The raw response text (or repr of the object) that was rejected
    """

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class DecisionError(GameError):
    """A decision provider could not produce a decision."""
