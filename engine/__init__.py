"""
engine - Alchemist Market Engine

This package contains the deterministic game engine: the seeded economy,
the order sanitizer, the potion market and the async day loop that
drives decision providers.

Modules:
    economy: Seeded herb price and potion demand schedule
    sanitizer: Clamps requested actions to what a participant can afford
    clearing: Cheapest-first potion market
    transition: One full day across all participants
    orchestrator: Async run loop and disqualification
"""

__version__ = "1.0.0"
