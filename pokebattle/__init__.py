"""PokeBattle - a turn-based Pokemon battle simulator core."""

__version__ = "0.1.0"
