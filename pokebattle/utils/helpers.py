"""Helper utilities for PokeBattle."""

from pokebattle.core.rng import RandomSource


def weighted_random_choice(weights: dict, rng: RandomSource) -> str:
    """Select a random key based on weights.

    Args:
        weights: Dict of {choice: weight}. Weights need not sum to 1.0.
        rng: Random source used for the roll.

    Returns:
        Selected choice key.
    """
    choices = list(weights.keys())
    probabilities = list(weights.values())
    return rng.choices(choices, weights=probabilities)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division."""
    return -(-numerator // denominator)
