"""Stat computation, natures, and experience growth curves.

Everything here is a pure function of its inputs so that saved Pokemon
reproduce the same stats when loaded.
"""

from enum import Enum

from pokebattle.core.rng import RandomSource

# Canonical stat keys used everywhere (base stats, IVs, EVs, stages).
STAT_NAMES: tuple[str, ...] = ("hp", "atk", "def", "spa", "spd", "spe")
BATTLE_STATS: tuple[str, ...] = STAT_NAMES[1:]

MAX_IV = 31
MAX_EV_PER_STAT = 252
MAX_EV_TOTAL = 510
MIN_LEVEL = 1
MAX_LEVEL = 100
MIN_STAGE = -6
MAX_STAGE = 6


class GrowthRate(str, Enum):
    """Experience growth groups."""

    SLOW = "slow"  # 5 * L^3 / 4
    MEDIUM_SLOW = "medium_slow"  # 6/5 L^3 - 15 L^2 + 100 L - 140
    MEDIUM_FAST = "medium_fast"  # L^3
    FAST = "fast"  # 4 * L^3 / 5
    VERY_FAST = "very_fast"  # Same curve as fast in the Gen III tables this follows


class PokemonNature(str, Enum):
    """All 25 Pokemon natures. 5 are neutral (no stat modification)."""

    HARDY = "hardy"
    LONELY = "lonely"
    BRAVE = "brave"
    ADAMANT = "adamant"
    NAUGHTY = "naughty"
    BOLD = "bold"
    DOCILE = "docile"
    RELAXED = "relaxed"
    IMPISH = "impish"
    LAX = "lax"
    TIMID = "timid"
    HASTY = "hasty"
    SERIOUS = "serious"
    JOLLY = "jolly"
    NAIVE = "naive"
    MODEST = "modest"
    MILD = "mild"
    QUIET = "quiet"
    BASHFUL = "bashful"
    RASH = "rash"
    CALM = "calm"
    GENTLE = "gentle"
    SASSY = "sassy"
    CAREFUL = "careful"
    QUIRKY = "quirky"


# Nature stat modifiers: nature_name -> (boosted_stat, lowered_stat)
# Neutral natures have None for both
NATURE_MODIFIERS: dict[str, tuple[str | None, str | None]] = {
    "hardy": (None, None),
    "lonely": ("atk", "def"),
    "brave": ("atk", "spe"),
    "adamant": ("atk", "spa"),
    "naughty": ("atk", "spd"),
    "bold": ("def", "atk"),
    "docile": (None, None),
    "relaxed": ("def", "spe"),
    "impish": ("def", "spa"),
    "lax": ("def", "spd"),
    "timid": ("spe", "atk"),
    "hasty": ("spe", "def"),
    "serious": (None, None),
    "jolly": ("spe", "spa"),
    "naive": ("spe", "spd"),
    "modest": ("spa", "atk"),
    "mild": ("spa", "def"),
    "quiet": ("spa", "spe"),
    "bashful": (None, None),
    "rash": ("spa", "spd"),
    "calm": ("spd", "atk"),
    "gentle": ("spd", "def"),
    "sassy": ("spd", "spe"),
    "careful": ("spd", "spa"),
    "quirky": (None, None),
}


def get_nature_multiplier(nature: str, stat: str) -> float:
    """Return the nature multiplier for a given stat (1.0, 1.1, or 0.9)."""
    boosted, lowered = NATURE_MODIFIERS[PokemonNature(nature).value]
    if stat == boosted:
        return 1.1
    if stat == lowered:
        return 0.9
    return 1.0


def random_nature(rng: RandomSource) -> PokemonNature:
    """Pick a random nature."""
    return rng.choice(list(PokemonNature))


def random_ivs(rng: RandomSource) -> dict[str, int]:
    """Roll six IVs in 0..31."""
    return {stat: rng.randint(0, MAX_IV) for stat in STAT_NAMES}


def empty_stat_block() -> dict[str, int]:
    return {stat: 0 for stat in STAT_NAMES}


def compute_stat(
    stat: str,
    base: int,
    level: int,
    iv: int,
    ev: int,
    nature_multiplier: float = 1.0,
) -> int:
    """Compute one battle stat.

    HP:     floor((2*base + iv + floor(ev/4)) * level / 100) + level + 10
    Others: floor(floor((2*base + iv + floor(ev/4)) * level / 100 + 5) * nature)
    """
    scaled = (2 * base + iv + ev // 4) * level // 100
    if stat == "hp":
        return scaled + level + 10
    return int((scaled + 5) * nature_multiplier)


def calculate_all_stats(
    base_stats: dict[str, int],
    level: int,
    ivs: dict[str, int],
    evs: dict[str, int],
    nature: str,
) -> dict[str, int]:
    """Compute all six stats for the given genetics."""
    return {
        stat: compute_stat(
            stat,
            base_stats[stat],
            level,
            ivs[stat],
            evs[stat],
            get_nature_multiplier(nature, stat),
        )
        for stat in STAT_NAMES
    }


def experience_for_level(level: int, growth_rate: GrowthRate | str = GrowthRate.MEDIUM_FAST) -> int:
    """Total experience needed to reach ``level`` on the given curve."""
    if level <= MIN_LEVEL:
        return 0
    x = min(level, MAX_LEVEL)
    rate = GrowthRate(growth_rate)

    if rate == GrowthRate.SLOW:
        return 5 * x**3 // 4
    if rate == GrowthRate.MEDIUM_SLOW:
        # 6x^3/5 - 15x^2 + 100x - 140 over a common denominator
        return max(0, (6 * x**3 - 75 * x**2 + 500 * x - 700) // 5)
    if rate in (GrowthRate.FAST, GrowthRate.VERY_FAST):
        return 4 * x**3 // 5
    return x**3


def level_for_experience(experience: int, growth_rate: GrowthRate | str = GrowthRate.MEDIUM_FAST) -> int:
    """Highest level whose threshold is at or below ``experience``."""
    level = MIN_LEVEL
    while level < MAX_LEVEL and experience >= experience_for_level(level + 1, growth_rate):
        level += 1
    return level


def get_stat_stage_multiplier(stage: int) -> float:
    """Multiplier for a stat stage in -6..+6."""
    stage = max(MIN_STAGE, min(MAX_STAGE, stage))
    if stage >= 0:
        return (2 + stage) / 2
    return 2 / (2 - stage)
