"""Configuration management for PokeBattle."""

from pydantic import BaseModel


class Config(BaseModel):
    """Simulation configuration."""

    # Party / moves
    max_party_size: int = 6
    max_moves: int = 4
    default_friendship: int = 70

    # Critical hits (Gen VI+ rates)
    crit_rate_normal: float = 1 / 24  # ~4.17%
    crit_rate_high: float = 1 / 8  # 12.5%
    crit_multiplier: float = 1.5

    # Damage modifiers
    stab_multiplier: float = 1.5
    weather_boost: float = 1.5
    weather_penalty: float = 0.5
    random_factor_min: float = 0.85
    random_factor_max: float = 1.0

    # Field effects
    weather_turns: int = 5

    # Experience
    trainer_exp_bonus: float = 1.5

    # Difficulty
    default_difficulty: str = "normal"

    # Logging
    log_format: str = "%(message)s"
    log_datefmt: str = "[%X]"


# Global config instance
config = Config()
