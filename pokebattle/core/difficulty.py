"""Difficulty presets and adaptive difficulty scaling."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from pokebattle.core.errors import InvalidDataError, InvalidDifficultyError
from pokebattle.core.rng import RandomSource
from pokebattle.utils.config import config
from pokebattle.utils.helpers import clamp

logger = logging.getLogger(__name__)

LEVEL_MOD_BOUNDS = (0.5, 2.0)
STAT_MOD_BOUNDS = (0.5, 2.0)
CATCH_MOD_BOUNDS = (0.3, 2.0)

LOSS_STREAK_THRESHOLD = 3
WIN_STREAK_THRESHOLD = 5


class Difficulty(str, Enum):
    """Named difficulty presets."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    CHALLENGE = "challenge"


class DifficultyModifiers(BaseModel):
    """The live multiplier bundle of a profile."""

    name: str
    description: str = ""
    enemy_level_mod: float = Field(gt=0)
    enemy_stat_mod: float = Field(gt=0)
    exp_mod: float = Field(ge=0)
    money_mod: float = Field(ge=0)
    catch_rate_mod: float = Field(gt=0)
    ai_aggression: float = Field(ge=0, le=1)
    item_drop_mod: float = Field(ge=0)


PRESETS: dict[Difficulty, DifficultyModifiers] = {
    Difficulty.EASY: DifficultyModifiers(
        name="Easy",
        description="Reduced enemy levels and higher catch rates",
        enemy_level_mod=0.8,
        enemy_stat_mod=0.9,
        exp_mod=1.5,
        money_mod=1.5,
        catch_rate_mod=1.3,
        ai_aggression=0.3,
        item_drop_mod=1.3,
    ),
    Difficulty.NORMAL: DifficultyModifiers(
        name="Normal",
        description="Standard experience",
        enemy_level_mod=1.0,
        enemy_stat_mod=1.0,
        exp_mod=1.0,
        money_mod=1.0,
        catch_rate_mod=1.0,
        ai_aggression=0.5,
        item_drop_mod=1.0,
    ),
    Difficulty.HARD: DifficultyModifiers(
        name="Hard",
        description="Stronger enemies and smarter AI",
        enemy_level_mod=1.2,
        enemy_stat_mod=1.1,
        exp_mod=0.8,
        money_mod=0.8,
        catch_rate_mod=0.8,
        ai_aggression=0.7,
        item_drop_mod=0.8,
    ),
    Difficulty.CHALLENGE: DifficultyModifiers(
        name="Challenge",
        description="For experienced players, Nuzlocke-inspired",
        enemy_level_mod=1.3,
        enemy_stat_mod=1.2,
        exp_mod=0.6,
        money_mod=0.6,
        catch_rate_mod=0.6,
        ai_aggression=0.9,
        item_drop_mod=0.5,
    ),
}


def parse_difficulty(value: Difficulty | str) -> Difficulty:
    """Resolve a preset name, raising InvalidDifficultyError for unknown ones."""
    try:
        return Difficulty(str(value.value if isinstance(value, Difficulty) else value).lower())
    except ValueError:
        raise InvalidDifficultyError(str(value)) from None


class DifficultyProfile(BaseModel):
    """A difficulty preset plus the adaptive win/loss tracking that tunes it."""

    difficulty: Difficulty = Difficulty(config.default_difficulty)
    modifiers: DifficultyModifiers | None = None  # Preset copy when omitted
    adaptive_enabled: bool = False
    player_deaths: int = Field(default=0, ge=0)
    consecutive_wins: int = Field(default=0, ge=0)
    consecutive_losses: int = Field(default=0, ge=0)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: Any) -> Difficulty:
        return parse_difficulty(value)

    @model_validator(mode="after")
    def _fill_modifiers(self) -> DifficultyProfile:
        if self.modifiers is None:
            self.modifiers = PRESETS[self.difficulty].model_copy()
        return self

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_difficulty(self, difficulty: Difficulty | str) -> None:
        """Switch preset, replacing the modifier bundle with a fresh copy."""
        self.difficulty = parse_difficulty(difficulty)
        self.modifiers = PRESETS[self.difficulty].model_copy()

    def set_adaptive(self, enabled: bool) -> None:
        self.adaptive_enabled = enabled

    def record_battle_result(self, won: bool) -> None:
        if won:
            self.consecutive_wins += 1
            self.consecutive_losses = 0
        else:
            self.consecutive_losses += 1
            self.consecutive_wins = 0
            self.player_deaths += 1

        if self.adaptive_enabled:
            self.adjust_difficulty()

    def adjust_difficulty(self) -> None:
        """Ease off after a losing streak, push a little after a winning one."""
        mods = self.modifiers
        if self.consecutive_losses >= LOSS_STREAK_THRESHOLD:
            mods.enemy_level_mod *= 0.95
            mods.enemy_stat_mod *= 0.95
            mods.catch_rate_mod *= 1.1
        if self.consecutive_wins >= WIN_STREAK_THRESHOLD:
            mods.enemy_level_mod *= 1.02
            mods.enemy_stat_mod *= 1.02

        mods.enemy_level_mod = clamp(mods.enemy_level_mod, *LEVEL_MOD_BOUNDS)
        mods.enemy_stat_mod = clamp(mods.enemy_stat_mod, *STAT_MOD_BOUNDS)
        mods.catch_rate_mod = clamp(mods.catch_rate_mod, *CATCH_MOD_BOUNDS)
        logger.debug(
            "Adaptive difficulty: level=%.3f stat=%.3f catch=%.3f",
            mods.enemy_level_mod,
            mods.enemy_stat_mod,
            mods.catch_rate_mod,
        )

    def reset_tracking(self) -> None:
        self.consecutive_wins = 0
        self.consecutive_losses = 0

    # ------------------------------------------------------------------
    # Scaling queries
    # ------------------------------------------------------------------

    def get_enemy_level(self, area_level: int, player_level: int, rng: RandomSource | None = None) -> int:
        """Area level nudged 20% toward the player, scaled, with -1..+2 variance."""
        rng = rng or RandomSource()
        base_level = area_level + math.floor((player_level - area_level) * 0.2)
        scaled = math.floor(base_level * self.modifiers.enemy_level_mod)
        variance = rng.randint(-1, 2)
        return int(clamp(scaled + variance, 1, 100))

    def get_enemy_stat_mod(self) -> float:
        return self.modifiers.enemy_stat_mod

    def get_exp_reward(self, base_exp: int) -> int:
        return math.floor(base_exp * self.modifiers.exp_mod)

    def get_money_reward(self, base_money: int) -> int:
        return math.floor(base_money * self.modifiers.money_mod)

    def get_catch_rate(self, base_catch_rate: int) -> int:
        return min(255, math.floor(base_catch_rate * self.modifiers.catch_rate_mod))

    def get_ai_aggression(self) -> float:
        """Probability (0-1) that the AI picks its strongest move."""
        return self.modifiers.ai_aggression

    def get_item_drop_rate(self, base_rate: float) -> float:
        return base_rate * self.modifiers.item_drop_mod

    def is_nuzlocke_mode(self) -> bool:
        return self.difficulty == Difficulty.CHALLENGE

    def summary(self) -> dict[str, Any]:
        return {
            "difficulty": self.difficulty.value,
            **self.modifiers.model_dump(),
            "adaptive_enabled": self.adaptive_enabled,
            "player_deaths": self.player_deaths,
            "consecutive_wins": self.consecutive_wins,
            "consecutive_losses": self.consecutive_losses,
        }

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DifficultyProfile:
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise InvalidDataError(f"Invalid saved difficulty profile: {exc}") from exc
