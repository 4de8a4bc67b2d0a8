"""Move model, status conditions and weather."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from pokebattle.core.types import PokemonType


class DamageClass(str, Enum):
    """Move damage classification."""

    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


class StatusEffect(str, Enum):
    """Battle status conditions."""

    NONE = "none"
    BURN = "burn"
    FREEZE = "freeze"
    PARALYSIS = "paralysis"
    POISON = "poison"
    BADLY_POISONED = "badly_poisoned"
    SLEEP = "sleep"


# Statuses that may stop a Pokemon from acting (checked before it moves)
ACTION_BLOCKING_STATUSES = frozenset({StatusEffect.SLEEP, StatusEffect.FREEZE, StatusEffect.PARALYSIS})

# Statuses that deal damage at the end of the turn
DAMAGING_STATUSES = frozenset({StatusEffect.BURN, StatusEffect.POISON, StatusEffect.BADLY_POISONED})

STATUS_VERBS: dict[StatusEffect, str] = {
    StatusEffect.BURN: "burned",
    StatusEffect.FREEZE: "frozen solid",
    StatusEffect.PARALYSIS: "paralyzed",
    StatusEffect.POISON: "poisoned",
    StatusEffect.BADLY_POISONED: "badly poisoned",
    StatusEffect.SLEEP: "put to sleep",
}


class Weather(str, Enum):
    """Field weather."""

    CLEAR = "clear"
    SUN = "sun"
    RAIN = "rain"


WEATHER_START_MESSAGES: dict[Weather, str] = {
    Weather.SUN: "The sunlight turned harsh!",
    Weather.RAIN: "It started to rain!",
}

WEATHER_END_MESSAGES: dict[Weather, str] = {
    Weather.SUN: "The sunlight faded.",
    Weather.RAIN: "The rain stopped.",
}


class Move(BaseModel):
    """A Pokemon move."""

    id: int | None = None
    name: str
    display_name: str = ""  # Human-friendly (computed from name if blank)
    type: PokemonType
    damage_class: DamageClass = DamageClass.PHYSICAL
    power: int | None = Field(default=None, ge=0)  # None for status moves
    accuracy: int | None = Field(default=None, ge=1, le=100)  # None means always hits
    pp: int = Field(default=20, ge=1)  # Max power points
    current_pp: int | None = None  # Defaults to pp
    priority: int = Field(default=0, ge=-7, le=5)
    high_crit: bool = False
    description: str = ""

    # Effect metadata
    effect_chance: int | None = Field(default=None, ge=0, le=100)  # % chance of secondary status
    status_effect: StatusEffect = StatusEffect.NONE
    stat_changes: dict[str, int] = Field(default_factory=dict)  # e.g. {"atk": -1}
    targets_self: bool = False  # stat_changes apply to the user instead of the target
    drain_percent: int = 0  # Positive = drain, negative = recoil
    healing_percent: int = 0  # % of max HP healed
    weather: Weather | None = None  # Weather the move summons

    @field_validator("accuracy", mode="before")
    @classmethod
    def _always_hit_flag(cls, value):
        """``True`` is the data files' spelling of "never misses"."""
        if value is True:
            return None
        if isinstance(value, bool):
            raise ValueError("accuracy must be a percentage, true or null")
        return value

    @model_validator(mode="after")
    def _fill_defaults(self) -> "Move":
        if not self.display_name:
            self.display_name = self.name.replace("-", " ").title()
        if self.current_pp is None:
            self.current_pp = self.pp
        if not 0 <= self.current_pp <= self.pp:
            raise ValueError(f"current_pp {self.current_pp} outside 0..{self.pp} for move '{self.name}'")
        return self

    @property
    def is_damaging(self) -> bool:
        """True for moves that go through the damage formula."""
        return self.damage_class != DamageClass.STATUS and bool(self.power)

    @property
    def has_pp(self) -> bool:
        return (self.current_pp or 0) > 0

    def use_pp(self) -> None:
        """Spend one PP (never below zero)."""
        self.current_pp = max(0, (self.current_pp or 0) - 1)

    def restore_pp(self, amount: int | None = None) -> int:
        """Restore PP (fully if ``amount`` is None). Returns PP restored."""
        before = self.current_pp or 0
        target = self.pp if amount is None else min(self.pp, before + amount)
        self.current_pp = target
        return target - before


def struggle() -> Move:
    """The move used when a Pokemon has no PP left in any move."""
    return Move(
        name="struggle",
        type=PokemonType.NORMAL,
        damage_class=DamageClass.PHYSICAL,
        power=50,
        accuracy=None,
        pp=1,
        drain_percent=-25,
        description="Used only if all PP are gone. Also hurts the user a little.",
    )
