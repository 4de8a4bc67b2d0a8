"""Species and Pokemon models and their battle mutators."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from pokebattle.core.errors import InvalidPokemonDataError
from pokebattle.core.moves import Move, StatusEffect
from pokebattle.core.rng import RandomSource
from pokebattle.core.stats import (
    MAX_EV_PER_STAT,
    MAX_EV_TOTAL,
    MAX_IV,
    MAX_LEVEL,
    MAX_STAGE,
    MIN_STAGE,
    STAT_NAMES,
    GrowthRate,
    PokemonNature,
    calculate_all_stats,
    empty_stat_block,
    experience_for_level,
    random_ivs,
    random_nature,
)
from pokebattle.core.types import TYPE_CHART, PokemonType, TypeChart
from pokebattle.utils.config import config
from pokebattle.utils.helpers import ceil_div

if TYPE_CHECKING:
    from pokebattle.data.pokedex import Pokedex

logger = logging.getLogger(__name__)


# Status -> types that can never receive it
STATUS_IMMUNITIES: dict[StatusEffect, frozenset[PokemonType]] = {
    StatusEffect.BURN: frozenset({PokemonType.FIRE}),
    StatusEffect.FREEZE: frozenset({PokemonType.ICE}),
    StatusEffect.POISON: frozenset({PokemonType.POISON, PokemonType.STEEL}),
    StatusEffect.BADLY_POISONED: frozenset({PokemonType.POISON, PokemonType.STEEL}),
    StatusEffect.PARALYSIS: frozenset({PokemonType.ELECTRIC}),
}


class Species(BaseModel):
    """Immutable species data shared by every Pokemon of that species."""

    id: int | None = None
    name: str
    types: list[PokemonType] = Field(min_length=1, max_length=2)
    base_stats: dict[str, int]
    base_exp: int = Field(ge=1)
    catch_rate: int = Field(default=45, ge=1, le=255)
    growth_rate: GrowthRate = GrowthRate.MEDIUM_FAST
    learnset: dict[int, list[Move]] = Field(default_factory=dict)  # level -> moves
    ev_yield: dict[str, int] = Field(default_factory=dict)

    @field_validator("base_stats")
    @classmethod
    def _check_base_stats(cls, value: dict[str, int]) -> dict[str, int]:
        if set(value) != set(STAT_NAMES):
            raise ValueError(f"base_stats must have exactly the keys {STAT_NAMES}, got {sorted(value)}")
        for stat, amount in value.items():
            if not 1 <= amount <= 255:
                raise ValueError(f"base stat '{stat}' must be in 1..255, got {amount}")
        return value

    @field_validator("ev_yield")
    @classmethod
    def _check_ev_yield(cls, value: dict[str, int]) -> dict[str, int]:
        unknown = set(value) - set(STAT_NAMES)
        if unknown:
            raise ValueError(f"ev_yield has unknown stats {sorted(unknown)}")
        return value

    @field_validator("learnset")
    @classmethod
    def _check_learnset(cls, value: dict[int, list[Move]]) -> dict[int, list[Move]]:
        for level in value:
            if not 1 <= level <= MAX_LEVEL:
                raise ValueError(f"learnset level {level} outside 1..{MAX_LEVEL}")
        return value

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    def moves_learned_at(self, level: int) -> list[Move]:
        """Fresh copies of the moves learned on reaching ``level``."""
        return [m.model_copy(update={"current_pp": m.pp}) for m in self.learnset.get(level, [])]

    def default_moveset(self, level: int, max_moves: int = config.max_moves) -> list[Move]:
        """The last ``max_moves`` distinct moves learnable at or below ``level``."""
        known: list[Move] = []
        for learn_level in sorted(lv for lv in self.learnset if lv <= level):
            for move in self.learnset[learn_level]:
                known = [m for m in known if m.name != move.name]
                known.append(move)
        return [m.model_copy(update={"current_pp": m.pp}) for m in known[-max_moves:]]


class StatusResultKind(str, Enum):
    """What a status tick did."""

    DAMAGE = "damage"
    CURE = "cure"
    PREVENT = "prevent"
    NONE = "none"


class StatusResult(BaseModel):
    """Outcome of one ``process_status`` call."""

    kind: StatusResultKind
    message: str = ""
    amount: int = 0


class LevelUp(BaseModel):
    """One level gained during experience processing."""

    new_level: int
    stat_changes: dict[str, int]
    learned_moves: list[str] = Field(default_factory=list)
    pending_moves: list[str] = Field(default_factory=list)  # No free slot; caller decides


class ExperienceResult(BaseModel):
    """Result of ``add_experience``."""

    exp_gained: int
    levels_gained: int = 0
    level_ups: list[LevelUp] = Field(default_factory=list)


class Pokemon(BaseModel):
    """A single battle-ready Pokemon instance."""

    # Identity
    species: Species
    nickname: str | None = None
    level: int = Field(default=5, ge=1, le=MAX_LEVEL)

    # Genetics
    ivs: dict[str, int] = Field(default_factory=empty_stat_block)
    evs: dict[str, int] = Field(default_factory=empty_stat_block)
    nature: PokemonNature = PokemonNature.HARDY

    # Derived -- recomputed on construction, never trusted from input
    stats: dict[str, int] = Field(default_factory=dict, exclude=True)

    # Battle state
    current_hp: int | None = None  # None means full HP
    status: StatusEffect = StatusEffect.NONE
    status_turns: int = Field(default=0, ge=0)
    moves: list[Move] = Field(default_factory=list)
    stat_stages: dict[str, int] = Field(default_factory=dict, exclude=True)  # battle-only

    # Progress
    experience: int | None = None  # None means the threshold of the current level
    held_item: str | None = None
    friendship: int = Field(default=config.default_friendship, ge=0, le=255)
    ot_id: int = Field(default=0, ge=0, le=65535)

    @model_validator(mode="after")
    def _validate_and_compute(self) -> Pokemon:
        self._check_genetics()
        if len(self.moves) > config.max_moves:
            raise InvalidPokemonDataError(
                f"{self.display_name} knows {len(self.moves)} moves (max {config.max_moves})"
            )

        self.stats = calculate_all_stats(self.species.base_stats, self.level, self.ivs, self.evs, self.nature)

        if self.current_hp is None:
            self.current_hp = self.max_hp
        elif not 0 <= self.current_hp <= self.max_hp:
            raise InvalidPokemonDataError(
                f"{self.display_name} current_hp {self.current_hp} outside 0..{self.max_hp}"
            )

        threshold = experience_for_level(self.level, self.species.growth_rate)
        if self.experience is None:
            self.experience = threshold
        elif self.experience < threshold:
            raise InvalidPokemonDataError(
                f"{self.display_name} has {self.experience} exp, below the level {self.level} "
                f"threshold of {threshold}"
            )
        elif self.level < MAX_LEVEL and self.experience >= experience_for_level(
            self.level + 1, self.species.growth_rate
        ):
            raise InvalidPokemonDataError(
                f"{self.display_name} has {self.experience} exp, enough for a higher level than {self.level}"
            )
        return self

    def _check_genetics(self) -> None:
        for label, block in (("ivs", self.ivs), ("evs", self.evs)):
            if set(block) != set(STAT_NAMES):
                raise InvalidPokemonDataError(f"{label} must have exactly the keys {STAT_NAMES}")
        for stat, iv in self.ivs.items():
            if not 0 <= iv <= MAX_IV:
                raise InvalidPokemonDataError(f"IV for {stat} must be in 0..{MAX_IV}, got {iv}")
        for stat, ev in self.evs.items():
            if not 0 <= ev <= MAX_EV_PER_STAT:
                raise InvalidPokemonDataError(f"EV for {stat} must be in 0..{MAX_EV_PER_STAT}, got {ev}")
        if sum(self.evs.values()) > MAX_EV_TOTAL:
            raise InvalidPokemonDataError(f"EV total {sum(self.evs.values())} exceeds {MAX_EV_TOTAL}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, species: Species, level: int, rng: RandomSource | None = None, **overrides: Any) -> Pokemon:
        """Create a Pokemon, rolling IVs, nature and OT id when not given.

        Moves default to the species' most recent learnset moves for the level.
        """
        rng = rng or RandomSource()
        if "ivs" not in overrides:
            overrides["ivs"] = random_ivs(rng)
        if "nature" not in overrides:
            overrides["nature"] = random_nature(rng)
        if "ot_id" not in overrides:
            overrides["ot_id"] = rng.randint(0, 65535)
        if "moves" not in overrides:
            overrides["moves"] = species.default_moveset(level)
        return cls(species=species, level=level, **overrides)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def display_name(self) -> str:
        return self.nickname or self.species.display_name

    @property
    def types(self) -> list[PokemonType]:
        return list(self.species.types)

    @property
    def max_hp(self) -> int:
        return self.stats["hp"]

    @property
    def hp_percent(self) -> float:
        if self.max_hp == 0:
            return 0.0
        return (self.current_hp / self.max_hp) * 100

    @property
    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    @property
    def exp_to_next_level(self) -> int:
        if self.level >= MAX_LEVEL:
            return 0
        return experience_for_level(self.level + 1, self.species.growth_rate) - self.experience

    def has_type(self, pokemon_type: PokemonType | str) -> bool:
        return PokemonType(pokemon_type) in self.species.types

    def get_type_effectiveness(self, attack_type: PokemonType | str, chart: TypeChart = TYPE_CHART) -> float:
        """Multiplier of ``attack_type`` against all of this Pokemon's types."""
        return chart.effectiveness(attack_type, self.species.types)

    def get_stat_stage(self, stat: str) -> int:
        return self.stat_stages.get(stat, 0)

    # ------------------------------------------------------------------
    # HP
    # ------------------------------------------------------------------

    def take_damage(self, amount: float) -> int:
        """Apply damage and return the amount actually dealt.

        Any positive amount deals at least 1 and at most the remaining HP.
        """
        if amount <= 0 or self.is_fainted:
            return 0
        actual = min(self.current_hp, max(1, math.floor(amount)))
        self.current_hp -= actual
        return actual

    def heal(self, amount: int) -> int:
        """Heal HP, return actual amount healed. Clamps to max_hp."""
        if self.is_fainted or amount <= 0:
            return 0
        actual = min(int(amount), self.max_hp - self.current_hp)
        self.current_hp += actual
        return actual

    def revive(self, fraction: float = 0.5) -> int:
        """Bring a fainted Pokemon back with ``fraction`` of its max HP."""
        if not self.is_fainted:
            return 0
        self.current_hp = max(1, math.floor(self.max_hp * fraction))
        self.status = StatusEffect.NONE
        self.status_turns = 0
        return self.current_hp

    def full_restore(self) -> None:
        """Fully restore HP, PP and clear status."""
        self.current_hp = self.max_hp
        self.cure_status()
        for move in self.moves:
            move.restore_pp()

    def restore_pp(self, amount: int | None = None) -> int:
        """Restore PP on every move. Returns total PP restored."""
        return sum(move.restore_pp(amount) for move in self.moves)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def is_status_immune(self, status: StatusEffect) -> bool:
        immune_types = STATUS_IMMUNITIES.get(status, frozenset())
        return any(t in immune_types for t in self.species.types)

    def apply_status(self, status: StatusEffect) -> bool:
        """Try to inflict ``status``. Returns whether it took hold."""
        if status == StatusEffect.NONE or self.status != StatusEffect.NONE:
            return False
        if self.is_status_immune(status):
            return False
        self.status = status
        self.status_turns = 0
        return True

    def cure_status(self) -> bool:
        had_status = self.status != StatusEffect.NONE
        self.status = StatusEffect.NONE
        self.status_turns = 0
        return had_status

    def process_status(self, rng: RandomSource) -> StatusResult:
        """Advance the status counter by one turn and apply its effect."""
        self.status_turns += 1
        name = self.display_name

        if self.status == StatusEffect.BURN:
            dealt = self.take_damage(max(1, self.max_hp // 16))
            return StatusResult(kind=StatusResultKind.DAMAGE, amount=dealt, message=f"{name} is hurt by its burn!")

        if self.status == StatusEffect.POISON:
            dealt = self.take_damage(max(1, self.max_hp // 8))
            return StatusResult(kind=StatusResultKind.DAMAGE, amount=dealt, message=f"{name} is hurt by poison!")

        if self.status == StatusEffect.BADLY_POISONED:
            dealt = self.take_damage(max(1, self.max_hp * self.status_turns // 16))
            return StatusResult(
                kind=StatusResultKind.DAMAGE, amount=dealt, message=f"{name} is badly hurt by poison!"
            )

        if self.status == StatusEffect.SLEEP:
            if self.status_turns >= 3 and rng.chance(0.5):
                self.cure_status()
                return StatusResult(kind=StatusResultKind.CURE, message=f"{name} woke up!")
            return StatusResult(kind=StatusResultKind.PREVENT, message=f"{name} is fast asleep.")

        if self.status == StatusEffect.FREEZE:
            if rng.chance(0.2):
                self.cure_status()
                return StatusResult(kind=StatusResultKind.CURE, message=f"{name} thawed out!")
            return StatusResult(kind=StatusResultKind.PREVENT, message=f"{name} is frozen solid!")

        if self.status == StatusEffect.PARALYSIS:
            if rng.chance(0.25):
                return StatusResult(kind=StatusResultKind.PREVENT, message=f"{name} is paralyzed! It can't move!")
            return StatusResult(kind=StatusResultKind.NONE)

        self.status_turns = 0
        return StatusResult(kind=StatusResultKind.NONE)

    # ------------------------------------------------------------------
    # Stat stages
    # ------------------------------------------------------------------

    def modify_stat_stage(self, stat: str, delta: int) -> int:
        """Shift a stat stage, clamped to -6..+6. Returns the applied change."""
        if stat not in STAT_NAMES[1:]:
            raise InvalidPokemonDataError(f"Cannot change the stage of stat '{stat}'")
        current = self.get_stat_stage(stat)
        new = max(MIN_STAGE, min(MAX_STAGE, current + delta))
        self.stat_stages[stat] = new
        return new - current

    def reset_stat_stages(self) -> None:
        self.stat_stages.clear()

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    def _recalculate_stats(self) -> dict[str, int]:
        """Recompute stats, returning the previous ones."""
        old_stats = dict(self.stats)
        self.stats = calculate_all_stats(self.species.base_stats, self.level, self.ivs, self.evs, self.nature)
        return old_stats

    def add_experience(self, amount: int) -> ExperienceResult:
        """Add experience, cascading through every level-up it earns.

        Each level recomputes stats and scales current HP by the ratio held
        just before that recompute.
        """
        if amount < 0:
            raise ValueError("experience gains cannot be negative")

        start_level = self.level
        cap = experience_for_level(MAX_LEVEL, self.species.growth_rate)
        self.experience = min(cap, self.experience + int(amount))
        level_ups: list[LevelUp] = []

        while self.level < MAX_LEVEL and self.experience >= experience_for_level(
            self.level + 1, self.species.growth_rate
        ):
            old_hp = self.current_hp
            self.level += 1
            old_stats = self._recalculate_stats()
            self.current_hp = min(self.max_hp, ceil_div(self.max_hp * old_hp, old_stats["hp"]))

            learned, pending = self._learn_level_moves()
            level_ups.append(
                LevelUp(
                    new_level=self.level,
                    stat_changes={stat: self.stats[stat] - old_stats[stat] for stat in STAT_NAMES},
                    learned_moves=learned,
                    pending_moves=pending,
                )
            )

        if level_ups:
            logger.debug("%s grew from level %d to %d", self.display_name, start_level, self.level)
        return ExperienceResult(exp_gained=int(amount), levels_gained=self.level - start_level, level_ups=level_ups)

    def _learn_level_moves(self) -> tuple[list[str], list[str]]:
        learned: list[str] = []
        pending: list[str] = []
        known = {m.name for m in self.moves}
        for move in self.species.moves_learned_at(self.level):
            if move.name in known:
                continue
            if len(self.moves) < config.max_moves:
                self.moves.append(move)
                known.add(move.name)
                learned.append(move.display_name)
            else:
                pending.append(move.name)
        return learned, pending

    def learn_move(self, move: Move, replace_index: int | None = None) -> Move | None:
        """Teach a move, optionally replacing a slot. Returns the forgotten move."""
        fresh = move.model_copy(update={"current_pp": move.pp})
        if replace_index is None:
            if len(self.moves) >= config.max_moves:
                raise InvalidPokemonDataError(f"{self.display_name} already knows {config.max_moves} moves")
            self.moves.append(fresh)
            return None
        if not 0 <= replace_index < len(self.moves):
            raise InvalidPokemonDataError(f"No move slot {replace_index} to replace")
        forgotten = self.moves[replace_index]
        self.moves[replace_index] = fresh
        return forgotten

    def add_evs(self, gains: dict[str, int]) -> dict[str, int]:
        """Add EVs respecting the 252 per-stat and 510 total caps.

        Returns the EVs actually added per stat.
        """
        added: dict[str, int] = {}
        total = sum(self.evs.values())
        for stat, amount in gains.items():
            if stat not in self.evs or amount <= 0:
                continue
            can_add = min(amount, MAX_EV_PER_STAT - self.evs[stat], MAX_EV_TOTAL - total)
            if can_add > 0:
                self.evs[stat] += can_add
                total += can_add
                added[stat] = can_add
        if added:
            old_stats = self._recalculate_stats()
            if not self.is_fainted:
                self.current_hp = min(self.max_hp, self.current_hp + self.max_hp - old_stats["hp"])
        return added

    def increase_friendship(self, amount: int = 1) -> None:
        """Increase friendship, capped at 255."""
        self.friendship = min(255, self.friendship + amount)

    def decrease_friendship(self, amount: int = 1) -> None:
        """Decrease friendship, minimum 0."""
        self.friendship = max(0, self.friendship - amount)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize every mutable field; the species is stored by name."""
        data = self.model_dump(mode="json", exclude={"species"})
        data["species"] = self.species.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], dex: Pokedex) -> Pokemon:
        """Rebuild a Pokemon saved with ``to_dict``, resolving the species via ``dex``."""
        payload = dict(data)
        species = dex.get_species(payload.pop("species"))
        try:
            return cls.model_validate({**payload, "species": species})
        except ValidationError as exc:
            logger.error("Invalid saved Pokemon %s: %s", species.name, exc)
            raise InvalidPokemonDataError(f"Invalid saved {species.display_name}: {exc}") from exc
