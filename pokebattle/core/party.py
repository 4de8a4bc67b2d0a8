"""Party (roster) of up to six Pokemon."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from pokebattle.core.errors import InvalidPokemonDataError
from pokebattle.core.pokemon import ExperienceResult, Pokemon
from pokebattle.utils.config import config

if TYPE_CHECKING:
    from pokebattle.data.pokedex import Pokedex

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "level": lambda p: p.level,
    "hp": lambda p: p.current_hp,
    "name": lambda p: p.display_name.lower(),
    "species": lambda p: p.species.name.lower(),
}


class ExperienceShare(BaseModel):
    """Experience awarded to one participant after a knockout."""

    index: int
    pokemon: str
    exp: int
    evs_gained: dict[str, int] = Field(default_factory=dict)
    result: ExperienceResult


class Party(BaseModel):
    """An ordered team of Pokemon.

    The lead is not stored: it is always the first non-fainted member.
    """

    max_size: int = Field(default=config.max_party_size, ge=1)
    members: list[Pokemon] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_size(self) -> Party:
        if len(self.members) > self.max_size:
            raise InvalidPokemonDataError(f"Party holds {len(self.members)} Pokemon (max {self.max_size})")
        return self

    @classmethod
    def of(cls, *pokemon: Pokemon, max_size: int = config.max_party_size) -> Party:
        return cls(max_size=max_size, members=list(pokemon))

    def __len__(self) -> int:
        return len(self.members)

    # ------------------------------------------------------------------
    # Size
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self.members)

    def is_full(self) -> bool:
        return len(self.members) >= self.max_size

    def is_empty(self) -> bool:
        return not self.members

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_pokemon(self, pokemon: Pokemon) -> bool:
        """Append a Pokemon. Returns False when the party is full."""
        if self.is_full():
            return False
        self.members.append(pokemon)
        return True

    def remove_pokemon(self, index: int) -> Pokemon | None:
        if not 0 <= index < len(self.members):
            return None
        return self.members.pop(index)

    def get_pokemon(self, index: int) -> Pokemon | None:
        if not 0 <= index < len(self.members):
            return None
        return self.members[index]

    def index_of(self, pokemon: Pokemon) -> int | None:
        """Position of this exact Pokemon object, or None."""
        for i, member in enumerate(self.members):
            if member is pokemon:
                return i
        return None

    def get_lead_pokemon(self) -> Pokemon | None:
        """First non-fainted member, or None on whiteout."""
        return next((p for p in self.members if not p.is_fainted), None)

    def get_lead_index(self) -> int:
        """Index of the lead, -1 on whiteout."""
        return next((i for i, p in enumerate(self.members) if not p.is_fainted), -1)

    def swap_positions(self, index1: int, index2: int) -> bool:
        size = len(self.members)
        if not (0 <= index1 < size and 0 <= index2 < size):
            return False
        self.members[index1], self.members[index2] = self.members[index2], self.members[index1]
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_whiteout(self) -> bool:
        """True when every member has fainted (an empty party counts as whited out)."""
        return all(p.is_fainted for p in self.members)

    def able_pokemon(self) -> list[Pokemon]:
        return [p for p in self.members if not p.is_fainted]

    def able_count(self) -> int:
        return len(self.able_pokemon())

    def fainted_count(self) -> int:
        return sum(1 for p in self.members if p.is_fainted)

    def total_level(self) -> int:
        return sum(p.level for p in self.members)

    def average_level(self) -> int:
        if not self.members:
            return 0
        return self.total_level() // len(self.members)

    def highest_level(self) -> int:
        return max((p.level for p in self.members), default=0)

    def lowest_level(self) -> int:
        return min((p.level for p in self.members), default=0)

    def summary(self) -> list[dict[str, Any]]:
        """Display-ready rows, one per member."""
        return [
            {
                "index": i,
                "nickname": p.display_name,
                "species": p.species.name,
                "level": p.level,
                "current_hp": p.current_hp,
                "max_hp": p.max_hp,
                "hp_percent": round(p.hp_percent),
                "status": p.status.value,
                "is_fainted": p.is_fainted,
            }
            for i, p in enumerate(self.members)
        ]

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def heal_all(self) -> None:
        for pokemon in self.members:
            pokemon.full_restore()

    def sort(self, criteria: str = "level", ascending: bool = False) -> None:
        """Stable sort by level, hp, name or species. Unknown criteria sort by level."""
        key = SORT_KEYS.get(criteria, SORT_KEYS["level"])
        self.members.sort(key=key, reverse=not ascending)

    def distribute_experience(
        self,
        defeated: Pokemon,
        participant_indices: Iterable[int],
        is_trainer_battle: bool = False,
        exp_multiplier: float = 1.0,
    ) -> list[ExperienceShare]:
        """Split experience for a knockout among the eligible participants.

        exp = floor(a*b*L / (5*s) * ((2L+10) / (L+Lp+10))^2.5 + 1)

        ``s`` counts only eligible participants (in range, not fainted,
        listed once). Each also receives the defeated species' EV yield.
        """
        eligible: list[int] = []
        for index in participant_indices:
            pokemon = self.get_pokemon(index)
            if pokemon is None or pokemon.is_fainted or index in eligible:
                continue
            eligible.append(index)
        if not eligible:
            return []

        a = config.trainer_exp_bonus if is_trainer_battle else 1.0
        b = defeated.species.base_exp
        foe_level = defeated.level
        s = len(eligible)

        shares: list[ExperienceShare] = []
        for index in eligible:
            pokemon = self.members[index]
            scale = ((2 * foe_level + 10) / (foe_level + pokemon.level + 10)) ** 2.5
            exp = math.floor(a * b * foe_level / (5 * s) * scale + 1)
            exp = max(1, math.floor(exp * exp_multiplier))

            evs_gained = pokemon.add_evs(defeated.species.ev_yield)
            result = pokemon.add_experience(exp)
            logger.debug("%s gained %d exp (share of %d)", pokemon.display_name, exp, s)
            shares.append(
                ExperienceShare(index=index, pokemon=pokemon.display_name, exp=exp, evs_gained=evs_gained, result=result)
            )
        return shares

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"max_size": self.max_size, "members": [p.to_dict() for p in self.members]}

    @classmethod
    def from_dict(cls, data: dict[str, Any], dex: Pokedex) -> Party:
        members = [Pokemon.from_dict(p, dex) for p in data.get("members", [])]
        try:
            return cls(max_size=data.get("max_size", config.max_party_size), members=members)
        except ValidationError as exc:
            raise InvalidPokemonDataError(f"Invalid saved party: {exc}") from exc
