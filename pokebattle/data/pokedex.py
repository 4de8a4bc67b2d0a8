"""Species and move registry: the load boundary for static game data.

Every record is validated here so the battle core can trust its inputs.
Missing or malformed data raises instead of falling back to defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from pokebattle.core.difficulty import DifficultyProfile
from pokebattle.core.errors import InvalidDataError, InvalidPokemonDataError, UnknownMoveError, UnknownSpeciesError
from pokebattle.core.moves import Move
from pokebattle.core.party import Party
from pokebattle.core.pokemon import Pokemon, Species
from pokebattle.core.rng import RandomSource
from pokebattle.core.trainer import Trainer

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.strip().lower()


class Pokedex:
    """Validated, read-only lookup of species and moves."""

    def __init__(self, species: Mapping[str, Species], moves: Mapping[str, Move]):
        self._species = dict(species)
        self._moves = dict(moves)

    def __contains__(self, name: str) -> bool:
        return _key(name) in self._species

    def __len__(self) -> int:
        return len(self._species)

    @property
    def species_names(self) -> list[str]:
        return sorted(self._species, key=lambda n: (self._species[n].id or 0, n))

    @property
    def move_names(self) -> list[str]:
        return sorted(self._moves)

    def get_species(self, name: str) -> Species:
        try:
            return self._species[_key(name)]
        except KeyError:
            logger.error("Species lookup failed: %s", name)
            raise UnknownSpeciesError(name) from None

    def get_move(self, name: str) -> Move:
        """A fresh copy of the named move with full PP."""
        try:
            move = self._moves[_key(name)]
        except KeyError:
            logger.error("Move lookup failed: %s", name)
            raise UnknownMoveError(name) from None
        return move.model_copy(update={"current_pp": move.pp})

    def create_pokemon(self, name: str, level: int, rng: RandomSource | None = None, **overrides: Any) -> Pokemon:
        """Build a Pokemon of the named species. ``moves`` may be given as move names."""
        moves = overrides.get("moves")
        if moves is not None:
            overrides["moves"] = [self.get_move(m) if isinstance(m, str) else m for m in moves]
        species = self.get_species(name)
        try:
            return Pokemon.create(species, level, rng=rng, **overrides)
        except ValidationError as exc:
            logger.error("Cannot build %s at level %s: %s", species.name, level, exc)
            raise InvalidPokemonDataError(f"Cannot build {species.display_name}: {exc}") from exc

    def create_wild_pokemon(
        self,
        name: str,
        area_level: int,
        player_level: int,
        difficulty: DifficultyProfile | None = None,
        rng: RandomSource | None = None,
    ) -> Pokemon:
        """A wild Pokemon whose level follows the difficulty profile's scaling."""
        rng = rng or RandomSource()
        difficulty = difficulty or DifficultyProfile()
        level = difficulty.get_enemy_level(area_level, player_level, rng)
        return self.create_pokemon(name, level, rng=rng)

    def create_trainer(
        self,
        name: str,
        team: Iterable[tuple[str, int]],
        is_gym_leader: bool = False,
        rng: RandomSource | None = None,
    ) -> Trainer:
        rng = rng or RandomSource()
        party = Party(members=[self.create_pokemon(species, level, rng=rng) for species, level in team])
        return Trainer(name=name, party=party, is_gym_leader=is_gym_leader)


def _load_moves(records: Iterable[Mapping[str, Any]]) -> dict[str, Move]:
    moves: dict[str, Move] = {}
    for record in records:
        label = record.get("name", "<unnamed>")
        try:
            move = Move.model_validate(record)
        except ValidationError as exc:
            logger.error("Invalid move record %s: %s", label, exc)
            raise InvalidDataError(f"Invalid move '{label}': {exc}") from exc
        key = _key(move.name)
        if key in moves:
            logger.error("Duplicate move record %s", move.name)
            raise InvalidDataError(f"Duplicate move '{move.name}'")
        moves[key] = move
    return moves


def _load_species(records: Iterable[Mapping[str, Any]], moves: Mapping[str, Move]) -> dict[str, Species]:
    species: dict[str, Species] = {}
    for record in records:
        label = record.get("name", "<unnamed>")
        learnset: dict[int, list[Move]] = {}
        for level, names in (record.get("learnset") or {}).items():
            resolved = []
            for move_name in names:
                move = moves.get(_key(move_name))
                if move is None:
                    logger.error("Species %s references unknown move %s", label, move_name)
                    raise UnknownMoveError(move_name, context=f"species '{label}'")
                resolved.append(move)
            learnset[int(level)] = resolved

        try:
            entry = Species.model_validate({**record, "learnset": learnset})
        except ValidationError as exc:
            logger.error("Invalid species record %s: %s", label, exc)
            raise InvalidDataError(f"Invalid species '{label}': {exc}") from exc
        key = _key(entry.name)
        if key in species:
            logger.error("Duplicate species record %s", entry.name)
            raise InvalidDataError(f"Duplicate species '{entry.name}'")
        species[key] = entry
    return species


def load_pokedex(
    species: Iterable[Mapping[str, Any]],
    moves: Iterable[Mapping[str, Any]],
) -> Pokedex:
    """Validate raw species and move records and resolve learnset references."""
    move_table = _load_moves(moves)
    dex = Pokedex(_load_species(species, move_table), move_table)
    logger.debug("Loaded %d species and %d moves", len(dex), len(move_table))
    return dex


@lru_cache(maxsize=1)
def default_pokedex() -> Pokedex:
    """The built-in Johto data set."""
    from pokebattle.data.builtin import BUILTIN_MOVES, BUILTIN_SPECIES

    return load_pokedex(BUILTIN_SPECIES, BUILTIN_MOVES)
