"""Pokemon types and the type effectiveness chart."""

from collections.abc import Iterable
from enum import Enum
from types import MappingProxyType


class PokemonType(str, Enum):
    """All 18 Pokemon types."""

    NORMAL = "normal"
    FIRE = "fire"
    WATER = "water"
    ELECTRIC = "electric"
    GRASS = "grass"
    ICE = "ice"
    FIGHTING = "fighting"
    POISON = "poison"
    GROUND = "ground"
    FLYING = "flying"
    PSYCHIC = "psychic"
    BUG = "bug"
    ROCK = "rock"
    GHOST = "ghost"
    DRAGON = "dragon"
    DARK = "dark"
    STEEL = "steel"
    FAIRY = "fairy"


# ---------------------------------------------------------------------------
# Type effectiveness chart
# ---------------------------------------------------------------------------
# Encoded as pairs of (attacking_type, defending_type).
# 2.0 = super effective, 0.5 = not very effective, 0.0 = immune, 1.0 = normal
# ---------------------------------------------------------------------------

# fmt: off
_SUPER_EFFECTIVE: list[tuple[str, str]] = [
    ("fire", "grass"), ("fire", "ice"), ("fire", "bug"), ("fire", "steel"),
    ("water", "fire"), ("water", "ground"), ("water", "rock"),
    ("electric", "water"), ("electric", "flying"),
    ("grass", "water"), ("grass", "ground"), ("grass", "rock"),
    ("ice", "grass"), ("ice", "ground"), ("ice", "flying"), ("ice", "dragon"),
    ("fighting", "normal"), ("fighting", "ice"), ("fighting", "rock"),
    ("fighting", "dark"), ("fighting", "steel"),
    ("poison", "grass"), ("poison", "fairy"),
    ("ground", "fire"), ("ground", "electric"), ("ground", "poison"),
    ("ground", "rock"), ("ground", "steel"),
    ("flying", "grass"), ("flying", "fighting"), ("flying", "bug"),
    ("psychic", "fighting"), ("psychic", "poison"),
    ("bug", "grass"), ("bug", "psychic"), ("bug", "dark"),
    ("rock", "fire"), ("rock", "ice"), ("rock", "flying"), ("rock", "bug"),
    ("ghost", "psychic"), ("ghost", "ghost"),
    ("dragon", "dragon"),
    ("dark", "psychic"), ("dark", "ghost"),
    ("steel", "ice"), ("steel", "rock"), ("steel", "fairy"),
    ("fairy", "fighting"), ("fairy", "dragon"), ("fairy", "dark"),
]

_NOT_VERY_EFFECTIVE: list[tuple[str, str]] = [
    ("normal", "rock"), ("normal", "steel"),
    ("fire", "fire"), ("fire", "water"), ("fire", "rock"), ("fire", "dragon"),
    ("water", "water"), ("water", "grass"), ("water", "dragon"),
    ("electric", "electric"), ("electric", "grass"), ("electric", "dragon"),
    ("grass", "fire"), ("grass", "grass"), ("grass", "poison"),
    ("grass", "flying"), ("grass", "bug"), ("grass", "dragon"), ("grass", "steel"),
    ("ice", "fire"), ("ice", "water"), ("ice", "ice"), ("ice", "steel"),
    ("fighting", "poison"), ("fighting", "flying"), ("fighting", "psychic"),
    ("fighting", "bug"), ("fighting", "fairy"),
    ("poison", "poison"), ("poison", "ground"), ("poison", "rock"), ("poison", "ghost"),
    ("ground", "grass"), ("ground", "bug"),
    ("flying", "electric"), ("flying", "rock"), ("flying", "steel"),
    ("psychic", "psychic"), ("psychic", "steel"),
    ("bug", "fire"), ("bug", "fighting"), ("bug", "poison"),
    ("bug", "flying"), ("bug", "ghost"), ("bug", "steel"), ("bug", "fairy"),
    ("rock", "fighting"), ("rock", "ground"), ("rock", "steel"),
    ("ghost", "dark"),
    ("dragon", "steel"),
    ("dark", "fighting"), ("dark", "dark"), ("dark", "fairy"),
    ("steel", "fire"), ("steel", "water"), ("steel", "electric"), ("steel", "steel"),
    ("fairy", "fire"), ("fairy", "poison"), ("fairy", "steel"),
]

_IMMUNE: list[tuple[str, str]] = [
    ("normal", "ghost"),
    ("electric", "ground"),
    ("fighting", "ghost"),
    ("poison", "steel"),
    ("ground", "flying"),
    ("psychic", "dark"),
    ("ghost", "normal"),
    ("dragon", "fairy"),
]
# fmt: on


def _type_key(t: str) -> str:
    return t.value if isinstance(t, PokemonType) else str(t).lower()


class TypeChart:
    """Read-only attack-type x defender-type multiplier table.

    Unlisted pairs (and types the chart does not know) are neutral (1.0).
    """

    def __init__(self, overrides: Iterable[tuple[str, str, float]]):
        table: dict[str, dict[str, float]] = {}
        for atk, dfn, mult in overrides:
            table.setdefault(_type_key(atk), {})[_type_key(dfn)] = float(mult)
        self._table = MappingProxyType({atk: MappingProxyType(row) for atk, row in table.items()})

    @classmethod
    def standard(cls) -> "TypeChart":
        """The Gen VI+ chart with all 18 types."""
        entries = [(a, d, 2.0) for a, d in _SUPER_EFFECTIVE]
        entries += [(a, d, 0.5) for a, d in _NOT_VERY_EFFECTIVE]
        entries += [(a, d, 0.0) for a, d in _IMMUNE]
        return cls(entries)

    def multiplier(self, attack_type: str, defend_type: str) -> float:
        """Multiplier of one attacking type against one defending type."""
        row = self._table.get(_type_key(attack_type))
        if row is None:
            return 1.0
        return row.get(_type_key(defend_type), 1.0)

    def effectiveness(self, attack_type: str, defender_types: Iterable[str]) -> float:
        """Combined multiplier across every defending type.

        Results can be 0x, 0.25x, 0.5x, 1x, 2x, or 4x for dual types.
        """
        mult = 1.0
        for defend_type in defender_types:
            mult *= self.multiplier(attack_type, defend_type)
        return mult


TYPE_CHART = TypeChart.standard()
