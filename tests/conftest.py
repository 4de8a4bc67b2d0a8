"""Shared fixtures for PokeBattle tests."""

import pytest
from typer.testing import CliRunner

from pokebattle.core.moves import DamageClass, Move
from pokebattle.core.party import Party
from pokebattle.core.pokemon import Pokemon, Species
from pokebattle.core.rng import RandomSource
from pokebattle.core.stats import STAT_NAMES, GrowthRate, PokemonNature
from pokebattle.data.pokedex import default_pokedex


def make_move(name="tackle", type_="normal", power=40, accuracy=100, pp=35, damage_class=DamageClass.PHYSICAL, **kw):
    return Move(name=name, type=type_, damage_class=damage_class, power=power, accuracy=accuracy, pp=pp, **kw)


def make_species(
    name="testmon",
    types=("normal",),
    hp=50,
    atk=50,
    df=50,
    spa=50,
    spd=50,
    spe=50,
    base_exp=100,
    catch_rate=45,
    growth_rate=GrowthRate.MEDIUM_FAST,
    learnset=None,
    ev_yield=None,
) -> Species:
    return Species(
        name=name,
        types=list(types),
        base_stats={"hp": hp, "atk": atk, "def": df, "spa": spa, "spd": spd, "spe": spe},
        base_exp=base_exp,
        catch_rate=catch_rate,
        growth_rate=growth_rate,
        learnset=learnset or {},
        ev_yield=ev_yield or {},
    )


def make_pokemon(species=None, level=50, moves=None, iv=31, **kw) -> Pokemon:
    """A Pokemon with fixed genetics (uniform IVs, no EVs, neutral nature)."""
    kw.setdefault("ivs", {stat: iv for stat in STAT_NAMES})
    kw.setdefault("nature", PokemonNature.HARDY)
    return Pokemon(
        species=species or make_species(),
        level=level,
        moves=moves if moves is not None else [make_move()],
        **kw,
    )


# Random fixtures
@pytest.fixture
def rng():
    """Seeded random source."""
    return RandomSource(1234)


# Data fixtures
@pytest.fixture
def dex():
    """The built-in Pokedex."""
    return default_pokedex()


# Pokemon fixtures
@pytest.fixture
def fire_species():
    return make_species(name="blazer", types=("fire",), hp=58, atk=82, df=60, spa=80, spd=65, spe=80)


@pytest.fixture
def water_species():
    return make_species(name="tidal", types=("water",), hp=60, atk=60, df=100, spa=60, spd=80, spe=40)


@pytest.fixture
def fire_pokemon(fire_species):
    return make_pokemon(
        fire_species,
        moves=[make_move("blaze-kick", "fire", 90, 100, 10), make_move()],
    )


@pytest.fixture
def water_pokemon(water_species):
    return make_pokemon(water_species, moves=[make_move("water-gun", "water", 40, 100, 25, DamageClass.SPECIAL)])


@pytest.fixture
def sample_party(dex):
    """A three-member party built from the built-in data."""
    r = RandomSource(7)
    return Party(
        members=[
            dex.create_pokemon("cyndaquil", 12, rng=r),
            dex.create_pokemon("totodile", 10, rng=r),
            dex.create_pokemon("pidgey", 8, rng=r),
        ]
    )


# CLI fixtures
@pytest.fixture
def cli_runner():
    """Typer CLI runner."""
    return CliRunner()
