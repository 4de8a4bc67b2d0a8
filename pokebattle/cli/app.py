"""Main CLI application for PokeBattle."""

import logging

import typer
from rich import box
from rich.panel import Panel

from pokebattle import __version__
from pokebattle.cli.ui.displays import (
    console,
    display_difficulty,
    display_event,
    display_outcome,
    display_party,
    display_species,
    display_species_list,
    display_stats,
    display_turn_header,
)
from pokebattle.core.battle import Battle, BattlePhase
from pokebattle.core.difficulty import Difficulty, DifficultyProfile
from pokebattle.core.errors import PokeBattleError
from pokebattle.core.loot import LootSystem
from pokebattle.core.moves import Weather
from pokebattle.core.party import Party
from pokebattle.core.rng import RandomSource
from pokebattle.data.builtin import GYM_LEADERS, ROUTE_ENCOUNTERS
from pokebattle.data.pokedex import default_pokedex
from pokebattle.utils.config import config
from pokebattle.utils.logs import setup_logging

app = typer.Typer(
    name="pokebattle",
    help="PokeBattle - A seeded Pokemon battle simulator",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """PokeBattle - Simulate Johto battles from the command line."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


def _pick_move(battle: Battle) -> int:
    """Autopilot: strongest usable move against the current opponent."""
    player, opponent = battle.player_active, battle.opponent_active
    best_index, best_score = 0, -1.0
    for i, move in enumerate(player.moves):
        if not move.has_pp:
            continue
        score = (move.power or 0) * opponent.get_type_effectiveness(move.type)
        if score > best_score:
            best_index, best_score = i, score
    return best_index


def _pick_switch(battle: Battle) -> int:
    party = battle.player_party
    for i, p in enumerate(party.members):
        if not p.is_fainted and p is not battle.player_active:
            return i
    return -1


def _abort(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


@app.command("simulate")
def simulate(
    species: list[str] = typer.Option(
        ["cyndaquil"], "--pokemon", "-p", help="Player party species (repeatable)"
    ),
    level: int = typer.Option(10, "--level", "-l", min=1, max=100, help="Player party level"),
    route: str = typer.Option("route-29", "--route", "-r", help="Route for wild encounters"),
    wild: str = typer.Option(None, "--wild", "-w", help="Force the wild species"),
    gym: str = typer.Option(None, "--gym", "-g", help="Fight a gym leader instead"),
    difficulty: Difficulty = typer.Option(
        Difficulty(config.default_difficulty), "--difficulty", "-d", help="Difficulty preset"
    ),
    weather: Weather = typer.Option(Weather.CLEAR, "--weather", help="Starting weather"),
    catch: bool = typer.Option(False, "--catch", "-c", help="Throw Poke Balls at wild Pokemon"),
    seed: int = typer.Option(None, "--seed", "-s", help="Random seed for a reproducible battle"),
    max_turns: int = typer.Option(100, "--max-turns", min=1, help="Stop after this many turns"),
) -> None:
    """Auto-play one battle and print the battle log."""
    rng = RandomSource(seed)
    dex = default_pokedex()
    profile = DifficultyProfile(difficulty=difficulty)
    logger.debug("Simulating with seed %s on %s difficulty", seed, profile.difficulty.value)

    try:
        party = Party(members=[dex.create_pokemon(name, level, rng=rng) for name in species])
        battle = Battle(difficulty=profile, loot=LootSystem(profile, rng), rng=rng)

        if gym:
            team = GYM_LEADERS.get(gym.capitalize())
            if team is None:
                _abort(f"Unknown gym leader '{gym}'. Choose from: {', '.join(GYM_LEADERS)}")
            trainer = dex.create_trainer(gym.capitalize(), team, is_gym_leader=True, rng=rng)
            events = battle.start_trainer_battle(party, trainer, weather=weather)
        else:
            if route not in ROUTE_ENCOUNTERS:
                _abort(f"Unknown route '{route}'. Choose from: {', '.join(ROUTE_ENCOUNTERS)}")
            area_level, pool = ROUTE_ENCOUNTERS[route]
            target = wild or rng.choice(pool)
            opponent = dex.create_wild_pokemon(target, area_level, level, profile, rng)
            events = battle.start_wild_battle(party, opponent, weather=weather)
    except PokeBattleError as e:
        _abort(str(e))

    for event in events:
        display_event(event)

    while not battle.is_over and battle.turn_number < max_turns:
        if battle.phase == BattlePhase.SWITCH:
            events = battle.switch(_pick_switch(battle))
        else:
            display_turn_header(battle.turn_number + 1, battle.player_active, battle.opponent_active)
            if catch and not battle.is_trainer_battle and battle.opponent_active.hp_percent <= 50:
                events = battle.throw_ball()
            else:
                events = battle.fight(_pick_move(battle))
        for event in events:
            display_event(event)

    console.print()
    if battle.outcome is None:
        console.print(f"[yellow]Battle stopped after {battle.turn_number} turns.[/yellow]")
        return
    display_outcome(battle.outcome, battle.turn_number)
    display_party(party, title="Your Party")


@app.command("stats")
def show_stats(
    name: str = typer.Argument(..., help="Species name"),
    level: int = typer.Option(50, "--level", "-l", min=1, max=100),
    seed: int = typer.Option(None, "--seed", "-s", help="Random seed for IVs and nature"),
) -> None:
    """Roll a Pokemon and show its computed stats."""
    try:
        pokemon = default_pokedex().create_pokemon(name, level, rng=RandomSource(seed))
    except PokeBattleError as e:
        _abort(str(e))
    display_stats(pokemon)


@app.command("dex")
def show_dex(
    name: str = typer.Argument(None, help="Show one species in detail"),
) -> None:
    """List the built-in Pokedex."""
    pokedex = default_pokedex()
    if name is None:
        display_species_list([pokedex.get_species(n) for n in pokedex.species_names])
        return
    try:
        display_species(pokedex.get_species(name))
    except PokeBattleError as e:
        _abort(str(e))


@app.command("difficulty")
def show_difficulty(
    preset: Difficulty = typer.Argument(Difficulty(config.default_difficulty), help="Preset to show"),
) -> None:
    """Show a difficulty preset's modifiers."""
    display_difficulty(DifficultyProfile(difficulty=preset))


@app.command("version")
def show_version() -> None:
    """Show version information."""
    console.print(Panel(f"PokeBattle v{__version__}", box=box.ROUNDED))


if __name__ == "__main__":
    app()
