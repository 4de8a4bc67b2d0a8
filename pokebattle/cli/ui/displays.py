"""Rich display components for the CLI."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pokebattle.core.battle import BattleEvent, BattleOutcome, BattleResult
from pokebattle.core.difficulty import DifficultyProfile
from pokebattle.core.moves import StatusEffect
from pokebattle.core.party import Party
from pokebattle.core.pokemon import Pokemon, Species
from pokebattle.core.stats import STAT_NAMES

console = Console()


# Color mappings
TYPE_COLORS = {
    "normal": "white",
    "fire": "red",
    "water": "blue",
    "electric": "yellow",
    "grass": "green",
    "ice": "cyan",
    "fighting": "red",
    "poison": "magenta",
    "ground": "yellow",
    "flying": "cyan",
    "psychic": "magenta",
    "bug": "green",
    "rock": "yellow",
    "ghost": "magenta",
    "dragon": "blue",
    "dark": "white",
    "steel": "white",
    "fairy": "magenta",
}

STATUS_DISPLAY = {
    StatusEffect.BURN: ("BRN", "red"),
    StatusEffect.FREEZE: ("FRZ", "cyan"),
    StatusEffect.PARALYSIS: ("PAR", "yellow"),
    StatusEffect.POISON: ("PSN", "magenta"),
    StatusEffect.BADLY_POISONED: ("TOX", "magenta"),
    StatusEffect.SLEEP: ("SLP", "dim"),
}

RESULT_COLORS = {
    BattleResult.VICTORY: "green",
    BattleResult.CAUGHT: "green",
    BattleResult.RUN: "yellow",
    BattleResult.DEFEAT: "red",
}

STAT_DISPLAY = {"hp": "HP", "atk": "Atk", "def": "Def", "spa": "SpA", "spd": "SpD", "spe": "Spe"}


def format_types(types) -> str:
    """Colored ``Type/Type`` string."""
    parts = []
    for t in types:
        color = TYPE_COLORS.get(t.value, "white")
        parts.append(f"[{color}]{t.value.capitalize()}[/{color}]")
    return "/".join(parts)


def format_hp(pokemon: Pokemon) -> str:
    pct = pokemon.hp_percent
    color = "green" if pct > 50 else "yellow" if pct > 20 else "red"
    return f"[{color}]{pokemon.current_hp}/{pokemon.max_hp}[/{color}]"


def format_status(pokemon: Pokemon) -> str:
    if pokemon.is_fainted:
        return "[red]FNT[/red]"
    label, color = STATUS_DISPLAY.get(pokemon.status, ("", "white"))
    return f"[{color}]{label}[/{color}]" if label else ""


def display_pokemon(pokemon: Pokemon, detailed: bool = False) -> None:
    """Display a Pokemon."""
    name_display = pokemon.display_name
    if pokemon.nickname:
        name_display = f"{pokemon.nickname} ({pokemon.species.display_name})"

    content = f"""[bold]{name_display}[/bold]

[dim]Type:[/dim] {format_types(pokemon.types)}
[dim]Level:[/dim] {pokemon.level}
[dim]HP:[/dim] {format_hp(pokemon)} {format_status(pokemon)}
[dim]Nature:[/dim] {pokemon.nature.value.capitalize()}"""

    if detailed:
        stats = "  ".join(f"{STAT_DISPLAY[s]} {pokemon.stats[s]}" for s in STAT_NAMES)
        moves = ", ".join(f"{m.display_name} ({m.current_pp}/{m.pp})" for m in pokemon.moves) or "-"
        content += f"""

[dim]Stats:[/dim] {stats}
[dim]Moves:[/dim] {moves}
[dim]EXP to next level:[/dim] {pokemon.exp_to_next_level}"""

    console.print(Panel(content, box=box.ROUNDED))


def display_party(party: Party, title: str = "Party") -> None:
    """Display a party in a table."""
    if party.is_empty():
        console.print(f"[dim]No {title.lower()} members.[/dim]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", min_width=12)
    table.add_column("Type", width=16)
    table.add_column("Lv", width=4)
    table.add_column("HP", width=10)
    table.add_column("Status", width=6)

    for i, p in enumerate(party.members):
        table.add_row(
            str(i + 1),
            p.display_name,
            format_types(p.types),
            str(p.level),
            format_hp(p),
            format_status(p),
        )

    console.print(table)


def display_stats(pokemon: Pokemon) -> None:
    """Stat breakdown for one Pokemon."""
    table = Table(title=f"{pokemon.display_name} Lv.{pokemon.level} ({pokemon.nature.value})", box=box.ROUNDED)
    table.add_column("Stat", width=5)
    table.add_column("Base", justify="right")
    table.add_column("IV", justify="right")
    table.add_column("EV", justify="right")
    table.add_column("Value", justify="right", style="bold")

    for stat in STAT_NAMES:
        table.add_row(
            STAT_DISPLAY[stat],
            str(pokemon.species.base_stats[stat]),
            str(pokemon.ivs[stat]),
            str(pokemon.evs[stat]),
            str(pokemon.stats[stat]),
        )

    console.print(table)


def display_species_list(species: list[Species], title: str = "Pokedex") -> None:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", min_width=12)
    table.add_column("Type", width=16)
    table.add_column("BST", justify="right")
    table.add_column("Catch", justify="right")
    table.add_column("Growth")

    for s in species:
        table.add_row(
            f"{s.id:03d}" if s.id else "-",
            s.display_name,
            format_types(s.types),
            str(sum(s.base_stats.values())),
            str(s.catch_rate),
            s.growth_rate.value.replace("_", " "),
        )

    console.print(table)


def display_species(species: Species) -> None:
    """Pokedex entry with base stats and learnset."""
    stats = "  ".join(f"{STAT_DISPLAY[s]} {species.base_stats[s]}" for s in STAT_NAMES)
    learnset = "\n".join(
        f"  Lv.{level:>3}  {', '.join(m.display_name for m in moves)}"
        for level, moves in sorted(species.learnset.items())
    )
    content = f"""[bold]{species.display_name}[/bold]
[dim]#{species.id or 0:03d}[/dim]

[dim]Type:[/dim] {format_types(species.types)}
[dim]Base stats:[/dim] {stats}
[dim]Base EXP:[/dim] {species.base_exp}
[dim]Catch rate:[/dim] {species.catch_rate}
[dim]Growth:[/dim] {species.growth_rate.value.replace("_", " ")}

[dim]Learnset:[/dim]
{learnset or "  -"}"""

    console.print(Panel(content, title="Pokedex", box=box.ROUNDED))


def display_event(event: BattleEvent) -> None:
    """One line of battle log."""
    if not event.message:
        return
    style = ""
    if event.event_type == "faint":
        style = "bold red"
    elif event.event_type in ("exp", "level_up", "learn"):
        style = "green"
    elif event.event_type in ("reward", "caught"):
        style = "yellow"
    elif event.critical or event.effectiveness > 1:
        style = "bold"
    elif event.effectiveness < 1:
        style = "dim"
    console.print(f"[{style}]{event.message}[/{style}]" if style else event.message, highlight=False)


def display_turn_header(turn: int, player: Pokemon | None, opponent: Pokemon | None) -> None:
    line = f"[bold]Turn {turn}[/bold]"
    if player is not None and opponent is not None:
        line += f"  [dim]{player.display_name} {format_hp(player)}  vs  {opponent.display_name} {format_hp(opponent)}[/dim]"
    console.rule(line)


def display_outcome(outcome: BattleOutcome, turns: int) -> None:
    """Battle summary panel."""
    color = RESULT_COLORS.get(outcome.result, "white")
    content = f"""[bold {color}]{outcome.result.value.upper()}[/bold {color}]

[dim]Turns:[/dim] {turns}
[dim]EXP gained:[/dim] {outcome.rewards.exp}
[dim]Money:[/dim] {outcome.rewards.money}"""

    if outcome.rewards.items:
        content += f"\n[dim]Items:[/dim] {', '.join(i.name for i in outcome.rewards.items)}"
    if outcome.caught_pokemon is not None:
        content += f"\n[dim]Caught:[/dim] {outcome.caught_pokemon.display_name} Lv.{outcome.caught_pokemon.level}"

    console.print(Panel(content, title="Battle Result", box=box.DOUBLE))


def display_difficulty(profile: DifficultyProfile) -> None:
    mods = profile.modifiers
    content = f"""[bold]{mods.name}[/bold]
{mods.description}

[dim]Enemy level:[/dim] x{mods.enemy_level_mod:.2f}
[dim]Enemy stats:[/dim] x{mods.enemy_stat_mod:.2f}
[dim]EXP:[/dim] x{mods.exp_mod:.2f}   [dim]Money:[/dim] x{mods.money_mod:.2f}
[dim]Catch rate:[/dim] x{mods.catch_rate_mod:.2f}   [dim]Drops:[/dim] x{mods.item_drop_mod:.2f}
[dim]AI aggression:[/dim] {mods.ai_aggression:.0%}
[dim]Adaptive:[/dim] {'On' if profile.adaptive_enabled else 'Off'}"""

    console.print(Panel(content, title="Difficulty", box=box.ROUNDED))
