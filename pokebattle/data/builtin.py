"""Built-in Johto starter and early-route data.

Records are plain dicts in the shape ``load_pokedex`` validates, the same
shape an external data file would supply.
"""

from typing import Any

# ---------------------------------------------------------------------------
# Moves
# ---------------------------------------------------------------------------
# (name, type, damage_class, power, accuracy, pp)
# ---------------------------------------------------------------------------

# fmt: off
_MOVE_TUPLES: list[tuple[str, str, str, int | None, int | None, int]] = [
    # Normal
    ("tackle", "normal", "physical", 40, 100, 35),
    ("scratch", "normal", "physical", 40, 100, 35),
    ("quick-attack", "normal", "physical", 40, 100, 30),
    ("hyper-fang", "normal", "physical", 80, 90, 15),
    ("fury-swipes", "normal", "physical", 18, 80, 15),
    ("swift", "normal", "special", 60, None, 20),
    ("growl", "normal", "status", None, 100, 40),
    ("leer", "normal", "status", None, 100, 30),
    ("tail-whip", "normal", "status", None, 100, 30),
    ("scary-face", "normal", "status", None, 100, 10),
    ("defense-curl", "normal", "status", None, None, 40),
    ("swords-dance", "normal", "status", None, None, 20),
    ("sunny-day", "fire", "status", None, None, 5),
    ("rain-dance", "water", "status", None, None, 5),
    # Fire
    ("ember", "fire", "special", 40, 100, 25),
    ("flame-wheel", "fire", "physical", 60, 100, 25),
    ("flamethrower", "fire", "special", 90, 100, 15),
    # Water
    ("water-gun", "water", "special", 40, 100, 25),
    ("bubble-beam", "water", "special", 65, 100, 20),
    ("surf", "water", "special", 90, 100, 15),
    # Grass
    ("absorb", "grass", "special", 20, 100, 25),
    ("razor-leaf", "grass", "physical", 55, 95, 25),
    ("synthesis", "grass", "status", None, None, 5),
    ("sleep-powder", "grass", "status", None, 75, 15),
    # Electric
    ("thunder-shock", "electric", "special", 40, 100, 30),
    ("thunderbolt", "electric", "special", 90, 100, 15),
    ("thunder-wave", "electric", "status", None, 90, 20),
    # Flying
    ("gust", "flying", "special", 40, 100, 35),
    ("peck", "flying", "physical", 35, 100, 35),
    ("wing-attack", "flying", "physical", 60, 100, 35),
    ("brave-bird", "flying", "physical", 120, 100, 15),
    # Poison / Bug
    ("poison-sting", "poison", "physical", 15, 100, 35),
    ("poison-powder", "poison", "status", None, 75, 35),
    ("toxic", "poison", "status", None, 90, 10),
    ("string-shot", "bug", "status", None, 95, 40),
    ("leech-life", "bug", "physical", 80, 100, 10),
    # Psychic / Ghost / Dark
    ("confusion", "psychic", "special", 50, 100, 25),
    ("hypnosis", "psychic", "status", None, 60, 20),
    ("lick", "ghost", "physical", 30, 100, 30),
    ("night-shade", "ghost", "special", 50, 100, 15),
    ("bite", "dark", "physical", 60, 100, 25),
    # Rock / Ground
    ("rock-throw", "rock", "physical", 50, 90, 15),
    ("mud-slap", "ground", "special", 20, 100, 10),
    ("magnitude", "ground", "physical", 70, 100, 30),
]
# fmt: on

# Extra fields by move name
_MOVE_EXTRAS: dict[str, dict[str, Any]] = {
    "quick-attack": {"priority": 1},
    "razor-leaf": {"high_crit": True},
    "growl": {"stat_changes": {"atk": -1}},
    "leer": {"stat_changes": {"def": -1}},
    "tail-whip": {"stat_changes": {"def": -1}},
    "scary-face": {"stat_changes": {"spe": -2}},
    "string-shot": {"stat_changes": {"spe": -2}},
    "defense-curl": {"stat_changes": {"def": 1}, "targets_self": True},
    "swords-dance": {"stat_changes": {"atk": 2}, "targets_self": True},
    "sunny-day": {"weather": "sun"},
    "rain-dance": {"weather": "rain"},
    "ember": {"status_effect": "burn", "effect_chance": 10},
    "flame-wheel": {"status_effect": "burn", "effect_chance": 10},
    "flamethrower": {"status_effect": "burn", "effect_chance": 10},
    "thunder-shock": {"status_effect": "paralysis", "effect_chance": 10},
    "thunderbolt": {"status_effect": "paralysis", "effect_chance": 10},
    "lick": {"status_effect": "paralysis", "effect_chance": 30},
    "poison-sting": {"status_effect": "poison", "effect_chance": 30},
    "thunder-wave": {"status_effect": "paralysis"},
    "poison-powder": {"status_effect": "poison"},
    "toxic": {"status_effect": "badly_poisoned"},
    "sleep-powder": {"status_effect": "sleep"},
    "hypnosis": {"status_effect": "sleep"},
    "absorb": {"drain_percent": 50},
    "leech-life": {"drain_percent": 50},
    "brave-bird": {"drain_percent": -33},
    "synthesis": {"healing_percent": 50},
}


def _move_record(data: tuple[str, str, str, int | None, int | None, int]) -> dict[str, Any]:
    name, mtype, dclass, power, accuracy, pp = data
    record: dict[str, Any] = {
        "name": name,
        "type": mtype,
        "damage_class": dclass,
        "power": power,
        "accuracy": accuracy,
        "pp": pp,
    }
    record.update(_MOVE_EXTRAS.get(name, {}))
    return record


BUILTIN_MOVES: list[dict[str, Any]] = [_move_record(m) for m in _MOVE_TUPLES]


# ---------------------------------------------------------------------------
# Species
# ---------------------------------------------------------------------------


def _stats(hp: int, atk: int, df: int, spa: int, spd: int, spe: int) -> dict[str, int]:
    return {"hp": hp, "atk": atk, "def": df, "spa": spa, "spd": spd, "spe": spe}


BUILTIN_SPECIES: list[dict[str, Any]] = [
    # Johto starters
    {
        "id": 152, "name": "chikorita", "types": ["grass"],
        "base_stats": _stats(45, 49, 65, 49, 65, 45), "base_exp": 64, "catch_rate": 45,
        "growth_rate": "medium_slow", "ev_yield": {"spd": 1},
        "learnset": {1: ["tackle", "growl"], 6: ["razor-leaf"], 9: ["poison-powder"], 12: ["synthesis"],
                     17: ["absorb"], 23: ["sleep-powder"]},
    },
    {
        "id": 155, "name": "cyndaquil", "types": ["fire"],
        "base_stats": _stats(39, 52, 43, 60, 50, 65), "base_exp": 62, "catch_rate": 45,
        "growth_rate": "medium_slow", "ev_yield": {"spe": 1},
        "learnset": {1: ["tackle", "leer"], 6: ["ember"], 12: ["quick-attack"], 19: ["flame-wheel"],
                     27: ["swift"], 31: ["flamethrower"]},
    },
    {
        "id": 158, "name": "totodile", "types": ["water"],
        "base_stats": _stats(50, 65, 64, 44, 48, 43), "base_exp": 63, "catch_rate": 45,
        "growth_rate": "medium_slow", "ev_yield": {"atk": 1},
        "learnset": {1: ["scratch", "leer"], 6: ["water-gun"], 13: ["bite"], 20: ["scary-face"],
                     27: ["bubble-beam"], 35: ["surf"]},
    },
    # Early routes
    {
        "id": 16, "name": "pidgey", "types": ["normal", "flying"],
        "base_stats": _stats(40, 45, 40, 35, 35, 56), "base_exp": 50, "catch_rate": 255,
        "growth_rate": "medium_slow", "ev_yield": {"spe": 1},
        "learnset": {1: ["tackle"], 5: ["gust"], 9: ["quick-attack"], 13: ["wing-attack"]},
    },
    {
        "id": 17, "name": "pidgeotto", "types": ["normal", "flying"],
        "base_stats": _stats(63, 60, 55, 50, 50, 71), "base_exp": 122, "catch_rate": 120,
        "growth_rate": "medium_slow", "ev_yield": {"spe": 2},
        "learnset": {1: ["tackle", "gust"], 9: ["quick-attack"], 13: ["wing-attack"], 40: ["brave-bird"]},
    },
    {
        "id": 19, "name": "rattata", "types": ["normal"],
        "base_stats": _stats(30, 56, 35, 25, 35, 72), "base_exp": 51, "catch_rate": 255,
        "growth_rate": "medium_fast", "ev_yield": {"spe": 1},
        "learnset": {1: ["tackle", "tail-whip"], 4: ["quick-attack"], 10: ["bite"], 13: ["hyper-fang"]},
    },
    {
        "id": 20, "name": "raticate", "types": ["normal"],
        "base_stats": _stats(55, 81, 60, 50, 70, 97), "base_exp": 145, "catch_rate": 127,
        "growth_rate": "medium_fast", "ev_yield": {"spe": 2},
        "learnset": {1: ["tackle", "tail-whip", "quick-attack"], 10: ["bite"], 13: ["hyper-fang"],
                     20: ["scary-face"], 24: ["swords-dance"]},
    },
    {
        "id": 161, "name": "sentret", "types": ["normal"],
        "base_stats": _stats(35, 46, 34, 35, 45, 20), "base_exp": 43, "catch_rate": 255,
        "growth_rate": "medium_fast", "ev_yield": {"atk": 1},
        "learnset": {1: ["scratch"], 4: ["defense-curl"], 7: ["quick-attack"], 13: ["fury-swipes"]},
    },
    {
        "id": 163, "name": "hoothoot", "types": ["normal", "flying"],
        "base_stats": _stats(60, 30, 30, 36, 56, 50), "base_exp": 52, "catch_rate": 255,
        "growth_rate": "medium_fast", "ev_yield": {"hp": 1},
        "learnset": {1: ["tackle", "growl"], 9: ["peck"], 13: ["hypnosis"], 17: ["confusion"]},
    },
    {
        "id": 165, "name": "ledyba", "types": ["bug", "flying"],
        "base_stats": _stats(40, 20, 30, 40, 80, 55), "base_exp": 53, "catch_rate": 255,
        "growth_rate": "fast", "ev_yield": {"spd": 1},
        "learnset": {1: ["tackle"], 8: ["swift"], 15: ["leech-life"]},
    },
    {
        "id": 167, "name": "spinarak", "types": ["bug", "poison"],
        "base_stats": _stats(40, 60, 40, 40, 40, 30), "base_exp": 50, "catch_rate": 255,
        "growth_rate": "fast", "ev_yield": {"atk": 1},
        "learnset": {1: ["poison-sting", "string-shot"], 6: ["scary-face"], 11: ["night-shade"],
                     22: ["leech-life"], 30: ["toxic"]},
    },
    {
        "id": 25, "name": "pikachu", "types": ["electric"],
        "base_stats": _stats(35, 55, 40, 50, 50, 90), "base_exp": 112, "catch_rate": 190,
        "growth_rate": "medium_fast", "ev_yield": {"spe": 2},
        "learnset": {1: ["thunder-shock", "growl"], 6: ["tail-whip"], 8: ["thunder-wave"],
                     11: ["quick-attack"], 26: ["thunderbolt"]},
    },
    {
        "id": 179, "name": "mareep", "types": ["electric"],
        "base_stats": _stats(55, 40, 40, 65, 45, 35), "base_exp": 56, "catch_rate": 235,
        "growth_rate": "medium_slow", "ev_yield": {"spa": 1},
        "learnset": {1: ["tackle", "growl"], 9: ["thunder-shock"], 16: ["thunder-wave"], 30: ["thunderbolt"]},
    },
    {
        "id": 74, "name": "geodude", "types": ["rock", "ground"],
        "base_stats": _stats(40, 80, 100, 30, 30, 20), "base_exp": 60, "catch_rate": 255,
        "growth_rate": "medium_slow", "ev_yield": {"def": 1},
        "learnset": {1: ["tackle", "defense-curl"], 6: ["rock-throw"], 11: ["magnitude"]},
    },
    {
        "id": 92, "name": "gastly", "types": ["ghost", "poison"],
        "base_stats": _stats(30, 35, 30, 100, 35, 80), "base_exp": 62, "catch_rate": 190,
        "growth_rate": "medium_slow", "ev_yield": {"spa": 1},
        "learnset": {1: ["hypnosis", "lick"], 13: ["night-shade"], 28: ["toxic"]},
    },
    {
        "id": 194, "name": "wooper", "types": ["water", "ground"],
        "base_stats": _stats(55, 45, 45, 25, 25, 15), "base_exp": 42, "catch_rate": 255,
        "growth_rate": "medium_fast", "ev_yield": {"hp": 1},
        "learnset": {1: ["water-gun", "tail-whip"], 5: ["mud-slap"], 15: ["rain-dance"]},
    },
    {
        "id": 81, "name": "magnemite", "types": ["electric", "steel"],
        "base_stats": _stats(25, 35, 70, 95, 55, 45), "base_exp": 65, "catch_rate": 190,
        "growth_rate": "medium_fast", "ev_yield": {"spa": 1},
        "learnset": {1: ["tackle"], 6: ["thunder-shock"], 11: ["thunder-wave"], 30: ["thunderbolt"]},
    },
]

# Route encounter tables: route -> (area level, species pool)
ROUTE_ENCOUNTERS: dict[str, tuple[int, list[str]]] = {
    "route-29": (3, ["pidgey", "rattata", "sentret", "hoothoot"]),
    "route-30": (4, ["pidgey", "rattata", "ledyba", "spinarak", "hoothoot"]),
    "route-32": (6, ["mareep", "wooper", "rattata", "hoothoot"]),
    "union-cave": (8, ["geodude", "rattata", "wooper"]),
    "sprout-tower": (5, ["gastly", "rattata"]),
}

# Gym leaders: name -> [(species, level)]
GYM_LEADERS: dict[str, list[tuple[str, int]]] = {
    "Falkner": [("pidgey", 7), ("pidgeotto", 9)],
}
