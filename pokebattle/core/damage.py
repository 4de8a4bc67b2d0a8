"""Damage, accuracy, turn order, experience yield and capture formulas.

The calculator holds no battle state. Its only collaborators are the
injected random source and type chart, so every roll can be replayed.
"""

import logging
import math

from pydantic import BaseModel

from pokebattle.core.moves import DamageClass, Move, StatusEffect, Weather
from pokebattle.core.pokemon import Pokemon
from pokebattle.core.rng import RandomSource
from pokebattle.core.stats import get_stat_stage_multiplier
from pokebattle.core.types import TYPE_CHART, PokemonType, TypeChart
from pokebattle.utils.config import config

logger = logging.getLogger(__name__)

MASTER_BALL_MODIFIER = 255

# Catch status bonus
CATCH_STATUS_MODIFIERS: dict[StatusEffect, float] = {
    StatusEffect.SLEEP: 2.5,
    StatusEffect.FREEZE: 2.5,
    StatusEffect.PARALYSIS: 1.5,
    StatusEffect.BURN: 1.5,
    StatusEffect.POISON: 1.5,
    StatusEffect.BADLY_POISONED: 1.5,
}


class DamageResult(BaseModel):
    """Outcome of one damage calculation."""

    damage: int = 0
    effectiveness: float = 1.0
    critical: bool = False
    message: str | None = None


class CatchResult(BaseModel):
    """Outcome of one ball throw."""

    caught: bool
    shakes: int
    catch_rate: float  # Percent, 0-100, one decimal


def effectiveness_message(effectiveness: float, defender_name: str) -> str | None:
    if effectiveness == 0:
        return f"It doesn't affect {defender_name}..."
    if effectiveness > 1:
        return "It's super effective!"
    if effectiveness < 1:
        return "It's not very effective..."
    return None


def weather_modifier(weather: Weather, move_type: PokemonType) -> float:
    """Sun boosts fire and weakens water; rain does the reverse."""
    boosted = {Weather.SUN: PokemonType.FIRE, Weather.RAIN: PokemonType.WATER}.get(weather)
    weakened = {Weather.SUN: PokemonType.WATER, Weather.RAIN: PokemonType.FIRE}.get(weather)
    if move_type == boosted:
        return config.weather_boost
    if move_type == weakened:
        return config.weather_penalty
    return 1.0


class DamageCalculator:
    """Stateless battle math over an injected random source and type chart."""

    def __init__(self, rng: RandomSource | None = None, type_chart: TypeChart = TYPE_CHART):
        self.rng = rng or RandomSource()
        self.type_chart = type_chart

    # ------------------------------------------------------------------
    # Damage
    # ------------------------------------------------------------------

    def calculate_damage(
        self,
        attacker: Pokemon,
        defender: Pokemon,
        move: Move,
        weather: Weather = Weather.CLEAR,
        critical: bool | None = None,
        random_factor: float | None = None,
        attack_modifier: float = 1.0,
        defense_modifier: float = 1.0,
    ) -> DamageResult:
        """Gen V style damage.

        base  = floor((2L/5 + 2) * power * A / D / 50 + 2)
        final = max(1, floor(base * crit * stab * type * weather * random))

        ``critical`` forces (True) or forbids (False) a crit, ``None`` rolls.
        ``random_factor`` pins the 0.85-1.0 variance roll. Immune targets
        take 0 damage.
        """
        if move.damage_class == DamageClass.STATUS or not move.power:
            return DamageResult()

        is_crit = self.check_critical(move) if critical is None else critical

        if move.damage_class == DamageClass.PHYSICAL:
            atk_key, def_key = "atk", "def"
        else:
            atk_key, def_key = "spa", "spd"

        atk_stage = attacker.get_stat_stage(atk_key)
        def_stage = defender.get_stat_stage(def_key)
        if is_crit:
            # Crits ignore the attacker's drops and the defender's boosts
            atk_stage = max(0, atk_stage)
            def_stage = min(0, def_stage)

        attack = math.floor(attacker.stats[atk_key] * get_stat_stage_multiplier(atk_stage) * attack_modifier)
        defense = math.floor(defender.stats[def_key] * get_stat_stage_multiplier(def_stage) * defense_modifier)
        if move.damage_class == DamageClass.PHYSICAL and attacker.status == StatusEffect.BURN:
            attack = math.floor(attack * 0.5)
        defense = max(1, defense)

        crit_mult = config.crit_multiplier if is_crit else 1.0
        stab = config.stab_multiplier if move.type in attacker.species.types else 1.0
        effectiveness = defender.get_type_effectiveness(move.type, self.type_chart)
        weather_mult = weather_modifier(weather, move.type)
        if random_factor is None:
            random_factor = self.rng.uniform(config.random_factor_min, config.random_factor_max)

        base = math.floor((2 * attacker.level / 5 + 2) * move.power * attack / defense / 50 + 2)
        if effectiveness == 0:
            damage = 0
        else:
            damage = max(1, math.floor(base * crit_mult * stab * effectiveness * weather_mult * random_factor))

        message = effectiveness_message(effectiveness, defender.display_name)
        if is_crit and effectiveness > 0:
            message = f"{message} A critical hit!" if message else "A critical hit!"

        logger.debug(
            "%s -> %s with %s: base=%d crit=%s stab=%.1f type=%.2f weather=%.1f rand=%.3f damage=%d",
            attacker.display_name,
            defender.display_name,
            move.name,
            base,
            is_crit,
            stab,
            effectiveness,
            weather_mult,
            random_factor,
            damage,
        )
        return DamageResult(damage=damage, effectiveness=effectiveness, critical=is_crit, message=message)

    def check_critical(self, move: Move) -> bool:
        """1/24 for normal moves, 1/8 for high-crit moves."""
        rate = config.crit_rate_high if move.high_crit else config.crit_rate_normal
        return self.rng.chance(rate)

    def check_accuracy(self, attacker: Pokemon, defender: Pokemon, move: Move) -> bool:
        """Moves with no accuracy always hit; otherwise a Bernoulli trial at accuracy%."""
        if move.accuracy is None:
            return True
        return self.rng.chance(move.accuracy / 100)

    # ------------------------------------------------------------------
    # Turn order
    # ------------------------------------------------------------------

    @staticmethod
    def get_move_priority(move: Move, pokemon: Pokemon | None = None) -> int:
        return move.priority

    @staticmethod
    def get_stat_multiplier(stage: int) -> float:
        return get_stat_stage_multiplier(stage)

    @staticmethod
    def effective_speed(pokemon: Pokemon) -> int:
        """Speed after stat stages, halved (floored) when paralyzed."""
        speed = math.floor(pokemon.stats["spe"] * get_stat_stage_multiplier(pokemon.get_stat_stage("spe")))
        if pokemon.status == StatusEffect.PARALYSIS:
            speed = math.floor(speed * 0.5)
        return speed

    def determine_turn_order(self, pokemon1: Pokemon, move1: Move, pokemon2: Pokemon, move2: Move) -> int:
        """Return 1 if ``pokemon1`` moves first, otherwise 2.

        Priority first, then effective speed, then a coin flip.
        """
        priority1 = self.get_move_priority(move1, pokemon1)
        priority2 = self.get_move_priority(move2, pokemon2)
        if priority1 != priority2:
            return 1 if priority1 > priority2 else 2

        speed1 = self.effective_speed(pokemon1)
        speed2 = self.effective_speed(pokemon2)
        if speed1 != speed2:
            return 1 if speed1 > speed2 else 2

        return 1 if self.rng.chance(0.5) else 2

    # ------------------------------------------------------------------
    # Rewards and capture
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_exp_yield(defeated: Pokemon, participant_count: int = 1, is_trainer_battle: bool = False) -> int:
        """floor(baseExp * level * trainerMod / (7 * participants)), minimum 1."""
        participants = max(1, participant_count)
        trainer_mod = config.trainer_exp_bonus if is_trainer_battle else 1.0
        return max(1, math.floor(defeated.species.base_exp * defeated.level * trainer_mod / (7 * participants)))

    def calculate_catch_rate(
        self,
        pokemon: Pokemon,
        ball_modifier: float = 1.0,
        catch_rate_modifier: float = 1.0,
    ) -> CatchResult:
        """Gen V style capture with four independent shake checks.

        a = (3M - 2H) * rate * ball * status / 3M
        b = 65536 / (255 / a)^0.1875
        """
        max_hp = pokemon.max_hp
        species_rate = min(255, math.floor(pokemon.species.catch_rate * catch_rate_modifier))
        status_mod = CATCH_STATUS_MODIFIERS.get(pokemon.status, 1.0)

        a = (3 * max_hp - 2 * pokemon.current_hp) * species_rate * ball_modifier * status_mod / (3 * max_hp)
        if a <= 0:
            return CatchResult(caught=False, shakes=0, catch_rate=0.0)

        if ball_modifier >= MASTER_BALL_MODIFIER:
            shakes = 4
        else:
            b = 65536 / (255 / a) ** 0.1875
            shakes = sum(1 for _ in range(4) if self.rng.random() * 65536 < b)

        catch_rate = round(min(100.0, a / 255 * 100), 1)
        logger.debug("Catch attempt on %s: a=%.1f shakes=%d", pokemon.display_name, a, shakes)
        return CatchResult(caught=shakes == 4, shakes=shakes, catch_rate=catch_rate)
