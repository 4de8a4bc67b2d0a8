"""Turn-based battle state machine.

Handles the full lifecycle of a single-player battle:
    start (wild or trainer) -> player actions -> turn resolution -> victory / defeat / run / catch

Every step function is synchronous and returns the events it produced, in
order. The same events are appended to ``Battle.log`` so a presentation layer
can replay them at its own pace.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

from pydantic import BaseModel, Field

from pokebattle.core.damage import DamageCalculator
from pokebattle.core.difficulty import DifficultyProfile
from pokebattle.core.errors import BattleError, InvalidPhaseError
from pokebattle.core.loot import Item, ItemCategory, LootSystem
from pokebattle.core.moves import (
    ACTION_BLOCKING_STATUSES,
    DAMAGING_STATUSES,
    STATUS_VERBS,
    WEATHER_END_MESSAGES,
    WEATHER_START_MESSAGES,
    Move,
    StatusEffect,
    Weather,
    struggle,
)
from pokebattle.core.party import Party
from pokebattle.core.pokemon import Pokemon, StatusResultKind
from pokebattle.core.rng import RandomSource
from pokebattle.core.trainer import Trainer
from pokebattle.utils.config import config

logger = logging.getLogger(__name__)

PLAYER = "player"
OPPONENT = "opponent"

STAT_LABELS = {"atk": "Attack", "def": "Defense", "spa": "Sp. Atk", "spd": "Sp. Def", "spe": "Speed"}

SHAKE_MESSAGES = {
    0: "Oh no! The Pokemon broke free!",
    1: "Aww! It appeared to be caught!",
    2: "Aargh! Almost had it!",
    3: "Shoot! It was so close, too!",
}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BattlePhase(str, Enum):
    """Where the battle currently is."""

    INTRO = "intro"
    PLAYER_TURN = "player_turn"  # Waiting for a player action
    ENEMY_TURN = "enemy_turn"  # Opponent acting without a player move (free attack)
    EXECUTING = "executing"
    SWITCH = "switch"  # Player must send out a replacement
    VICTORY = "victory"
    DEFEAT = "defeat"
    RUN = "run"
    CATCH = "catch"


class BattleResult(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    RUN = "run"
    CAUGHT = "caught"


_RESULT_PHASES = {
    BattleResult.VICTORY: BattlePhase.VICTORY,
    BattleResult.DEFEAT: BattlePhase.DEFEAT,
    BattleResult.RUN: BattlePhase.RUN,
    BattleResult.CAUGHT: BattlePhase.CATCH,
}


class BattleActionType(str, Enum):
    """Actions a player can take on their turn."""

    FIGHT = "fight"
    SWITCH = "switch"
    ITEM = "item"
    BALL = "ball"
    RUN = "run"


# ---------------------------------------------------------------------------
# Supporting models
# ---------------------------------------------------------------------------

class BattleAction(BaseModel):
    """A player action for one turn."""

    action_type: BattleActionType
    move_index: int | None = None  # Into the active Pokemon's moves (0-3)
    party_index: int | None = None  # Switch target or item target
    item_id: str | None = None  # Item or ball id


class BattleEvent(BaseModel):
    """A single event produced during the battle.

    The presentation layer uses these to animate/display the battle.
    """

    event_type: str  # "intro", "switch", "move", "miss", "damage", "status", "stat", "faint", "exp", ...
    side: str = ""  # "player", "opponent" or "" for field events
    pokemon_name: str = ""
    target_name: str = ""
    move_name: str = ""
    damage: int = 0
    effectiveness: float = 1.0
    critical: bool = False
    message: str = ""


class BattleRewards(BaseModel):
    exp: int = 0
    money: int = 0
    items: list[Item] = Field(default_factory=list)


class BattleOutcome(BaseModel):
    """Terminal result handed back to the caller."""

    result: BattleResult
    rewards: BattleRewards
    caught_pokemon: Pokemon | None = None


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class Battle:
    """Runs one battle at a time between the player's party and a wild Pokemon or trainer.

    Each side's active Pokemon is its party lead when it enters. Switching
    swaps party positions so the incoming Pokemon takes the lead slot; the
    player's original order is restored when the battle ends.
    """

    def __init__(
        self,
        difficulty: DifficultyProfile | None = None,
        loot: LootSystem | None = None,
        rng: RandomSource | None = None,
        calculator: DamageCalculator | None = None,
    ):
        self.rng = rng or RandomSource()
        self.difficulty = difficulty or DifficultyProfile()
        self.calculator = calculator or DamageCalculator(self.rng)
        self.loot = loot or LootSystem(self.difficulty, self.rng)
        self._reset()

    def _reset(self) -> None:
        self.phase: BattlePhase | None = None
        self.turn_number = 0
        self.player_party: Party | None = None
        self.opponent_party: Party | None = None
        self.trainer: Trainer | None = None
        self.weather = Weather.CLEAR
        self.weather_turns = 0  # 0 with weather set means it never expires
        self.rewards = BattleRewards()
        self.log: list[BattleEvent] = []
        self.outcome: BattleOutcome | None = None
        self.player_active: Pokemon | None = None
        self.opponent_active: Pokemon | None = None
        self._participants: list[Pokemon] = []
        self._original_order: list[Pokemon] = []
        self._awaiting_switch = False
        self._pending: list[BattleEvent] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def is_trainer_battle(self) -> bool:
        return self.trainer is not None

    @property
    def is_over(self) -> bool:
        return self.outcome is not None

    @property
    def messages(self) -> list[str]:
        """Plain-text view of the log."""
        return [event.message for event in self.log if event.message]

    def _prefix(self, side: str, pokemon: Pokemon) -> str:
        if side == PLAYER:
            return pokemon.display_name
        return f"Foe {pokemon.display_name}" if self.is_trainer_battle else f"Wild {pokemon.display_name}"

    def _status_message(self, side: str, pokemon: Pokemon, message: str) -> str:
        """Status messages name the bare Pokemon; give opponents their prefix."""
        if side == PLAYER or not message.startswith(pokemon.display_name):
            return message
        return self._prefix(side, pokemon) + message[len(pokemon.display_name):]

    # ------------------------------------------------------------------
    # Event plumbing
    # ------------------------------------------------------------------

    def _emit(self, event_type: str, message: str = "", **fields) -> BattleEvent:
        event = BattleEvent(event_type=event_type, message=message, **fields)
        self._pending.append(event)
        self.log.append(event)
        return event

    def _flush(self) -> list[BattleEvent]:
        events, self._pending = self._pending, []
        return events

    def _require_phase(self, action: str, *phases: BattlePhase) -> None:
        if self.phase not in phases:
            raise InvalidPhaseError(action, self.phase.value if self.phase else "idle")

    # ------------------------------------------------------------------
    # Battle start
    # ------------------------------------------------------------------

    def start_wild_battle(self, party: Party, wild_pokemon: Pokemon, weather: Weather = Weather.CLEAR) -> list[BattleEvent]:
        """Begin a battle against a single wild Pokemon."""
        wild_party = Party.of(wild_pokemon, max_size=1)
        self._check_can_start(party, wild_party, "wild Pokemon")
        self._begin(party, wild_party, None, weather)

        self._emit("intro", f"A wild {wild_pokemon.display_name} appeared!", side=OPPONENT,
                   pokemon_name=wild_pokemon.display_name)
        self._send_out_player()
        return self._enter_player_turn()

    def start_trainer_battle(self, party: Party, trainer: Trainer, weather: Weather = Weather.CLEAR) -> list[BattleEvent]:
        """Begin a battle against a trainer's party."""
        self._check_can_start(party, trainer.party, trainer.name)
        self._begin(party, trainer.party, trainer, weather)

        opponent = self.opponent_active
        self._emit("intro", f"{trainer.name} wants to battle!", side=OPPONENT)
        self._emit("switch", f"{trainer.name} sent out {opponent.display_name}!", side=OPPONENT,
                   pokemon_name=opponent.display_name)
        self._send_out_player()
        return self._enter_player_turn()

    def _check_can_start(self, party: Party, opponents: Party, opponent_label: str) -> None:
        """Validate preconditions before any state is touched."""
        if self.phase is not None and not self.is_over:
            raise BattleError("A battle is already in progress")
        if party.get_lead_pokemon() is None:
            raise BattleError("The player has no Pokemon able to battle")
        if opponents.get_lead_pokemon() is None:
            raise BattleError(f"The {opponent_label} has no Pokemon able to battle")
        for pokemon in opponents.members:
            if any(pokemon is member for member in party.members):
                raise BattleError(f"{pokemon.display_name} cannot fight on both sides")

    def _begin(self, party: Party, opponents: Party, trainer: Trainer | None, weather: Weather) -> None:
        self._reset()
        self.phase = BattlePhase.INTRO
        self.player_party = party
        self.opponent_party = opponents
        self.trainer = trainer
        self.weather = Weather(weather)
        self._original_order = list(party.members)
        self.player_active = party.get_lead_pokemon()
        self.opponent_active = opponents.get_lead_pokemon()
        for pokemon in (*party.members, *opponents.members):
            pokemon.reset_stat_stages()
        logger.info(
            "Battle started: %s vs %s",
            self.player_active.display_name,
            trainer.name if trainer else f"wild {self.opponent_active.display_name}",
        )

    def _send_out_player(self) -> None:
        self._emit("switch", f"Go! {self.player_active.display_name}!", side=PLAYER,
                   pokemon_name=self.player_active.display_name)
        self._participants = [self.player_active]

    def _enter_player_turn(self) -> list[BattleEvent]:
        self.phase = BattlePhase.PLAYER_TURN
        return self._flush()

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def take_action(self, action: BattleAction) -> list[BattleEvent]:
        """Dispatch a generic action to the matching step function."""
        if action.action_type == BattleActionType.FIGHT:
            return self.fight(action.move_index if action.move_index is not None else -1)
        if action.action_type == BattleActionType.SWITCH:
            return self.switch(action.party_index if action.party_index is not None else -1)
        if action.action_type == BattleActionType.ITEM:
            return self.use_item(action.item_id or "", action.party_index)
        if action.action_type == BattleActionType.BALL:
            return self.throw_ball(action.item_id or "pokeball")
        return self.run()

    def fight(self, move_index: int) -> list[BattleEvent]:
        """Use a move. Invalid choices are reported and do not consume the turn."""
        self._require_phase("fight", BattlePhase.PLAYER_TURN)
        player = self.player_active

        if not any(m.has_pp for m in player.moves):
            player_move = struggle()
            self._emit("info", f"{player.display_name} has no moves left!", side=PLAYER,
                       pokemon_name=player.display_name)
        elif not 0 <= move_index < len(player.moves):
            self._emit("invalid", "No move in that slot!", side=PLAYER)
            return self._flush()
        elif not player.moves[move_index].has_pp:
            self._emit("invalid", "There's no PP left for this move!", side=PLAYER,
                       move_name=player.moves[move_index].display_name)
            return self._flush()
        else:
            player_move = player.moves[move_index]

        opponent_move = self._select_opponent_move()
        self._begin_turn()

        order = self.calculator.determine_turn_order(player, player_move, self.opponent_active, opponent_move)
        logger.debug("Turn %d order: %s first", self.turn_number, PLAYER if order == 1 else OPPONENT)
        sequence = [(PLAYER, player_move), (OPPONENT, opponent_move)]
        if order != 1:
            sequence.reverse()

        for side, move in sequence:
            if self.player_active.is_fainted or self.opponent_active.is_fainted:
                break
            self._execute_move(side, move)

        return self._finish_turn()

    def switch(self, party_index: int) -> list[BattleEvent]:
        """Switch the active Pokemon.

        On the player's turn this consumes the turn (the opponent attacks);
        after a faint it is the forced replacement and consumes nothing.
        """
        self._require_phase("switch", BattlePhase.PLAYER_TURN, BattlePhase.SWITCH)
        target = self.player_party.get_pokemon(party_index)
        if target is None or target.is_fainted or target is self.player_active:
            self._emit("invalid", "Can't switch to that Pokemon!", side=PLAYER)
            return self._flush()

        if self.phase == BattlePhase.SWITCH:
            self._bring_in(party_index)
            self._awaiting_switch = False
            return self._enter_player_turn()

        old = self.player_active
        self._emit("switch", f"{old.display_name}, come back!", side=PLAYER, pokemon_name=old.display_name)
        old.reset_stat_stages()
        self._begin_turn()
        self._bring_in(party_index)
        self._opponent_free_turn()
        return self._finish_turn()

    def _bring_in(self, party_index: int) -> None:
        party = self.player_party
        incoming = party.members[party_index]
        lead_index = party.get_lead_index()
        current_index = party.index_of(self.player_active)
        # Active (or the first able member after a faint) holds the lead slot
        slot = current_index if current_index is not None and not self.player_active.is_fainted else lead_index
        party.swap_positions(slot, party_index)
        self.player_active = incoming
        self._emit("switch", f"Go! {incoming.display_name}!", side=PLAYER, pokemon_name=incoming.display_name)
        if not any(p is incoming for p in self._participants):
            self._participants.append(incoming)

    def use_item(self, item_id: str, party_index: int | None = None) -> list[BattleEvent]:
        """Use a medicine or berry on a party member (the active Pokemon by default)."""
        self._require_phase("use an item", BattlePhase.PLAYER_TURN)
        item = self.loot.get_item(item_id)
        if item.category == ItemCategory.POKEBALL:
            return self.throw_ball(item_id)
        if item.category not in (ItemCategory.POTION, ItemCategory.BERRY):
            self._emit("invalid", f"{item.name} can't be used in battle!")
            return self._flush()

        target = self.player_active if party_index is None else self.player_party.get_pokemon(party_index)
        if target is None:
            self._emit("invalid", "There's no Pokemon there!")
            return self._flush()

        effects = self._item_effects(item, target)
        if not effects:
            self._emit("invalid", "It won't have any effect.", pokemon_name=target.display_name)
            return self._flush()
        if item.revive_hp is not None:
            self._keep_active_in_lead()

        self._begin_turn()
        self._emit("item", f"Used {item.name}!", side=PLAYER, pokemon_name=target.display_name)
        for message in effects:
            self._emit("item", message, side=PLAYER, pokemon_name=target.display_name)
        self._opponent_free_turn()
        return self._finish_turn()

    def _keep_active_in_lead(self) -> None:
        """Put the active back in the lead slot if a revived member now sits ahead of it."""
        party = self.player_party
        lead_index = party.get_lead_index()
        active_index = party.index_of(self.player_active)
        if active_index is not None and lead_index != active_index:
            party.swap_positions(lead_index, active_index)

    def _item_effects(self, item: Item, target: Pokemon) -> list[str]:
        """Apply an item, returning what happened (empty when nothing would)."""
        name = target.display_name
        if item.revive_hp is not None:
            if not target.is_fainted:
                return []
            target.revive(item.revive_hp)
            return [f"{name} was revived!"]
        if target.is_fainted:
            return []

        messages = []
        heal = 0
        if item.heal_amount is not None:
            heal = item.heal_amount
        elif item.heal_percent is not None:
            heal = max(1, math.floor(target.max_hp * item.heal_percent))
        if heal:
            healed = target.heal(heal)
            if healed:
                messages.append(f"{name}'s HP was restored by {healed}.")
        if item.cures_status and target.cure_status():
            messages.append(f"{name} was cured of its status problem.")
        if item.restore_pp:
            depleted = [m for m in target.moves if m.current_pp < m.pp]
            if depleted:
                move = min(depleted, key=lambda m: m.current_pp)
                restored = move.restore_pp(item.restore_pp)
                messages.append(f"{name}'s {move.display_name} regained {restored} PP.")
        return messages

    def throw_ball(self, ball_id: str = "pokeball") -> list[BattleEvent]:
        """Throw a ball at the wild Pokemon. A capture ends the battle."""
        self._require_phase("throw a ball", BattlePhase.PLAYER_TURN)
        ball = self.loot.get_item(ball_id)
        if ball.category != ItemCategory.POKEBALL:
            self._emit("invalid", f"{ball.name} is not a Poke Ball!")
            return self._flush()
        if self.is_trainer_battle:
            self._emit("invalid", "The trainer blocked the ball! Don't be a thief!")
            return self._flush()

        target = self.opponent_active
        self._begin_turn()
        self.phase = BattlePhase.CATCH
        self._emit("ball", f"You threw a {ball.name}!", side=PLAYER, pokemon_name=target.display_name)
        result = self.calculator.calculate_catch_rate(
            target,
            ball_modifier=ball.catch_mod or 1.0,
            catch_rate_modifier=self.difficulty.modifiers.catch_rate_mod,
        )
        if result.caught:
            self._emit("caught", f"Gotcha! {target.display_name} was caught!", side=OPPONENT,
                       pokemon_name=target.display_name)
            target.reset_stat_stages()
            if self.player_party.add_pokemon(target):
                self._emit("info", f"{target.display_name} was added to your party.")
            self._end_battle(BattleResult.CAUGHT, caught=target)
            return self._flush()

        self._emit("ball", SHAKE_MESSAGES[result.shakes], side=OPPONENT, pokemon_name=target.display_name)
        self._opponent_free_turn()
        return self._finish_turn()

    def run(self) -> list[BattleEvent]:
        """Try to flee a wild battle: ((ps*128/os) + 30) / 256."""
        self._require_phase("run", BattlePhase.PLAYER_TURN)
        if self.is_trainer_battle:
            self._emit("invalid", "Can't run from a trainer battle!")
            return self._flush()

        self._begin_turn()
        if self.rng.chance(self.run_chance()):
            self._emit("run", "Got away safely!", side=PLAYER)
            self._end_battle(BattleResult.RUN)
            return self._flush()

        self._emit("run", "Can't escape!", side=PLAYER)
        self._opponent_free_turn()
        return self._finish_turn()

    def run_chance(self) -> float:
        player_speed = self.player_active.stats["spe"]
        opponent_speed = max(1, self.opponent_active.stats["spe"])
        return ((player_speed * 128 / opponent_speed) + 30) / 256

    # ------------------------------------------------------------------
    # Opponent AI
    # ------------------------------------------------------------------

    def _select_opponent_move(self) -> Move:
        """With probability ``aggression`` pick the best power x effectiveness move, else a random one."""
        opponent = self.opponent_active
        usable = [m for m in opponent.moves if m.has_pp]
        if not usable:
            return struggle()

        aggression = self.difficulty.get_ai_aggression()
        if self.rng.chance(aggression):
            best, best_score = usable[0], 0.0
            for move in usable:
                if not move.is_damaging:
                    continue
                score = move.power * self.player_active.get_type_effectiveness(move.type, self.calculator.type_chart)
                if score > best_score:
                    best, best_score = move, score
            logger.debug("AI picked best move %s (score %.1f)", best.name, best_score)
            return best

        move = self.rng.choice(usable)
        logger.debug("AI picked random move %s", move.name)
        return move

    def _opponent_free_turn(self) -> None:
        """The opponent acts alone after a switch, item, failed run or failed catch."""
        if self.opponent_active.is_fainted or self.player_active.is_fainted:
            return
        self.phase = BattlePhase.ENEMY_TURN
        self._execute_move(OPPONENT, self._select_opponent_move())

    # ------------------------------------------------------------------
    # Move execution
    # ------------------------------------------------------------------

    def _sides(self, side: str) -> tuple[Pokemon, Pokemon]:
        if side == PLAYER:
            return self.player_active, self.opponent_active
        return self.opponent_active, self.player_active

    def _execute_move(self, side: str, move: Move) -> None:
        attacker, defender = self._sides(side)
        foe_side = OPPONENT if side == PLAYER else PLAYER
        prefix = self._prefix(side, attacker)

        if attacker.status in ACTION_BLOCKING_STATUSES:
            status = attacker.process_status(self.rng)
            if status.message:
                self._emit("status", self._status_message(side, attacker, status.message), side=side,
                           pokemon_name=attacker.display_name)
            if status.kind == StatusResultKind.PREVENT:
                return

        if move.name != "struggle":
            move.use_pp()
        self._emit("move", f"{prefix} used {move.display_name}!", side=side, pokemon_name=attacker.display_name,
                   target_name=defender.display_name, move_name=move.display_name)

        if not self.calculator.check_accuracy(attacker, defender, move):
            self._emit("miss", f"{prefix}'s attack missed!", side=side, pokemon_name=attacker.display_name)
            return

        if not move.is_damaging:
            self._apply_status_move(side, move)
            return

        stat_mod = self.difficulty.get_enemy_stat_mod()
        result = self.calculator.calculate_damage(
            attacker,
            defender,
            move,
            weather=self.weather,
            attack_modifier=stat_mod if side == OPPONENT else 1.0,
            defense_modifier=stat_mod if side == PLAYER else 1.0,
        )
        dealt = defender.take_damage(result.damage)
        self._emit("damage", result.message or "", side=foe_side, pokemon_name=defender.display_name,
                   move_name=move.display_name, damage=dealt, effectiveness=result.effectiveness,
                   critical=result.critical)
        if result.effectiveness == 0:
            return

        if move.drain_percent > 0 and dealt:
            if attacker.heal(max(1, dealt * move.drain_percent // 100)):
                self._emit("drain", f"{self._prefix(foe_side, defender)} had its energy drained!", side=side,
                           pokemon_name=attacker.display_name)
        elif move.drain_percent < 0 and dealt:
            attacker.take_damage(max(1, dealt * -move.drain_percent // 100))
            self._emit("recoil", f"{prefix} is damaged by recoil!", side=side, pokemon_name=attacker.display_name)

        if move.weather is not None:
            self._set_weather(move.weather)
        if move.effect_chance is None or self.rng.chance(move.effect_chance / 100):
            if move.status_effect != StatusEffect.NONE and not defender.is_fainted:
                self._inflict_status(foe_side, defender, move.status_effect, announce_failure=False)
            if move.stat_changes:
                target_side, target = (side, attacker) if move.targets_self else (foe_side, defender)
                if not target.is_fainted:
                    self._change_stats(target_side, target, move.stat_changes)

    def _apply_status_move(self, side: str, move: Move) -> None:
        attacker, defender = self._sides(side)
        foe_side = OPPONENT if side == PLAYER else PLAYER
        prefix = self._prefix(side, attacker)
        acted = False

        if move.healing_percent > 0:
            acted = True
            healed = attacker.heal(max(1, attacker.max_hp * move.healing_percent // 100))
            message = f"{prefix} regained health!" if healed else f"{prefix}'s HP is full!"
            self._emit("heal", message, side=side, pokemon_name=attacker.display_name)
        if move.status_effect != StatusEffect.NONE:
            acted = True
            self._inflict_status(foe_side, defender, move.status_effect, announce_failure=True)
        if move.stat_changes:
            acted = True
            target_side, target = (side, attacker) if move.targets_self else (foe_side, defender)
            self._change_stats(target_side, target, move.stat_changes)
        if move.weather is not None:
            acted = True
            self._set_weather(move.weather)
        if not acted:
            self._emit("info", "But nothing happened!", side=side)

    def _inflict_status(self, side: str, target: Pokemon, status: StatusEffect, announce_failure: bool) -> None:
        if target.apply_status(status):
            self._emit("status", f"{self._prefix(side, target)} was {STATUS_VERBS[status]}!", side=side,
                       pokemon_name=target.display_name)
        elif announce_failure:
            self._emit("info", "But it failed!", side=side, pokemon_name=target.display_name)

    def _change_stats(self, side: str, target: Pokemon, changes: dict[str, int]) -> None:
        name = self._prefix(side, target)
        for stat, delta in changes.items():
            label = STAT_LABELS.get(stat, stat)
            applied = target.modify_stat_stage(stat, delta)
            if applied == 0:
                limit = "higher" if delta > 0 else "lower"
                message = f"{name}'s {label} won't go any {limit}!"
            elif applied > 0:
                message = f"{name}'s {label} {'sharply rose' if applied >= 2 else 'rose'}!"
            else:
                message = f"{name}'s {label} {'harshly fell' if applied <= -2 else 'fell'}!"
            self._emit("stat", message, side=side, pokemon_name=target.display_name)

    def _set_weather(self, weather: Weather) -> None:
        if weather == self.weather:
            self._emit("info", "But it failed!")
            return
        self.weather = weather
        self.weather_turns = config.weather_turns
        self._emit("weather", WEATHER_START_MESSAGES.get(weather, ""))

    # ------------------------------------------------------------------
    # Turn bookkeeping
    # ------------------------------------------------------------------

    def _begin_turn(self) -> None:
        self.turn_number += 1
        self.phase = BattlePhase.EXECUTING

    def _finish_turn(self) -> list[BattleEvent]:
        """Resolve faints, run end-of-turn effects, then hand control back."""
        self._handle_faints()
        if self.is_over:
            return self._flush()

        self._end_of_turn_effects()
        self._handle_faints()
        if self.is_over:
            return self._flush()

        self.phase = BattlePhase.SWITCH if self._awaiting_switch else BattlePhase.PLAYER_TURN
        return self._flush()

    def _end_of_turn_effects(self) -> None:
        """Status damage and held items for both actives in speed order, then weather."""
        combatants = []
        if not self._awaiting_switch and not self.player_active.is_fainted:
            combatants.append((PLAYER, self.player_active))
        if not self.opponent_active.is_fainted:
            combatants.append((OPPONENT, self.opponent_active))
        combatants.sort(key=lambda entry: self.calculator.effective_speed(entry[1]), reverse=True)

        for side, pokemon in combatants:
            if pokemon.status in DAMAGING_STATUSES:
                status = pokemon.process_status(self.rng)
                self._emit("status", self._status_message(side, pokemon, status.message), side=side,
                           pokemon_name=pokemon.display_name, damage=status.amount)
            if pokemon.held_item == "leftovers" and not pokemon.is_fainted and pokemon.current_hp < pokemon.max_hp:
                item = self.loot.get_item("leftovers")
                pokemon.heal(max(1, math.floor(pokemon.max_hp * item.heal_percent)))
                self._emit("item", f"{self._prefix(side, pokemon)} restored a little HP using its Leftovers!",
                           side=side, pokemon_name=pokemon.display_name)

        if self.weather != Weather.CLEAR and self.weather_turns > 0:
            self.weather_turns -= 1
            if self.weather_turns == 0:
                self._emit("weather", WEATHER_END_MESSAGES.get(self.weather, ""))
                self.weather = Weather.CLEAR

    def _handle_faints(self) -> None:
        """Opponent faints resolve first, so a mutual knockout that empties the foe's party is a win."""
        if self.opponent_active.is_fainted:
            self._opponent_fainted()
            if self.is_over:
                return
        if self.player_active.is_fainted and not self._awaiting_switch:
            self._player_fainted()

    def _opponent_fainted(self) -> None:
        defeated = self.opponent_active
        self._emit("faint", f"{self._prefix(OPPONENT, defeated)} fainted!", side=OPPONENT,
                   pokemon_name=defeated.display_name)
        self._award_experience(defeated)

        if self.opponent_party.is_whiteout():
            if self.trainer is not None:
                self._emit("info", f"{self.trainer.name} was defeated!", side=OPPONENT)
            self._end_battle(BattleResult.VICTORY)
            return

        self.opponent_active = self.opponent_party.get_lead_pokemon()
        self._participants = [] if self.player_active.is_fainted else [self.player_active]
        name = self.trainer.name if self.trainer else "The opponent"
        self._emit("switch", f"{name} sent out {self.opponent_active.display_name}!", side=OPPONENT,
                   pokemon_name=self.opponent_active.display_name)

    def _player_fainted(self) -> None:
        fallen = self.player_active
        self._emit("faint", f"{fallen.display_name} fainted!", side=PLAYER, pokemon_name=fallen.display_name)
        fallen.reset_stat_stages()
        if self.player_party.is_whiteout():
            self._emit("info", "You are out of usable Pokemon!", side=PLAYER)
            self._end_battle(BattleResult.DEFEAT)
            return
        self._emit("prompt", "Choose a Pokemon!", side=PLAYER)
        self._awaiting_switch = True

    def _award_experience(self, defeated: Pokemon) -> None:
        """One participant uses the per-opponent yield, several share via the party formula."""
        eligible = [p for p in self._participants if not p.is_fainted]
        if not eligible:
            return
        trainer_battle = self.is_trainer_battle

        if len(eligible) == 1:
            pokemon = eligible[0]
            exp = max(1, self.difficulty.get_exp_reward(self.calculator.calculate_exp_yield(defeated, 1, trainer_battle)))
            pokemon.add_evs(defeated.species.ev_yield)
            gains = [(pokemon, exp, pokemon.add_experience(exp))]
        else:
            indices = [self.player_party.index_of(p) for p in eligible]
            shares = self.player_party.distribute_experience(
                defeated,
                [i for i in indices if i is not None],
                is_trainer_battle=trainer_battle,
                exp_multiplier=self.difficulty.modifiers.exp_mod,
            )
            gains = [(self.player_party.members[s.index], s.exp, s.result) for s in shares]

        for pokemon, exp, result in gains:
            self.rewards.exp += exp
            self._emit("exp", f"{pokemon.display_name} gained {exp} EXP!", side=PLAYER,
                       pokemon_name=pokemon.display_name)
            for level_up in result.level_ups:
                self._emit("level_up", f"{pokemon.display_name} grew to level {level_up.new_level}!", side=PLAYER,
                           pokemon_name=pokemon.display_name)
                for move_name in level_up.learned_moves:
                    self._emit("learn", f"{pokemon.display_name} learned {move_name}!", side=PLAYER,
                               pokemon_name=pokemon.display_name)

    # ------------------------------------------------------------------
    # Battle end
    # ------------------------------------------------------------------

    def _end_battle(self, result: BattleResult, caught: Pokemon | None = None) -> None:
        self.phase = _RESULT_PHASES[result]

        if result == BattleResult.VICTORY:
            if self.trainer is not None:
                loot = self.loot.get_trainer_loot(self.trainer)
            else:
                loot = self.loot.get_wild_pokemon_loot(self.opponent_active.level)
            self.rewards.money += loot.money
            self.rewards.items.extend(loot.items)
            if loot.money:
                self._emit("reward", f"You got {loot.money} money for winning!", side=PLAYER)
            for item in loot.items:
                self._emit("reward", f"You found {item.name}!", side=PLAYER)
            self.difficulty.record_battle_result(True)
        elif result == BattleResult.DEFEAT:
            self.difficulty.record_battle_result(False)

        self._restore_party_order()
        for pokemon in (*self.player_party.members, *self.opponent_party.members):
            pokemon.reset_stat_stages()

        self.outcome = BattleOutcome(result=result, rewards=self.rewards.model_copy(deep=True), caught_pokemon=caught)
        logger.info("Battle ended after %d turns: %s", self.turn_number, result.value)

    def _restore_party_order(self) -> None:
        position = {id(p): i for i, p in enumerate(self._original_order)}
        self.player_party.members.sort(key=lambda p: position.get(id(p), len(position)))
