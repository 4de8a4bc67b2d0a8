"""Tests for the battle state machine."""

import pytest

from pokebattle.core.battle import Battle, BattleAction, BattleActionType, BattlePhase, BattleResult
from pokebattle.core.difficulty import DifficultyProfile
from pokebattle.core.errors import BattleError, InvalidPhaseError
from pokebattle.core.moves import DamageClass, StatusEffect, Weather
from pokebattle.core.party import Party
from pokebattle.core.rng import RandomSource
from pokebattle.core.trainer import Trainer
from tests.conftest import make_move, make_pokemon, make_species


def _growl():
    return make_move("growl", power=None, accuracy=None, pp=40, damage_class=DamageClass.STATUS,
                     stat_changes={"atk": -1})


def _splash():
    return make_move("splash", power=None, accuracy=None, damage_class=DamageClass.STATUS)


def _mega_punch():
    return make_move("mega-punch", power=120, accuracy=None)


def _hero(moves=None, level=50):
    """Fast hard hitter."""
    return make_pokemon(make_species(name="hero", atk=100, spe=100), level=level, moves=moves or [_mega_punch()])


def _rat(moves=None, level=3, **kw):
    """Slow harmless target."""
    return make_pokemon(make_species(name="rat", spe=10, **kw), level=level, moves=moves or [_growl()])


@pytest.fixture
def battle():
    return Battle(rng=RandomSource(77))


class TestBattleStart:
    def test_wild_intro(self, battle):
        hero, rat = _hero(), _rat()
        events = battle.start_wild_battle(Party.of(hero), rat)
        assert [e.message for e in events] == ["A wild Rat appeared!", "Go! Hero!"]
        assert battle.phase == BattlePhase.PLAYER_TURN
        assert battle.player_active is hero
        assert battle.opponent_active is rat
        assert battle.log == events

    def test_trainer_intro(self, battle):
        trainer = Trainer(name="Joey", party=Party.of(_rat()))
        battle.start_trainer_battle(Party.of(_hero()), trainer)
        assert battle.messages == ["Joey wants to battle!", "Joey sent out Rat!", "Go! Hero!"]
        assert battle.is_trainer_battle

    def test_fainted_party_rejected(self, battle):
        hero = _hero()
        hero.take_damage(999)
        with pytest.raises(BattleError):
            battle.start_wild_battle(Party.of(hero), _rat())
        assert battle.phase is None
        assert battle.log == []

    def test_fainted_wild_rejected(self, battle):
        rat = _rat()
        rat.take_damage(999)
        with pytest.raises(BattleError):
            battle.start_wild_battle(Party.of(_hero()), rat)

    def test_same_pokemon_on_both_sides_rejected(self, battle):
        hero = _hero()
        with pytest.raises(BattleError):
            battle.start_wild_battle(Party.of(hero), hero)

    def test_one_battle_at_a_time(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        with pytest.raises(BattleError):
            battle.start_wild_battle(Party.of(_hero()), _rat())

    def test_new_battle_after_previous_ends(self, battle):
        party = Party.of(_hero())
        battle.start_wild_battle(party, _rat())
        battle.fight(0)
        assert battle.is_over
        battle.start_wild_battle(party, _rat())
        assert battle.phase == BattlePhase.PLAYER_TURN
        assert battle.turn_number == 0

    def test_stat_stages_reset_on_entry(self, battle):
        hero = _hero()
        hero.modify_stat_stage("atk", 3)
        battle.start_wild_battle(Party.of(hero), _rat())
        assert hero.stat_stages["atk"] == 0


class TestPhases:
    def test_actions_before_start(self):
        battle = Battle()
        with pytest.raises(InvalidPhaseError) as exc:
            battle.fight(0)
        assert "idle" in str(exc.value)
        with pytest.raises(InvalidPhaseError):
            battle.run()

    def test_actions_after_end(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        battle.fight(0)
        with pytest.raises(InvalidPhaseError):
            battle.fight(0)
        with pytest.raises(InvalidPhaseError):
            battle.switch(0)

    def test_take_action_dispatch(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        events = battle.take_action(BattleAction(action_type=BattleActionType.FIGHT, move_index=0))
        assert any(e.event_type == "faint" for e in events)


class TestFight:
    def test_victory_over_wild(self, battle):
        hero = _hero()
        before = hero.experience
        battle.start_wild_battle(Party.of(hero), _rat())
        battle.fight(0)

        assert battle.phase == BattlePhase.VICTORY
        assert battle.outcome.result == BattleResult.VICTORY
        assert "Wild Rat fainted!" in battle.messages
        # floor(100 * 3 / 7)
        assert battle.outcome.rewards.exp == 42
        assert hero.experience == before + 42
        assert battle.outcome.rewards.money == 0
        assert battle.difficulty.consecutive_wins == 1

    def test_invalid_slot_keeps_turn(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        events = battle.fight(3)
        assert [e.event_type for e in events] == ["invalid"]
        assert events[0].message == "No move in that slot!"
        assert battle.turn_number == 0
        assert battle.phase == BattlePhase.PLAYER_TURN

    def test_empty_move_keeps_turn(self, battle):
        hero = _hero(moves=[make_move(pp=5, current_pp=0), _mega_punch()])
        battle.start_wild_battle(Party.of(hero), _rat())
        events = battle.fight(0)
        assert events[0].message == "There's no PP left for this move!"
        assert battle.turn_number == 0

    def test_pp_spent(self, battle):
        hero = _hero(moves=[_splash()])
        battle.start_wild_battle(Party.of(hero), _rat())
        battle.fight(0)
        assert hero.moves[0].current_pp == hero.moves[0].pp - 1
        assert "But nothing happened!" in battle.messages

    def test_struggle_when_out_of_pp(self, battle):
        hero = _hero(moves=[make_move(pp=1, current_pp=0)])
        battle.start_wild_battle(Party.of(hero), _rat())
        battle.fight(0)
        assert "Hero has no moves left!" in battle.messages
        assert "Hero used Struggle!" in battle.messages
        assert "Hero is damaged by recoil!" in battle.messages
        # A quarter of the 16 HP dealt
        assert hero.current_hp == hero.max_hp - 4

    def test_immune_target(self, battle):
        spook = make_pokemon(make_species(name="spook", types=("ghost",), spe=10), moves=[_growl()])
        battle.start_wild_battle(Party.of(_hero()), spook)
        battle.fight(0)
        assert "It doesn't affect Spook..." in battle.messages
        assert spook.current_hp == spook.max_hp

    def test_drain_heals_attacker(self, battle):
        drain = make_move("giga-drain", "grass", 75, None, 10, DamageClass.SPECIAL, drain_percent=50)
        hero = _hero(moves=[drain])
        tank = make_pokemon(make_species(name="tank", hp=255, spd=255, spe=10), moves=[_growl()])
        hero.take_damage(50)
        hp_before = hero.current_hp
        battle.start_wild_battle(Party.of(hero), tank)
        battle.fight(0)
        assert "Wild Tank had its energy drained!" in battle.messages
        assert hero.current_hp > hp_before

    def test_status_move(self, battle):
        wave = make_move("thunder-wave", "electric", None, None, 20, DamageClass.STATUS,
                         status_effect=StatusEffect.PARALYSIS)
        rat = _rat()
        battle.start_wild_battle(Party.of(_hero(moves=[wave])), rat)
        battle.fight(0)
        assert "Wild Rat was paralyzed!" in battle.messages
        assert rat.status == StatusEffect.PARALYSIS

    def test_status_move_fails_on_immune_type(self, battle):
        wave = make_move("thunder-wave", "electric", None, None, 20, DamageClass.STATUS,
                         status_effect=StatusEffect.PARALYSIS)
        zap = make_pokemon(make_species(name="zap", types=("electric",), spe=10), level=3, moves=[_growl()])
        battle.start_wild_battle(Party.of(_hero(moves=[wave])), zap)
        battle.fight(0)
        assert "But it failed!" in battle.messages
        assert zap.status == StatusEffect.NONE

    def test_stat_change_messages(self, battle):
        battle.start_wild_battle(Party.of(_hero(moves=[_splash()])), _rat())
        battle.fight(0)
        assert "Hero's Attack fell!" in battle.messages
        assert battle.player_active.stat_stages["atk"] == -1

    def test_burn_ticks_at_end_of_turn(self, battle):
        rat = _rat()
        battle.start_wild_battle(Party.of(_hero(moves=[_splash()])), rat)
        rat.apply_status(StatusEffect.BURN)
        battle.fight(0)
        assert "Wild Rat is hurt by its burn!" in battle.messages
        assert rat.current_hp == rat.max_hp - rat.max_hp // 16


    def test_both_sides_tick_in_speed_order(self, battle):
        hero, rat = _hero(moves=[_splash()]), _rat()
        battle.start_wild_battle(Party.of(hero), rat)
        hero.apply_status(StatusEffect.BURN)
        rat.apply_status(StatusEffect.POISON)
        battle.fight(0)
        ticks = [m for m in battle.messages if "is hurt by" in m]
        assert ticks == ["Hero is hurt by its burn!", "Wild Rat is hurt by poison!"]
        assert hero.current_hp == hero.max_hp - hero.max_hp // 16

    def test_slower_player_ticks_second(self, battle):
        rat, foe = _rat(moves=[_splash()]), _hero(moves=[_splash()])
        battle.start_wild_battle(Party.of(rat), foe)
        rat.apply_status(StatusEffect.BURN)
        foe.apply_status(StatusEffect.POISON)
        battle.fight(0)
        ticks = [m for m in battle.messages if "is hurt by" in m]
        assert ticks == ["Wild Hero is hurt by poison!", "Rat is hurt by its burn!"]

    def test_sleep_blocks_action(self, battle):
        hero, rat = _hero(), _rat()
        battle.start_wild_battle(Party.of(hero), rat)
        hero.apply_status(StatusEffect.SLEEP)
        battle.fight(0)
        assert "Hero is fast asleep." in battle.messages
        assert "Hero used Mega Punch!" not in battle.messages
        assert "Wild Rat used Growl!" in battle.messages
        assert rat.current_hp == rat.max_hp
        assert hero.moves[0].current_pp == hero.moves[0].pp

    @pytest.mark.parametrize(
        "status,message",
        [(StatusEffect.FREEZE, "Hero is frozen solid!"), (StatusEffect.PARALYSIS, "Hero is paralyzed! It can't move!")],
    )
    def test_status_can_block_action(self, status, message):
        for seed in range(60):
            hero, rat = _hero(), _rat()
            battle = Battle(rng=RandomSource(seed))
            battle.start_wild_battle(Party.of(hero), rat)
            hero.apply_status(status)
            battle.fight(0)
            if message in battle.messages:
                break
        assert message in battle.messages
        assert "Hero used Mega Punch!" not in battle.messages
        assert rat.current_hp == rat.max_hp

class TestDefeatAndSwitching:
    def test_single_member_whiteout_is_defeat(self, battle):
        rat = _rat()
        battle.start_wild_battle(Party.of(rat), _hero())
        battle.fight(0)

        assert battle.phase == BattlePhase.DEFEAT
        assert battle.outcome.result == BattleResult.DEFEAT
        assert "Rat fainted!" in battle.messages
        assert "You are out of usable Pokemon!" in battle.messages
        assert "Choose a Pokemon!" not in battle.messages
        assert battle.difficulty.consecutive_losses == 1
        assert battle.outcome.rewards.exp == 0

    def test_forced_switch(self, battle):
        rat = _rat()
        ace = make_pokemon(make_species(name="ace", spe=200), moves=[_mega_punch()])
        party = Party(members=[rat, ace])
        battle.start_wild_battle(party, _hero())

        battle.fight(0)
        assert battle.phase == BattlePhase.SWITCH
        assert battle.messages[-1] == "Choose a Pokemon!"
        with pytest.raises(InvalidPhaseError):
            battle.fight(0)

        events = battle.switch(0)
        assert events[0].message == "Can't switch to that Pokemon!"

        events = battle.switch(1)
        assert events[-1].message == "Go! Ace!"
        assert battle.player_active is ace
        assert battle.phase == BattlePhase.PLAYER_TURN
        assert battle.turn_number == 1

        battle.run()
        assert battle.outcome.result == BattleResult.RUN
        assert party.members == [rat, ace]
        assert battle.difficulty.consecutive_losses == 0

    def test_voluntary_switch_consumes_turn(self, battle):
        hero = _hero(moves=[_splash()])
        ace = make_pokemon(make_species(name="ace"), moves=[_mega_punch()])
        party = Party(members=[hero, ace])
        battle.start_wild_battle(party, _rat())
        hero.modify_stat_stage("spe", 2)

        battle.switch(1)
        assert "Hero, come back!" in battle.messages
        assert "Wild Rat used Growl!" in battle.messages
        assert battle.turn_number == 1
        assert party.members[0] is ace
        assert hero.stat_stages["spe"] == 0

    def test_experience_shared_between_participants(self, battle):
        hero = _hero(moves=[_splash()])
        ace = make_pokemon(make_species(name="ace"), moves=[_mega_punch()])
        party = Party(members=[hero, ace])
        hero_exp, ace_exp = hero.experience, ace.experience
        battle.start_wild_battle(party, make_pokemon(make_species(name="tank", spe=10), level=10, moves=[_growl()]))

        battle.fight(0)
        battle.switch(1)
        battle.fight(0)

        assert battle.outcome.result == BattleResult.VICTORY
        assert hero.experience > hero_exp
        assert ace.experience > ace_exp
        assert "Hero gained" in " ".join(battle.messages)
        assert party.members[0] is hero
        assert battle.outcome.rewards.exp == (hero.experience - hero_exp) + (ace.experience - ace_exp)


class TestRun:
    def test_run_chance_formula(self, battle):
        rat, hero = _rat(), _hero()
        battle.start_wild_battle(Party.of(rat), hero)
        rat.stats["spe"], hero.stats["spe"] = 50, 100
        assert battle.run_chance() == pytest.approx((50 * 128 / 100 + 30) / 256)

    def test_run_success_rate(self):
        rng = RandomSource(5)
        rat, foe = _rat(), _rat(moves=[_growl()])
        rat.stats["spe"], foe.stats["spe"] = 50, 100
        party = Party.of(rat)
        trials = 3000
        escaped = 0
        for _ in range(trials):
            foe.restore_pp()
            battle = Battle(rng=rng)
            battle.start_wild_battle(party, foe)
            battle.run()
            escaped += battle.outcome is not None and battle.outcome.result == BattleResult.RUN
        assert escaped / trials == pytest.approx(0.3766, abs=0.03)

    def test_failed_run_gives_free_turn(self):
        rat, foe = _rat(), _rat(moves=[_growl()])
        rat.stats["spe"], foe.stats["spe"] = 1, 10000
        # Escape never drops below 30/256, so look for a seed that fails
        for seed in range(50):
            battle = Battle(rng=RandomSource(seed))
            battle.start_wild_battle(Party.of(rat), foe)
            battle.run()
            if not battle.is_over:
                break
        assert "Can't escape!" in battle.messages
        assert "Wild Rat used Growl!" in battle.messages
        assert battle.phase == BattlePhase.PLAYER_TURN

    def test_cannot_run_from_trainer(self, battle):
        battle.start_trainer_battle(Party.of(_hero()), Trainer(name="Joey", party=Party.of(_rat())))
        events = battle.take_action(BattleAction(action_type=BattleActionType.RUN))
        assert events[0].message == "Can't run from a trainer battle!"
        assert battle.turn_number == 0


class TestTrainerBattle:
    def test_gym_leader_victory(self, battle):
        trainer = Trainer(
            name="Falkner",
            party=Party(members=[_rat(level=3), make_pokemon(make_species(name="bird", spe=10), level=4,
                                                                 moves=[_growl()])]),
            is_gym_leader=True,
        )
        battle.start_trainer_battle(Party.of(_hero()), trainer)

        battle.fight(0)
        assert "Foe Rat fainted!" in battle.messages
        assert "Falkner sent out Bird!" in battle.messages
        assert battle.phase == BattlePhase.PLAYER_TURN

        battle.fight(0)
        assert "Falkner was defeated!" in battle.messages
        rewards = battle.outcome.rewards
        # 500 * level 4 with 90-110% variance
        assert 1800 <= rewards.money <= 2200
        assert len(rewards.items) == 3
        assert any(m.startswith("You got") for m in battle.messages)

    def test_ball_blocked(self, battle):
        battle.start_trainer_battle(Party.of(_hero()), Trainer(name="Joey", party=Party.of(_rat())))
        events = battle.throw_ball("masterball")
        assert events[0].event_type == "invalid"
        assert battle.turn_number == 0


class TestCatch:
    def test_master_ball(self, battle):
        rat = _rat()
        party = Party.of(_hero())
        battle.start_wild_battle(party, rat)
        battle.throw_ball("masterball")

        assert battle.phase == BattlePhase.CATCH
        assert battle.outcome.result == BattleResult.CAUGHT
        assert battle.outcome.caught_pokemon is rat
        assert party.size == 2
        assert party.members[1] is rat
        assert "Gotcha! Rat was caught!" in battle.messages

    def test_full_party_still_catches(self, battle):
        party = Party(members=[_hero() for _ in range(6)])
        battle.start_wild_battle(party, _rat())
        battle.throw_ball("masterball")
        assert battle.outcome.result == BattleResult.CAUGHT
        assert party.size == 6
        assert "Rat was added to your party." not in battle.messages

    def test_not_a_ball(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        events = battle.throw_ball("potion")
        assert events[0].message == "Potion is not a Poke Ball!"

    def test_catch_does_not_record_result(self):
        profile = DifficultyProfile()
        battle = Battle(difficulty=profile, rng=RandomSource(1))
        battle.start_wild_battle(Party.of(_hero()), _rat())
        battle.throw_ball("masterball")
        assert profile.consecutive_wins == 0
        assert profile.consecutive_losses == 0


class TestItems:
    def test_potion(self, battle):
        hero = _hero()
        hero.take_damage(30)
        battle.start_wild_battle(Party.of(hero), _rat())
        battle.use_item("potion")
        assert "Used Potion!" in battle.messages
        assert "Hero's HP was restored by 20." in battle.messages
        assert "Wild Rat used Growl!" in battle.messages
        assert battle.turn_number == 1

    def test_no_effect_keeps_turn(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        events = battle.use_item("potion")
        assert events[0].message == "It won't have any effect."
        assert battle.turn_number == 0

    def test_revive_bench_member(self, battle):
        ace = make_pokemon(make_species(name="ace"))
        ace.take_damage(999)
        battle.start_wild_battle(Party(members=[_hero(), ace]), _rat())
        battle.use_item("revive", 1)
        assert "Ace was revived!" in battle.messages
        assert ace.current_hp == ace.max_hp // 2

    def test_revive_ahead_of_active_keeps_lead(self, battle):
        ace = make_pokemon(make_species(name="ace"))
        ace.take_damage(999)
        hero = _hero()
        party = Party(members=[ace, hero])
        battle.start_wild_battle(party, _rat())
        assert battle.player_active is hero

        battle.use_item("revive", 0)
        assert not ace.is_fainted
        assert party.get_lead_pokemon() is battle.player_active
        assert party.members[0] is hero

        battle.fight(0)
        assert battle.outcome.result == BattleResult.VICTORY
        assert party.members[0] is ace

    def test_non_battle_item(self, battle):
        battle.start_wild_battle(Party.of(_hero()), _rat())
        events = battle.use_item("nugget")
        assert events[0].event_type == "invalid"
        assert battle.turn_number == 0


class TestWeather:
    def test_weather_move_expires(self, battle):
        sunny = make_move("sunny-day", "fire", None, None, 5, DamageClass.STATUS, weather=Weather.SUN)
        battle.start_wild_battle(Party.of(_hero(moves=[sunny, _splash()])), _rat())

        battle.fight(0)
        assert battle.weather == Weather.SUN
        for _ in range(3):
            battle.fight(1)
        assert battle.weather == Weather.SUN
        battle.fight(1)
        assert battle.weather == Weather.CLEAR
        assert "The sunlight faded." in battle.messages

    def test_same_weather_fails(self, battle):
        sunny = make_move("sunny-day", "fire", None, None, 5, DamageClass.STATUS, weather=Weather.SUN)
        battle.start_wild_battle(Party.of(_hero(moves=[sunny])), _rat(), weather=Weather.SUN)
        battle.fight(0)
        assert "But it failed!" in battle.messages

    def test_starting_weather_is_permanent(self, battle):
        battle.start_wild_battle(Party.of(_hero(moves=[_splash()])), _rat(), weather=Weather.RAIN)
        for _ in range(8):
            battle.fight(0)
        assert battle.weather == Weather.RAIN
