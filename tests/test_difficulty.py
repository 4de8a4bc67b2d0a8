"""Tests for difficulty presets and adaptive scaling."""

import pytest

from pokebattle.core.difficulty import PRESETS, Difficulty, DifficultyProfile, parse_difficulty
from pokebattle.core.errors import InvalidDataError, InvalidDifficultyError, PokeBattleError
from pokebattle.core.rng import RandomSource


class TestPresets:
    def test_four_presets(self):
        assert set(PRESETS) == set(Difficulty)

    def test_default_is_normal(self):
        profile = DifficultyProfile()
        assert profile.difficulty == Difficulty.NORMAL
        assert profile.modifiers.enemy_level_mod == 1.0

    @pytest.mark.parametrize(
        "name,level,catch,aggression",
        [("easy", 0.8, 1.3, 0.3), ("normal", 1.0, 1.0, 0.5), ("hard", 1.2, 0.8, 0.7), ("challenge", 1.3, 0.6, 0.9)],
    )
    def test_values(self, name, level, catch, aggression):
        mods = DifficultyProfile(difficulty=name).modifiers
        assert mods.enemy_level_mod == level
        assert mods.catch_rate_mod == catch
        assert mods.ai_aggression == aggression

    def test_case_insensitive(self):
        assert parse_difficulty("HARD") == Difficulty.HARD

    def test_unknown_preset_rejected(self):
        with pytest.raises(InvalidDifficultyError):
            DifficultyProfile(difficulty="nightmare")
        with pytest.raises(InvalidDifficultyError):
            DifficultyProfile().set_difficulty("nightmare")

    def test_profiles_do_not_share_modifiers(self):
        a = DifficultyProfile(adaptive_enabled=True)
        for _ in range(3):
            a.record_battle_result(False)
        assert DifficultyProfile().modifiers.enemy_level_mod == 1.0
        assert PRESETS[Difficulty.NORMAL].enemy_level_mod == 1.0

    def test_set_difficulty_replaces_modifiers(self):
        profile = DifficultyProfile()
        profile.set_difficulty("easy")
        assert profile.difficulty == Difficulty.EASY
        assert profile.modifiers.exp_mod == 1.5

    def test_nuzlocke(self):
        assert DifficultyProfile(difficulty="challenge").is_nuzlocke_mode()
        assert not DifficultyProfile().is_nuzlocke_mode()


class TestAdaptive:
    def test_loss_streak_eases(self):
        profile = DifficultyProfile(adaptive_enabled=True)
        for _ in range(3):
            profile.record_battle_result(False)
        assert profile.modifiers.enemy_level_mod == pytest.approx(0.95)
        assert profile.modifiers.enemy_stat_mod == pytest.approx(0.95)
        assert profile.modifiers.catch_rate_mod == pytest.approx(1.1)
        assert profile.player_deaths == 3

    def test_two_losses_change_nothing(self):
        profile = DifficultyProfile(adaptive_enabled=True)
        profile.record_battle_result(False)
        profile.record_battle_result(False)
        assert profile.modifiers.enemy_level_mod == 1.0

    def test_win_streak_pushes(self):
        profile = DifficultyProfile(adaptive_enabled=True)
        for _ in range(5):
            profile.record_battle_result(True)
        assert profile.modifiers.enemy_level_mod == pytest.approx(1.02)
        assert profile.modifiers.catch_rate_mod == 1.0

    def test_win_resets_loss_streak(self):
        profile = DifficultyProfile(adaptive_enabled=True)
        profile.record_battle_result(False)
        profile.record_battle_result(False)
        profile.record_battle_result(True)
        assert profile.consecutive_losses == 0
        assert profile.consecutive_wins == 1

    def test_disabled_tracks_but_does_not_adjust(self):
        profile = DifficultyProfile()
        for _ in range(5):
            profile.record_battle_result(False)
        assert profile.consecutive_losses == 5
        assert profile.modifiers.enemy_level_mod == 1.0

    def test_clamped(self):
        profile = DifficultyProfile(adaptive_enabled=True)
        for _ in range(200):
            profile.record_battle_result(False)
        assert profile.modifiers.enemy_level_mod == 0.5
        assert profile.modifiers.enemy_stat_mod == 0.5
        assert profile.modifiers.catch_rate_mod == 2.0

        for _ in range(500):
            profile.record_battle_result(True)
        assert profile.modifiers.enemy_level_mod == 2.0

    def test_reset_tracking(self):
        profile = DifficultyProfile()
        profile.record_battle_result(True)
        profile.reset_tracking()
        assert profile.consecutive_wins == 0


class TestScaling:
    def test_enemy_level_range(self):
        profile = DifficultyProfile()
        levels = {profile.get_enemy_level(10, 20, RandomSource(s)) for s in range(200)}
        # base = 10 + floor(10 * 0.2) = 12, variance -1..+2
        assert levels == {11, 12, 13, 14}

    def test_enemy_level_scaled(self):
        profile = DifficultyProfile(difficulty="hard")
        levels = {profile.get_enemy_level(10, 10, RandomSource(s)) for s in range(200)}
        assert min(levels) == 11
        assert max(levels) == 14

    def test_enemy_level_clamped(self):
        profile = DifficultyProfile(difficulty="challenge")
        assert all(profile.get_enemy_level(100, 100, RandomSource(s)) == 100 for s in range(20))
        easy = DifficultyProfile(difficulty="easy")
        assert all(easy.get_enemy_level(1, 1, RandomSource(s)) >= 1 for s in range(20))

    def test_rewards(self):
        profile = DifficultyProfile(difficulty="easy")
        assert profile.get_exp_reward(101) == 151
        assert profile.get_money_reward(100) == 150
        assert profile.get_item_drop_rate(0.1) == pytest.approx(0.13)

    def test_catch_rate_capped(self):
        profile = DifficultyProfile(difficulty="easy")
        assert profile.get_catch_rate(45) == 58
        assert profile.get_catch_rate(255) == 255


class TestSerialization:
    def test_round_trip(self):
        profile = DifficultyProfile(difficulty="hard", adaptive_enabled=True)
        for _ in range(3):
            profile.record_battle_result(False)
        restored = DifficultyProfile.from_dict(profile.to_dict())
        assert restored == profile
        assert restored.to_dict()["difficulty"] == "hard"

    def test_corrupt_save_rejected(self):
        data = DifficultyProfile().to_dict()
        data["consecutive_wins"] = -3
        with pytest.raises(InvalidDataError):
            DifficultyProfile.from_dict(data)
        data = DifficultyProfile().to_dict()
        data["difficulty"] = "nightmare"
        with pytest.raises(PokeBattleError):
            DifficultyProfile.from_dict(data)

    def test_summary(self):
        summary = DifficultyProfile(difficulty="easy").summary()
        assert summary["difficulty"] == "easy"
        assert summary["exp_mod"] == 1.5
