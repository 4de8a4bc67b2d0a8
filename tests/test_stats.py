"""Tests for stat, nature and experience curve math."""

import pytest

from pokebattle.core.rng import RandomSource
from pokebattle.core.stats import (
    STAT_NAMES,
    GrowthRate,
    PokemonNature,
    calculate_all_stats,
    compute_stat,
    experience_for_level,
    get_nature_multiplier,
    get_stat_stage_multiplier,
    level_for_experience,
    random_ivs,
)


class TestComputeStat:
    def test_hp_formula(self):
        # floor((90 + 31) * 5 / 100) + 5 + 10
        assert compute_stat("hp", 45, 5, 31, 0) == 21

    def test_non_hp_formula(self):
        # floor((200 + 31 + 63) * 100 / 100) + 5
        assert compute_stat("atk", 100, 100, 31, 252) == 299

    def test_nature_boost_floors(self):
        assert compute_stat("atk", 100, 100, 31, 252, 1.1) == 328
        assert compute_stat("atk", 100, 100, 31, 252, 0.9) == 269

    def test_ev_quarter_is_floored(self):
        assert compute_stat("spe", 80, 100, 0, 3) == compute_stat("spe", 80, 100, 0, 0)
        assert compute_stat("spe", 80, 100, 0, 4) == compute_stat("spe", 80, 100, 0, 0) + 1

    def test_level_one(self):
        assert compute_stat("hp", 1, 1, 0, 0) == 11
        assert compute_stat("def", 1, 1, 0, 0) == 5

    def test_calculate_all_stats_applies_nature(self):
        base = {stat: 100 for stat in STAT_NAMES}
        ivs = {stat: 31 for stat in STAT_NAMES}
        evs = {stat: 0 for stat in STAT_NAMES}
        stats = calculate_all_stats(base, 50, ivs, evs, PokemonNature.ADAMANT)
        neutral = calculate_all_stats(base, 50, ivs, evs, PokemonNature.HARDY)
        assert stats["atk"] > neutral["atk"]
        assert stats["spa"] < neutral["spa"]
        assert stats["hp"] == neutral["hp"]
        assert stats["spe"] == neutral["spe"]


class TestNatures:
    def test_twenty_five_natures(self):
        assert len(PokemonNature) == 25

    @pytest.mark.parametrize("nature", ["hardy", "docile", "serious", "bashful", "quirky"])
    def test_neutral_natures(self, nature):
        assert all(get_nature_multiplier(nature, stat) == 1.0 for stat in STAT_NAMES)

    def test_boost_and_drop(self):
        assert get_nature_multiplier("modest", "spa") == 1.1
        assert get_nature_multiplier("modest", "atk") == 0.9
        assert get_nature_multiplier("modest", "hp") == 1.0


class TestExperienceCurves:
    def test_level_one_needs_nothing(self):
        for rate in GrowthRate:
            assert experience_for_level(1, rate) == 0

    @pytest.mark.parametrize(
        "rate,expected",
        [
            (GrowthRate.MEDIUM_FAST, 1000),
            (GrowthRate.SLOW, 1250),
            (GrowthRate.FAST, 800),
            (GrowthRate.MEDIUM_SLOW, 560),
        ],
    )
    def test_level_ten(self, rate, expected):
        assert experience_for_level(10, rate) == expected

    def test_curves_are_monotonic(self):
        for rate in GrowthRate:
            totals = [experience_for_level(level, rate) for level in range(1, 101)]
            assert totals == sorted(totals)

    def test_level_for_experience(self):
        assert level_for_experience(999) == 9
        assert level_for_experience(1000) == 10
        assert level_for_experience(10**9) == 100


class TestStatStages:
    @pytest.mark.parametrize(
        "stage,expected",
        [(0, 1.0), (1, 1.5), (2, 2.0), (6, 4.0), (-1, 2 / 3), (-2, 0.5), (-6, 0.25)],
    )
    def test_multipliers(self, stage, expected):
        assert get_stat_stage_multiplier(stage) == pytest.approx(expected)

    def test_clamped(self):
        assert get_stat_stage_multiplier(9) == 4.0
        assert get_stat_stage_multiplier(-9) == 0.25


def test_random_ivs_in_range():
    ivs = random_ivs(RandomSource(3))
    assert set(ivs) == set(STAT_NAMES)
    assert all(0 <= iv <= 31 for iv in ivs.values())
