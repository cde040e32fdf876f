import math

import pytest

from amm_positions.exceptions import TickMathRevert
from amm_positions.math import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, PositionMath

from ..utils import encode_sqrt_price


class TestTickSpacingToMaxLiquidityPerTick:
    def test_returns_correct_value_for_low_fee(self):
        assert PositionMath.get_max_liquidity_per_tick(10) == 1917569901783203986719870431555990

    def test_returns_correct_value_for_medium_fee(self):
        assert PositionMath.get_max_liquidity_per_tick(60) == 11505743598341114571880798222544994

    def test_returns_correct_value_for_high_fee(self):
        assert PositionMath.get_max_liquidity_per_tick(200) == 38350317471085141830651933667504588

    def test_returns_correct_value_for_full_range(self):
        assert PositionMath.get_max_liquidity_per_tick(887272) == 113427455640312821154458202477256070485

    def test_returns_correct_value_for_2302(self):
        assert PositionMath.get_max_liquidity_per_tick(2302) == 441351967472034323558203122479595605


class TestGetSqrtRatioAtTick:
    def test_raises_for_low_ticks(self):
        with pytest.raises(TickMathRevert):
            PositionMath.tick_math.get_sqrt_ratio_at_tick(MIN_TICK - 1)

    def test_raises_for_high_ticks(self):
        with pytest.raises(TickMathRevert):
            PositionMath.tick_math.get_sqrt_ratio_at_tick(MAX_TICK + 1)

    def test_min_tick(self):
        assert PositionMath.tick_math.get_sqrt_ratio_at_tick(MIN_TICK) == 4295128739

    def test_min_tick_plus_1(self):
        assert PositionMath.tick_math.get_sqrt_ratio_at_tick(MIN_TICK + 1) == 4295343490

    def test_max_tick_minus_1(self):
        assert (
            PositionMath.tick_math.get_sqrt_ratio_at_tick(MAX_TICK - 1)
            == 1461373636630004318706518188784493106690254656249
        )

    def test_max_tick(self):
        assert PositionMath.tick_math.get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    def test_tick_zero_is_one_for_one(self):
        assert PositionMath.tick_math.get_sqrt_ratio_at_tick(0) == 2**96

    def test_implementation(self):
        for tick in [50, 100, 250, 500, 1000, 2500, 3000, 4000, 5000, 50000, 150000, 250000, 500000, 738203]:
            lib_value = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick)
            python_value = math.sqrt(1.0001**tick) * 2**96
            assert abs(lib_value - python_value) / lib_value < 0.000001  # 1/100th of a bip

    def test_is_monotonic(self):
        ratios = [PositionMath.tick_math.get_sqrt_ratio_at_tick(tick) for tick in range(-1000, 1000, 7)]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)


class TestGetTickAtSqrtRatio:
    def test_raises_for_too_low(self):
        with pytest.raises(TickMathRevert):
            PositionMath.tick_math.get_tick_at_sqrt_ratio(MIN_SQRT_RATIO - 1)

    def test_raises_for_too_high(self):
        with pytest.raises(TickMathRevert):
            PositionMath.tick_math.get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)

    def test_ratio_of_min_tick(self):
        assert PositionMath.tick_math.get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK

    def test_ratio_of_min_tick_plus_1(self):
        assert PositionMath.tick_math.get_tick_at_sqrt_ratio(4295343490) == MIN_TICK + 1

    def test_ratio_of_max_tick_minus_1(self):
        assert (
            PositionMath.tick_math.get_tick_at_sqrt_ratio(1461373636630004318706518188784493106690254656249)
            == MAX_TICK - 1
        )

    def test_ratio_of_max_tick_closest_ratio(self):
        assert PositionMath.tick_math.get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    def test_ratio_of_one_tenth(self):
        assert PositionMath.tick_math.get_tick_at_sqrt_ratio(encode_sqrt_price(1, 10)) == -23028

    def test_implementation(self):
        for ratio in [
            MIN_SQRT_RATIO,
            encode_sqrt_price(10**12, 1),
            encode_sqrt_price(10**6, 1),
            encode_sqrt_price(1, 64),
            encode_sqrt_price(1, 8),
            encode_sqrt_price(1, 2),
            encode_sqrt_price(1, 1),
            encode_sqrt_price(2, 1),
            encode_sqrt_price(8, 1),
            encode_sqrt_price(64, 1),
            encode_sqrt_price(1, 10**6),
            encode_sqrt_price(1, 10**12),
            MAX_SQRT_RATIO - 1,
        ]:
            tick = PositionMath.tick_math.get_tick_at_sqrt_ratio(ratio)
            python_result = math.log((ratio / 2**96) ** 2, 1.0001)
            assert abs(tick - python_result) < 1.1

            tick_ratio = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick)
            tick_plus_one_ratio = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick + 1)
            assert tick_ratio <= ratio < tick_plus_one_ratio

    def test_round_trips_tick_boundaries(self):
        for tick in [-887220, -23028, -600, -1, 0, 1, 600, 23028, 887220]:
            sqrt_ratio = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick)
            assert PositionMath.tick_math.get_tick_at_sqrt_ratio(sqrt_ratio) == tick
