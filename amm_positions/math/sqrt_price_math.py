from amm_positions.exceptions import TickMathRevert

from .full_math import FullMathModule
from .shared import MAX_SQRT_RATIO, MIN_SQRT_RATIO, Q96, SQRT_RESOLUTION


class SqrtPriceMathModule:
    """
    Math module for calculating token amounts between sqrt prices
    """

    full_math = FullMathModule

    @classmethod
    def sqrt_prices_in_bounds(cls, sqrt_price: int) -> bool:
        """
        Check if sqrt price is greater than min_sqrt_ratio and less than max_sqrt_ratio
        :param sqrt_price:
        :return:
        """
        if MIN_SQRT_RATIO <= sqrt_price <= MAX_SQRT_RATIO:
            return True
        return False

    @classmethod
    def get_amount_0_delta(
        cls,
        sqrt_ratio_a: int,
        sqrt_ratio_b: int,
        liquidity: int,
        round_up: bool,
    ) -> int:
        """
        Returns the amount of token 0 required to cover a position of size liquidity between the two sqrt prices.
        Computes liquidity / sqrt(lower) - liquidity / sqrt(upper)

        :param sqrt_ratio_a: A sqrt price, Q64.96
        :param sqrt_ratio_b: Another sqrt price, Q64.96
        :param liquidity: The amount of usable liquidity
        :param round_up: Whether to round the amount up or down

        :return: Amount of token 0
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        if sqrt_ratio_a <= 0:
            raise TickMathRevert("Sqrt Price input must be greater than zero")

        numerator_1 = liquidity << SQRT_RESOLUTION
        numerator_2 = sqrt_ratio_b - sqrt_ratio_a

        if round_up:
            return cls.full_math.div_rounding_up(
                cls.full_math.mul_div_rounding_up(numerator_1, numerator_2, sqrt_ratio_b),
                sqrt_ratio_a,
            )

        return cls.full_math.mul_div(numerator_1, numerator_2, sqrt_ratio_b) // sqrt_ratio_a

    @classmethod
    def get_amount_1_delta(
        cls,
        sqrt_ratio_a: int,
        sqrt_ratio_b: int,
        liquidity: int,
        round_up: bool,
    ) -> int:
        """
        Returns the amount of token 1 required to cover a position of size liquidity between the two sqrt prices.
        Computes liquidity * (sqrt(upper) - sqrt(lower))

        :param sqrt_ratio_a: A sqrt price, Q64.96
        :param sqrt_ratio_b: Another sqrt price, Q64.96
        :param liquidity: The amount of usable liquidity
        :param round_up: Whether to round the amount up or down

        :return: Amount of token 1
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        if round_up:
            return cls.full_math.mul_div_rounding_up(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)

        return cls.full_math.mul_div(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)

    @classmethod
    def get_signed_amount_0_delta(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity_delta: int) -> int:
        """
        Signed token 0 delta for a liquidity change.  Deposits round up, withdrawals round down and are
        returned as negative values.
        """
        if liquidity_delta < 0:
            return -cls.get_amount_0_delta(sqrt_ratio_a, sqrt_ratio_b, -liquidity_delta, False)
        return cls.get_amount_0_delta(sqrt_ratio_a, sqrt_ratio_b, liquidity_delta, True)

    @classmethod
    def get_signed_amount_1_delta(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity_delta: int) -> int:
        """Signed token 1 delta for a liquidity change"""
        if liquidity_delta < 0:
            return -cls.get_amount_1_delta(sqrt_ratio_a, sqrt_ratio_b, -liquidity_delta, False)
        return cls.get_amount_1_delta(sqrt_ratio_a, sqrt_ratio_b, liquidity_delta, True)
