from amm_positions.exceptions import MathOverflow

from .full_math import FullMathModule
from .shared import Q96, SQRT_RESOLUTION, UINT_128_MAX


class LiquidityAmountsModule:
    """
    Converts between token amounts and liquidity for a price range.  Every division rounds toward zero, so the
    liquidity returned for a pair of amounts never requires more tokens than were supplied.
    """

    full_math = FullMathModule

    @classmethod
    def to_uint_128(cls, value: int) -> int:
        """Downcasts to a uint128, raising if the value does not fit"""
        if value > UINT_128_MAX:
            raise MathOverflow(f"Liquidity {value} overflows UINT128")
        return value

    @classmethod
    def get_liquidity_for_amount_0(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, amount_0: int) -> int:
        """
        Computes the amount of liquidity received for a given amount of token 0 and price range.
        Calculates amount_0 * (sqrt(upper) * sqrt(lower)) / (sqrt(upper) - sqrt(lower))

        :param sqrt_ratio_a: A sqrt price representing the first tick boundary
        :param sqrt_ratio_b: A sqrt price representing the second tick boundary
        :param amount_0: The amount of token 0 being sent in
        :return: The amount of liquidity received
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        intermediate = cls.full_math.mul_div(sqrt_ratio_a, sqrt_ratio_b, Q96)
        return cls.to_uint_128(cls.full_math.mul_div(amount_0, intermediate, sqrt_ratio_b - sqrt_ratio_a))

    @classmethod
    def get_liquidity_for_amount_1(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, amount_1: int) -> int:
        """
        Computes the amount of liquidity received for a given amount of token 1 and price range.
        Calculates amount_1 / (sqrt(upper) - sqrt(lower))

        :param sqrt_ratio_a: A sqrt price representing the first tick boundary
        :param sqrt_ratio_b: A sqrt price representing the second tick boundary
        :param amount_1: The amount of token 1 being sent in
        :return: The amount of liquidity received
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        return cls.to_uint_128(cls.full_math.mul_div(amount_1, Q96, sqrt_ratio_b - sqrt_ratio_a))

    @classmethod
    def get_liquidity_for_amounts(
        cls,
        sqrt_ratio: int,
        sqrt_ratio_a: int,
        sqrt_ratio_b: int,
        amount_0: int,
        amount_1: int,
    ) -> int:
        """
        Computes the maximum amount of liquidity received for a given amount of token 0, token 1, the current
        pool price and the prices at the tick boundaries.

        * If the current price is at or below the range, only token 0 bounds the liquidity
        * If the current price is at or above the range, only token 1 bounds the liquidity
        * Inside the range, the deposit is split between both tokens and the tighter bound wins

        :param sqrt_ratio: Current pool sqrt price
        :param sqrt_ratio_a: A sqrt price representing the first tick boundary
        :param sqrt_ratio_b: A sqrt price representing the second tick boundary
        :param amount_0: The amount of token 0 being sent in
        :param amount_1: The amount of token 1 being sent in
        :return: The maximum amount of liquidity received
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        if sqrt_ratio <= sqrt_ratio_a:
            return cls.get_liquidity_for_amount_0(sqrt_ratio_a, sqrt_ratio_b, amount_0)

        if sqrt_ratio < sqrt_ratio_b:
            liquidity_0 = cls.get_liquidity_for_amount_0(sqrt_ratio, sqrt_ratio_b, amount_0)
            liquidity_1 = cls.get_liquidity_for_amount_1(sqrt_ratio_a, sqrt_ratio, amount_1)
            return min(liquidity_0, liquidity_1)

        return cls.get_liquidity_for_amount_1(sqrt_ratio_a, sqrt_ratio_b, amount_1)

    @classmethod
    def get_amount_0_for_liquidity(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int) -> int:
        """Computes the amount of token 0 for a given amount of liquidity and a price range, rounded down"""
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        return (
            cls.full_math.mul_div(liquidity << SQRT_RESOLUTION, sqrt_ratio_b - sqrt_ratio_a, sqrt_ratio_b)
            // sqrt_ratio_a
        )

    @classmethod
    def get_amount_1_for_liquidity(cls, sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int) -> int:
        """Computes the amount of token 1 for a given amount of liquidity and a price range, rounded down"""
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        return cls.full_math.mul_div(liquidity, sqrt_ratio_b - sqrt_ratio_a, Q96)

    @classmethod
    def get_amounts_for_liquidity(
        cls,
        sqrt_ratio: int,
        sqrt_ratio_a: int,
        sqrt_ratio_b: int,
        liquidity: int,
    ) -> tuple[int, int]:
        """
        Computes the token 0 and token 1 value for a given amount of liquidity, the current pool price and the
        prices at the tick boundaries

        :return: (amount_0, amount_1)
        """
        if sqrt_ratio_a > sqrt_ratio_b:
            sqrt_ratio_a, sqrt_ratio_b = sqrt_ratio_b, sqrt_ratio_a

        if sqrt_ratio <= sqrt_ratio_a:
            return cls.get_amount_0_for_liquidity(sqrt_ratio_a, sqrt_ratio_b, liquidity), 0

        if sqrt_ratio < sqrt_ratio_b:
            return (
                cls.get_amount_0_for_liquidity(sqrt_ratio, sqrt_ratio_b, liquidity),
                cls.get_amount_1_for_liquidity(sqrt_ratio_a, sqrt_ratio, liquidity),
            )

        return 0, cls.get_amount_1_for_liquidity(sqrt_ratio_a, sqrt_ratio_b, liquidity)
