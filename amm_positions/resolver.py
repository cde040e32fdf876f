import logging

from amm_positions.exceptions import InvalidRange
from amm_positions.math import PositionMath

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("resolver")


class LiquidityResolver:
    """
    Translates a desired deposit of token_0 and token_1 into the largest liquidity amount that can be minted into
    a price range without requiring more of either token than was offered.
    """

    def __init__(self, math: type[PositionMath] = PositionMath):
        self.math = math

    def compute_liquidity(
        self,
        current_sqrt_price: int,
        sqrt_price_lower: int,
        sqrt_price_upper: int,
        amount_0_desired: int,
        amount_1_desired: int,
    ) -> int:
        """
        Computes the liquidity obtainable for the desired token amounts.

        * If the current price is at or below the lower bound, the range is entirely above the market and only
          token 0 is deposited
        * If the current price is at or above the upper bound, only token 1 is deposited
        * Otherwise the deposit is split between both tokens, and the tighter constraint wins

        :param current_sqrt_price: Current sqrt price of the pool as a Q64.96
        :param sqrt_price_lower: Sqrt price at the lower tick of the range
        :param sqrt_price_upper: Sqrt price at the upper tick of the range
        :param amount_0_desired: Maximum amount of token 0 to deposit
        :param amount_1_desired: Maximum amount of token 1 to deposit
        :return: liquidity
        """
        liquidity = self.math.liquidity_amounts.get_liquidity_for_amounts(
            current_sqrt_price,
            sqrt_price_lower,
            sqrt_price_upper,
            amount_0_desired,
            amount_1_desired,
        )
        logger.debug(
            f"Resolved liquidity {liquidity} for amounts ({amount_0_desired}, {amount_1_desired}) "
            f"at sqrt price {current_sqrt_price}"
        )
        return liquidity

    def liquidity_for_range(
        self,
        current_sqrt_price: int,
        tick_lower: int,
        tick_upper: int,
        amount_0_desired: int,
        amount_1_desired: int,
    ) -> int:
        """
        Computes the liquidity obtainable for a tick range.  Ticks are converted to sqrt prices with the same
        TickMath the pool uses.

        :raises InvalidRange: if tick_lower is not below tick_upper
        :raises TickMathRevert: if either tick is outside the valid tick bounds
        """
        if tick_lower >= tick_upper:
            raise InvalidRange(f"Lower tick {tick_lower} must be less than upper tick {tick_upper}")

        return self.compute_liquidity(
            current_sqrt_price,
            self.math.tick_math.get_sqrt_ratio_at_tick(tick_lower),
            self.math.tick_math.get_sqrt_ratio_at_tick(tick_upper),
            amount_0_desired,
            amount_1_desired,
        )

    def amounts_for_range(
        self,
        current_sqrt_price: int,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
    ) -> tuple[int, int]:
        """
        Returns the token amounts a liquidity amount represents in a tick range at the current price, rounded down

        :return: (amount_0, amount_1)
        """
        if tick_lower >= tick_upper:
            raise InvalidRange(f"Lower tick {tick_lower} must be less than upper tick {tick_upper}")

        return self.math.liquidity_amounts.get_amounts_for_liquidity(
            current_sqrt_price,
            self.math.tick_math.get_sqrt_ratio_at_tick(tick_lower),
            self.math.tick_math.get_sqrt_ratio_at_tick(tick_upper),
            liquidity,
        )
