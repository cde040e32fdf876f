import logging

from .full_math import FullMathModule
from .liquidity_amounts import LiquidityAmountsModule
from .shared import (
    FEES_TO_TICK_SPACINGS,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    Q128,
    TICK_SPACINGS_TO_FEES,
    UINT_128_MAX,
    UINT_256_MAX,
    get_max_liquidity_per_tick,
)
from .sqrt_price_math import SqrtPriceMathModule
from .tick_math import TickMathModule

package_logger = logging.getLogger("amm_positions")
logger = package_logger.getChild("math")


class PositionMath:
    """
    Groups the fixed point math modules used by the ledger, the liquidity resolver and the simulated pool
    """

    MAX_SQRT_RATIO = MAX_SQRT_RATIO
    MIN_SQRT_RATIO = MIN_SQRT_RATIO

    MAX_TICK = MAX_TICK
    MIN_TICK = MIN_TICK

    UINT_128_MAX = UINT_128_MAX
    Q96 = Q96
    Q128 = Q128

    # Math Modules

    full_math = FullMathModule
    tick_math = TickMathModule
    sqrt_price_math = SqrtPriceMathModule
    liquidity_amounts = LiquidityAmountsModule

    get_max_liquidity_per_tick = staticmethod(get_max_liquidity_per_tick)

    @classmethod
    def get_fee_and_spacing(cls, init_kwargs: dict) -> tuple[int, int]:
        """
        Returns the fee and tick spacing for a given pool.  If no fee or tick spacing is provided, the default values
        of 3000 and 60 are returned.

        :param init_kwargs:
        :return:
        """
        provided_fee = init_kwargs.get("fee")
        provided_spacing = init_kwargs.get("tick_spacing")

        if provided_fee is None and provided_spacing is None:
            return 3000, 60

        if provided_fee is None and TICK_SPACINGS_TO_FEES.get(provided_spacing) is not None:
            return TICK_SPACINGS_TO_FEES[provided_spacing], provided_spacing

        if provided_spacing is None and FEES_TO_TICK_SPACINGS.get(provided_fee) is not None:
            return provided_fee, FEES_TO_TICK_SPACINGS[provided_fee]

        if provided_fee is not None and provided_spacing is not None:
            if FEES_TO_TICK_SPACINGS.get(provided_fee) != provided_spacing:
                logger.warning(
                    f"Tick spacing & Fee were both specified, but do not match typical values"
                    f"\tFee: {provided_fee}, Tick Spacing: {provided_spacing}"
                )
            return provided_fee, provided_spacing

        raise ValueError(
            "Nonstandard tick spacing or fee provided. Please provide a standard value, "
            "or both tick_spacing and fee when using nonstandard values"
        )


__all__ = [
    "PositionMath",
    "FullMathModule",
    "LiquidityAmountsModule",
    "SqrtPriceMathModule",
    "TickMathModule",
    "MAX_SQRT_RATIO",
    "MIN_SQRT_RATIO",
    "MAX_TICK",
    "MIN_TICK",
    "Q96",
    "Q128",
    "UINT_128_MAX",
    "UINT_256_MAX",
]
