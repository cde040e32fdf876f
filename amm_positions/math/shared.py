MAX_TICK = 887272
MIN_TICK = -MAX_TICK
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342
MIN_SQRT_RATIO = 4295128739
SQRT_RESOLUTION = 96
Q96 = 0x1000000000000000000000000
Q128 = 0x100000000000000000000000000000000
UINT_80_MAX = 2**80 - 1
UINT_128_MAX = 2**128 - 1
UINT_256_MAX = 2**256 - 1

FEES_TO_TICK_SPACINGS = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

TICK_SPACINGS_TO_FEES = {v: k for k, v in FEES_TO_TICK_SPACINGS.items()}


def get_max_liquidity_per_tick(tick_spacing: int) -> int:
    """
    Returns the maximum liquidity per tick.  This is calculated by dividing the UINT_128_MAX by the number of ticks
    that can exist in the range of ticks for a given tick spacing.

    :param tick_spacing:
    :return:
    """
    max_tick = MAX_TICK - MAX_TICK % tick_spacing
    number_of_ticks = (max_tick * 2) // tick_spacing + 1
    return UINT_128_MAX // number_of_ticks
