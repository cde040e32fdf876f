from amm_positions.exceptions import TickMathRevert

from .shared import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, UINT_256_MAX

# (tick bit, Q128.128 multiplier) pairs.  Each multiplier is 1 / sqrt(1.0001) ** bit
_RATIO_MULTIPLIERS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)

LOG_SQRT_10001_MULTIPLIER = 255738958999603826347141
TICK_LOW_ERROR = 3402992956809132418596140100660247210
TICK_HIGH_ERROR = 291339464771989622907027621153398088495


class TickMathModule:
    """
    Module for computing sqrt prices & ticks for Uniswap V3 Pools.

    Both conversions are integer-exact reproductions of the pool's TickMath library, so that liquidity computed
    off-pool agrees with the pool's own rounding.
    """

    MAX_TICK = MAX_TICK
    MIN_TICK = MIN_TICK
    MAX_SQRT_RATIO = MAX_SQRT_RATIO
    MIN_SQRT_RATIO = MIN_SQRT_RATIO

    @classmethod
    def get_sqrt_ratio_at_tick(cls, tick: int) -> int:
        """
        Returns the sqrt ratio as a Q64.96 fixed point number corresponding to the given tick.
        Computes the following formula: sqrt(1.0001^tick) * 2^96

        :param int tick: Tick to get sqrt ratio at.
        :return: sqrt_ratio encoded as a Q64.96 fixed point number
        """
        if tick > MAX_TICK or tick < MIN_TICK:
            raise TickMathRevert(f"Tick outside of min/max bounds.  Tick: {tick}")

        abs_tick = abs(tick)
        ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 0x100000000000000000000000000000000

        for tick_bit, multiplier in _RATIO_MULTIPLIERS:
            if abs_tick & tick_bit:
                ratio = (ratio * multiplier) >> 128

        if tick > 0:
            ratio = UINT_256_MAX // ratio

        # Q128.128 -> Q64.96, rounding up so get_tick_at_sqrt_ratio is consistent with this result
        return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)

    @classmethod
    def get_tick_at_sqrt_ratio(cls, sqrt_ratio: int) -> int:
        """
        Returns the greatest tick whose sqrt ratio is less than or equal to sqrt_ratio

        :param sqrt_ratio: Sqrt(token_1/token_0) price encoded as Q64.96 fixed point number
        :return: tick corresponding to the given sqrt ratio
        """
        if sqrt_ratio < MIN_SQRT_RATIO or sqrt_ratio >= MAX_SQRT_RATIO:
            raise TickMathRevert(f"Sqrt ratio outside of min/max bounds.  Sqrt ratio: {sqrt_ratio}")

        ratio = sqrt_ratio << 32
        msb = ratio.bit_length() - 1

        if msb >= 128:
            r = ratio >> (msb - 127)
        else:
            r = ratio << (127 - msb)

        log_2 = (msb - 128) << 64

        for shift in range(63, 49, -1):
            r = (r * r) >> 127
            f = r >> 128
            log_2 |= f << shift
            r >>= f

        log_sqrt_10001 = log_2 * LOG_SQRT_10001_MULTIPLIER

        tick_low = (log_sqrt_10001 - TICK_LOW_ERROR) >> 128
        tick_high = (log_sqrt_10001 + TICK_HIGH_ERROR) >> 128

        if tick_low == tick_high:
            return tick_low

        return tick_high if cls.get_sqrt_ratio_at_tick(tick_high) <= sqrt_ratio else tick_low
