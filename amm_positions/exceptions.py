class PositionManagerRevert(Exception):
    """
    Base class for every failure raised by a ledger operation.  A revert is terminal for the operation that
    raised it: the operation is rolled back and nothing is retried.
    """


class FullMathRevert(PositionManagerRevert):
    """
    Raised when the result of (a * b) / c cannot be represented as a uint256, or when c is zero.
    """


class MathOverflow(FullMathRevert):
    """
    Raised when an intermediate or final value overflows its unsigned integer width.  Fee accrual overflows are
    raised, never clamped.
    """


class DivisionByZero(FullMathRevert):
    """Raised when a fixed point division is attempted with a zero denominator"""


class TickMathRevert(PositionManagerRevert):
    """
    Raised when a tick value is out of bounds, or a sqrt_price exceeds the MIN_SQRT_RATIO / MAX_SQRT_RATIO range
    """


class UnknownPool(PositionManagerRevert):
    """Raised when a pool handle has not been assigned by the PoolRegistry"""


class InvalidTokenId(PositionManagerRevert):
    """Raised when a position identifier does not belong to an open position"""


class InvalidRange(PositionManagerRevert):
    """
    Raised when a position range is malformed or a liquidity request is empty.  The following conditions
    will result in this error being raised:

        * tick_lower is greater than or equal to tick_upper
        * Opening or increasing a position with amounts that resolve to zero liquidity
        * Decreasing a position by zero liquidity

    """


class InvalidCollectRequest(PositionManagerRevert):
    """Raised when collect is called with both amount_0_max and amount_1_max set to zero"""


class SlippageExceeded(PositionManagerRevert):
    """
    Raised when the token amounts deposited into or withdrawn from the pool are below the caller's minimums.
    The check runs after the pool call, so the whole operation is rolled back.
    """


class InsufficientLiquidity(PositionManagerRevert):
    """Raised when a decrease requests more liquidity than the position holds"""


class NotCleared(PositionManagerRevert):
    """Raised when closing a position that still holds liquidity or uncollected tokens"""


class PoolRejected(PositionManagerRevert):
    """
    Raised when the external pool refuses a request, ie minting outside of the tick bounds, ticks that are not
    multiples of the tick spacing, or a pool that does not exist.
    """


class Expired(PositionManagerRevert):
    """Raised when an operation is submitted after its deadline"""


class Unauthorized(PositionManagerRevert):
    """Raised when the caller is neither the owner of a position nor approved to manage it"""


class PoolRevert(Exception):
    """
    Pool Revert Exception is thrown by the simulated pool when an action would revert on-chain.
    The following conditions will result in this error being raised:

        * Ticks exceed the maximum tick value of 887272 or the minimum tick value of -887272
        * Ticks that are not a multiple of the pool's tick spacing
        * Minting zero liquidity, or burning more liquidity than a position holds
        * Tick liquidity exceeding the max liquidity per tick

    Gateways translate this error into :class:`PoolRejected`.
    """
