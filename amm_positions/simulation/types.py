from eth_typing import ChecksumAddress
from pydantic import BaseModel


class Slot0(BaseModel):
    """Stores the current price and tick"""

    sqrt_price: int
    """
        Current Exchange rate between token_0 and token_1.

        This value is represented as the square root of the ratio between token_0 and token_1, in a
        fixed point Q64.96 Number (64 bits of integer precision & 96 bits of fractional precision).
    """
    tick: int
    """
        Current Tick of the Pool.  The greatest tick whose sqrt price is less than or equal to sqrt_price.

        The Token 0 to Token 1 exchange rate at a tick can be calculated by the following formula:
        1.0001 ** tick
    """

    @classmethod
    def uninitialized(cls) -> "Slot0":
        """Returns an uninitialized slot0 used during pool initialization"""
        return Slot0(
            sqrt_price=79228162514264337593543950336,  # 1 for 1
            tick=0,
        )


class PoolState(BaseModel):
    """Stores the current balances, liquidity, and fee growths"""

    liquidity: int
    """
    Amount of active liquidity.  This parameter remains constant while the price does not move across
    initialized ticks.  When crossing a tick, this value is increased or reduced.
    """
    fee_growth_global_0: int
    """
    Tracks fee accumulation for token_0 per unit of active liquidity, as a Q128.128 number that wraps at 2 ** 256.
    When a position is modified or burned, the position fees are calculated from this global accumulator.
    """
    fee_growth_global_1: int
    """
    Tracks fee accumulation for token_1 per unit of active liquidity
    """
    balance_0: int
    """
    Current balance of token_0 in pool.  This value is modified during each mint, donation, and collect.
    """
    balance_1: int
    """
    Current balance of token_1 in pool.
    """

    @classmethod
    def uninitialized(cls) -> "PoolState":
        """Returns an uninitialized pool state used during pool initialization"""
        return PoolState(
            liquidity=0,
            fee_growth_global_0=0,
            fee_growth_global_1=0,
            balance_0=0,
            balance_1=0,
        )


class PoolImmutables(BaseModel):
    """
    Stores the pool's immutable parameters that are set once during pool initialization and will
    never change.
    """

    pool_address: ChecksumAddress
    token_0: ChecksumAddress
    token_1: ChecksumAddress
    fee: int
    """
        The fee that is charged on each swap.  This value is measured in hundredths of a bip (0.0001%).
    """
    tick_spacing: int
    """
        Number of ticks between liquidity deployments.  Position bounds must be multiples of the tick spacing
    """
    max_liquidity_per_tick: int
    """
        Limit on the gross liquidity that can reference a single tick
    """


class Tick(BaseModel):
    """Stores liquidity data and fee growth for each tick"""

    liquidity_gross: int
    """ Total liquidity owned by all positions that use this tick as an upper tick or a lower tick.
    used by the pool to determine if it is okay to delete a tick when a position is removed.
    """
    liquidity_net: int
    """
    Net liquidity to add/remove from the pool when the price moves across tick boundaries.
    If price is moving up, add liquidity_net to current liquidity.
    If price is moving down, liquidity_net is subtracted from current liquidity.
    """
    fee_growth_outside_0: int
    """
        Fee growth per unit of liquidity on the other side of this tick, relative to the current tick
    """
    fee_growth_outside_1: int

    @classmethod
    def uninitialized(cls) -> "Tick":
        """
        Returns an uninitialized tick with each field set to 0
        """
        return Tick(
            liquidity_gross=0,
            liquidity_net=0,
            fee_growth_outside_0=0,
            fee_growth_outside_1=0,
        )


class PositionInfo(BaseModel):
    """
    Stores the current liquidity, fee growth, and fees owed for a position held at the pool.  Positions are keyed
    by owner and range, so every ledger position sharing a range is aggregated into one PositionInfo owned by the
    gateway account.
    """

    liquidity: int
    fee_growth_inside_0_last: int
    fee_growth_inside_1_last: int
    tokens_owed_0: int
    """
        Number of token_0 owed to the position owner.  Is updated when position is poked or burned
    """
    tokens_owed_1: int

    @classmethod
    def uninitialized(cls) -> "PositionInfo":
        """
        Returns an uninitialized position info with each field set to 0
        """
        return PositionInfo(
            liquidity=0,
            fee_growth_inside_0_last=0,
            fee_growth_inside_1_last=0,
            tokens_owed_0=0,
            tokens_owed_1=0,
        )
