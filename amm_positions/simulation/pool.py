import logging

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from amm_positions.exceptions import PoolRevert
from amm_positions.math import PositionMath
from amm_positions.utils import random_address, sort_tokens, uint_over_under_flow

from .types import PoolImmutables, PoolState, PositionInfo, Slot0, Tick

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("simulation")


# pylint: disable=too-many-instance-attributes
class SimulatedPool:
    """
    In-process concentrated liquidity pool.  Reproduces the liquidity, tick and fee growth accounting of an
    on-chain Uniswap V3 pool with exact integer math, so ledger fee accrual can be checked against the same
    numbers a deployed pool would report.

    Swaps are not executed.  Instead, :meth:`donate` distributes fees to in-range liquidity, and
    :meth:`move_price` moves the price across initialized ticks, which is all the position accounting depends on.
    """

    math = PositionMath

    immutables: PoolImmutables
    """
    PoolImmutables object containing the pool fee, token_0, token_1, and tick spacing
    """
    slot0: Slot0
    """
    Slot0 object tracking the current sqrt_price and tick of the pool
    """
    state: PoolState
    """
    PoolState object tracking the current liquidity, balances, and global fee growth
    """
    ticks: dict[int, Tick]
    """
    Dictionary of all initialized Ticks.  Ticks are initialized (added to this dictionary) when liquidity is added
    to a tick, and are deleted from the dictionary when all the liquidity is removed from a tick.
    When crossing ticks, the dictionary keys are sorted and filtered, replacing the on-chain TickBitmap.
    """
    positions: dict[tuple[ChecksumAddress, int, int], PositionInfo]
    """
    Dictionary of all LP positions.  The key to access the info for a position is a tuple of the owner address,
    lower tick, and upper tick of the position.
    """

    def __init__(self, **kwargs) -> None:
        """
        Initializes an empty pool.

        :key token_0: Address of the first token.  The pair is sorted on initialization
        :key token_1: Address of the second token
        :key fee: Fee tier of the pool.  Defaults to 3000
        :key tick_spacing: Tick spacing of the pool.  Defaults to the standard spacing for the fee
        :key pool_address: Address of the pool.  Defaults to a random address
        :key initial_price: Initial sqrt price as a Q64.96.  Defaults to a 1 for 1 price
        """
        self.ticks = {}
        self.positions = {}

        fee, tick_spacing = self.math.get_fee_and_spacing(kwargs)
        token_0, token_1 = sort_tokens(
            kwargs.get("token_0", random_address()),
            kwargs.get("token_1", random_address()),
        )

        self.immutables = PoolImmutables(
            pool_address=to_checksum_address(kwargs.get("pool_address", random_address())),
            token_0=token_0,
            token_1=token_1,
            fee=fee,
            tick_spacing=tick_spacing,
            max_liquidity_per_tick=self.math.get_max_liquidity_per_tick(tick_spacing),
        )

        self.state = PoolState.uninitialized()
        self.slot0 = Slot0.uninitialized()

        if "initial_price" in kwargs:
            self._check_sqrt_price(kwargs["initial_price"])
            self.slot0.sqrt_price = kwargs["initial_price"]
            self.slot0.tick = self.math.tick_math.get_tick_at_sqrt_ratio(self.slot0.sqrt_price)

    def __repr__(self):
        return (
            f"SimulatedPool({self.immutables.token_0} <-> {self.immutables.token_1} "
            f"@ {self.immutables.fee / 100} bips, tick {self.slot0.tick})"
        )

    # -----------------------------------------------------------------------------------------------------------
    #  Publicly Exposed Pool Methods
    # -----------------------------------------------------------------------------------------------------------

    def mint(
        self,
        recipient: ChecksumAddress,
        tick_lower: int,
        tick_upper: int,
        amount: int,
    ) -> tuple[int, int]:
        """
        Adds liquidity to a position.

        :param ChecksumAddress recipient:
            Owner address of the minted liquidity.
        :param int tick_lower:
            Lower bound of the minted liquidity.
        :param int tick_upper:
            Upper bound of the minted liquidity.
        :param int amount:
            Amount of liquidity to mint.
        :return: (amount_0, amount_1) paid into the pool, rounded up
        """
        if amount <= 0:
            raise PoolRevert("Cannot Mint 0 or Negative Liquidity")

        _, amount_0, amount_1 = self._modify_position(recipient, tick_lower, tick_upper, amount)

        self.state.balance_0 += amount_0
        self.state.balance_1 += amount_1

        return amount_0, amount_1

    def burn(
        self,
        owner_address: ChecksumAddress,
        tick_lower: int,
        tick_upper: int,
        amount: int,
    ) -> tuple[int, int]:
        """
        Removes liquidity from a position and credits the released tokens to the position's tokens owed.
        Burning zero liquidity pokes the position, updating its fee growth snapshot and tokens owed.

        :param owner_address:
            Owner of the liquidity to burn.
        :param tick_lower:
            Lower bound of the liquidity to burn.
        :param tick_upper:
            Upper bound of the liquidity to burn.
        :param amount:
            Amount of liquidity to burn.
        :return: (amount_0, amount_1) released by the burn, rounded down
        """
        if amount < 0:
            raise PoolRevert("Cannot Burn Negative Liquidity")

        position_info, amount_0_int, amount_1_int = self._modify_position(
            owner_address, tick_lower, tick_upper, -amount
        )
        amount_0, amount_1 = -amount_0_int, -amount_1_int

        position_info.tokens_owed_0 += amount_0
        position_info.tokens_owed_1 += amount_1

        return amount_0, amount_1

    def collect(
        self,
        owner_address: ChecksumAddress,
        tick_lower: int,
        tick_upper: int,
        amount_0_requested: int,
        amount_1_requested: int,
    ) -> tuple[int, int]:
        """
        Withdraws tokens owed to a position.  Requests larger than the tokens owed are capped.

        :return: (amount_0, amount_1) withdrawn from the pool
        """
        position_info = self.positions.get((owner_address, tick_lower, tick_upper), PositionInfo.uninitialized())

        amount_0 = min(amount_0_requested, position_info.tokens_owed_0)
        amount_1 = min(amount_1_requested, position_info.tokens_owed_1)

        if amount_0 > 0:
            position_info.tokens_owed_0 -= amount_0
            self.state.balance_0 -= amount_0
        if amount_1 > 0:
            position_info.tokens_owed_1 -= amount_1
            self.state.balance_1 -= amount_1

        return amount_0, amount_1

    def donate(self, amount_0: int, amount_1: int):
        """
        Distributes fees to the liquidity currently in range, the same way swap fees accrue on-chain.
        Fee growth is added per unit of active liquidity, and the global accumulators wrap at 2 ** 256.

        :param amount_0: Amount of token 0 fees to distribute
        :param amount_1: Amount of token 1 fees to distribute
        """
        if amount_0 < 0 or amount_1 < 0:
            raise PoolRevert("Cannot Donate Negative Amounts")
        if self.state.liquidity <= 0:
            raise PoolRevert("No Active Liquidity to Receive Fees")

        if amount_0 > 0:
            self.state.fee_growth_global_0 = uint_over_under_flow(
                self.state.fee_growth_global_0
                + self.math.full_math.mul_div(amount_0, self.math.Q128, self.state.liquidity),
                256,
            )
            self.state.balance_0 += amount_0
        if amount_1 > 0:
            self.state.fee_growth_global_1 = uint_over_under_flow(
                self.state.fee_growth_global_1
                + self.math.full_math.mul_div(amount_1, self.math.Q128, self.state.liquidity),
                256,
            )
            self.state.balance_1 += amount_1

        logger.debug(f"Donated ({amount_0}, {amount_1}) to {self.state.liquidity} active liquidity")

    def move_price(self, sqrt_price: int):
        """
        Moves the pool to a new sqrt price, crossing every initialized tick between the current and the new tick
        and updating the active liquidity and the fee growth outside of each crossed tick.

        :param sqrt_price: Target sqrt price as a Q64.96
        """
        self._check_sqrt_price(sqrt_price)
        target_tick = self.math.tick_math.get_tick_at_sqrt_ratio(sqrt_price)
        current_tick = self.slot0.tick

        if target_tick < current_tick:
            for tick in sorted((t for t in self.ticks if target_tick < t <= current_tick), reverse=True):
                self.state.liquidity -= self._cross_tick(
                    tick, self.state.fee_growth_global_0, self.state.fee_growth_global_1
                )
        elif target_tick > current_tick:
            for tick in sorted(t for t in self.ticks if current_tick < t <= target_tick):
                self.state.liquidity += self._cross_tick(
                    tick, self.state.fee_growth_global_0, self.state.fee_growth_global_1
                )

        self.slot0.sqrt_price = sqrt_price
        self.slot0.tick = target_tick

    def move_to_tick(self, tick: int):
        """Moves the pool to the sqrt price at a tick"""
        self.move_price(self.math.tick_math.get_sqrt_ratio_at_tick(tick))

    def fee_growth_inside(self, tick_lower: int, tick_upper: int) -> tuple[int, int]:
        """
        Returns the current fee growth per unit of liquidity inside a tick range

        :return: (fee_growth_inside_0, fee_growth_inside_1)
        """
        return self._get_fee_growth_inside(
            tick_lower,
            tick_upper,
            self.slot0.tick,
            self.state.fee_growth_global_0,
            self.state.fee_growth_global_1,
        )

    def get_position(self, owner_address: ChecksumAddress, tick_lower: int, tick_upper: int) -> PositionInfo:
        """Returns the position info for an owner and range, raising PoolRevert if it was never minted"""
        try:
            return self.positions[(owner_address, tick_lower, tick_upper)]
        except KeyError:
            raise PoolRevert(  # pylint: disable=raise-missing-from
                f"No position for {owner_address} in range [{tick_lower}, {tick_upper}]"
            )

    # -----------------------------------------------------------------------------------------------------------
    #  Internal Methods
    # -----------------------------------------------------------------------------------------------------------

    def _check_sqrt_price(self, sqrt_price: int):
        if not self.math.MIN_SQRT_RATIO <= sqrt_price < self.math.MAX_SQRT_RATIO:
            raise PoolRevert(f"Sqrt price {sqrt_price} outside of the valid price range")

    def _check_ticks(self, tick_lower: int, tick_upper: int):
        if tick_lower >= tick_upper:
            raise PoolRevert("Tick Lower must be less than Tick Upper")
        if tick_lower < self.math.MIN_TICK:
            raise PoolRevert(f"Tick Lower {tick_lower} is below the minimum tick")
        if tick_upper > self.math.MAX_TICK:
            raise PoolRevert(f"Tick Upper {tick_upper} is above the maximum tick")
        spacing = self.immutables.tick_spacing
        if tick_lower % spacing or tick_upper % spacing:
            raise PoolRevert(f"Ticks [{tick_lower}, {tick_upper}] are not multiples of the tick spacing {spacing}")

    def _modify_position(
        self,
        owner_address: ChecksumAddress,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
    ) -> tuple[PositionInfo, int, int]:
        self._check_ticks(tick_lower, tick_upper)
        position = self._update_position(owner_address, tick_lower, tick_upper, liquidity_delta, self.slot0.tick)

        amount_0, amount_1 = 0, 0
        if liquidity_delta == 0:
            return position, amount_0, amount_1

        sqrt_price_lower = self.math.tick_math.get_sqrt_ratio_at_tick(tick_lower)
        sqrt_price_upper = self.math.tick_math.get_sqrt_ratio_at_tick(tick_upper)

        if self.slot0.tick < tick_lower:
            amount_0 = self.math.sqrt_price_math.get_signed_amount_0_delta(
                sqrt_price_lower, sqrt_price_upper, liquidity_delta
            )
        elif self.slot0.tick < tick_upper:
            amount_0 = self.math.sqrt_price_math.get_signed_amount_0_delta(
                self.slot0.sqrt_price, sqrt_price_upper, liquidity_delta
            )
            amount_1 = self.math.sqrt_price_math.get_signed_amount_1_delta(
                sqrt_price_lower, self.slot0.sqrt_price, liquidity_delta
            )
            self.state.liquidity += liquidity_delta
        else:
            amount_1 = self.math.sqrt_price_math.get_signed_amount_1_delta(
                sqrt_price_lower, sqrt_price_upper, liquidity_delta
            )

        return position, amount_0, amount_1

    def _update_position(
        self,
        owner_address: ChecksumAddress,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int,
        current_tick: int,
    ) -> PositionInfo:
        position_info = self.positions.get((owner_address, tick_lower, tick_upper), PositionInfo.uninitialized())

        if liquidity_delta == 0 and position_info.liquidity == 0:
            raise PoolRevert("Cannot Poke a Position with no Liquidity")
        if position_info.liquidity + liquidity_delta < 0:
            raise PoolRevert(
                f"Burning {-liquidity_delta} exceeds position liquidity of {position_info.liquidity}"
            )

        flipped_lower, flipped_upper = False, False
        if liquidity_delta != 0:
            for tick in (tick_lower, tick_upper):
                gross_after = self.ticks.get(tick, Tick.uninitialized()).liquidity_gross + liquidity_delta
                if gross_after > self.immutables.max_liquidity_per_tick:
                    raise PoolRevert(
                        f"Tick Liquidity ({gross_after}) Overflows Max Liquidity "
                        f"({self.immutables.max_liquidity_per_tick})"
                    )

            flipped_lower = self._update_tick(
                tick_lower,
                current_tick,
                liquidity_delta,
                self.state.fee_growth_global_0,
                self.state.fee_growth_global_1,
                upper=False,
            )
            flipped_upper = self._update_tick(
                tick_upper,
                current_tick,
                liquidity_delta,
                self.state.fee_growth_global_0,
                self.state.fee_growth_global_1,
                upper=True,
            )

        fee_growth_inside_0, fee_growth_inside_1 = self._get_fee_growth_inside(
            tick_lower,
            tick_upper,
            current_tick,
            self.state.fee_growth_global_0,
            self.state.fee_growth_global_1,
        )

        self._update_position_info(position_info, liquidity_delta, fee_growth_inside_0, fee_growth_inside_1)
        self.positions[(owner_address, tick_lower, tick_upper)] = position_info

        if liquidity_delta < 0:
            if flipped_lower:
                self.ticks.pop(tick_lower)
            if flipped_upper:
                self.ticks.pop(tick_upper)

        return position_info

    def _update_position_info(
        self,
        position_info: PositionInfo,
        liquidity_delta: int,
        fee_growth_inside_0: int,
        fee_growth_inside_1: int,
    ):
        token_0_delta = uint_over_under_flow(fee_growth_inside_0 - position_info.fee_growth_inside_0_last, 256)
        token_1_delta = uint_over_under_flow(fee_growth_inside_1 - position_info.fee_growth_inside_1_last, 256)

        tokens_owed_0 = self.math.full_math.mul_div(token_0_delta, position_info.liquidity, self.math.Q128)
        tokens_owed_1 = self.math.full_math.mul_div(token_1_delta, position_info.liquidity, self.math.Q128)

        logger.debug(
            f"Pool position update.  Liquidity Delta: {liquidity_delta}, "
            f"Fee Growth 0: {token_0_delta}, Fee Growth 1: {token_1_delta}"
        )

        position_info.liquidity += liquidity_delta
        position_info.fee_growth_inside_0_last = fee_growth_inside_0
        position_info.fee_growth_inside_1_last = fee_growth_inside_1
        position_info.tokens_owed_0 += tokens_owed_0
        position_info.tokens_owed_1 += tokens_owed_1

    def _update_tick(  # pylint: disable=too-many-arguments
        self,
        tick: int,
        tick_current: int,
        liquidity_delta: int,
        fee_growth_global_0: int,
        fee_growth_global_1: int,
        upper: bool,
    ) -> bool:
        tick_info = self.ticks.get(tick, Tick.uninitialized())
        liquidity_gross_before = tick_info.liquidity_gross
        liquidity_gross_after = liquidity_gross_before + liquidity_delta

        flipped = (liquidity_gross_before == 0) != (liquidity_gross_after == 0)

        # By convention, all growth before a tick was initialized happened below the tick
        if liquidity_gross_before == 0 and tick <= tick_current:
            tick_info.fee_growth_outside_0 = fee_growth_global_0
            tick_info.fee_growth_outside_1 = fee_growth_global_1

        tick_info.liquidity_gross = liquidity_gross_after
        tick_info.liquidity_net += -liquidity_delta if upper else liquidity_delta

        self.ticks[tick] = tick_info

        return flipped

    def _cross_tick(self, tick: int, fee_growth_global_0: int, fee_growth_global_1: int) -> int:
        tick_info = self.ticks[tick]

        tick_info.fee_growth_outside_0 = uint_over_under_flow(fee_growth_global_0 - tick_info.fee_growth_outside_0, 256)
        tick_info.fee_growth_outside_1 = uint_over_under_flow(fee_growth_global_1 - tick_info.fee_growth_outside_1, 256)

        return tick_info.liquidity_net

    def _get_fee_growth_inside(
        self,
        tick_lower: int,
        tick_upper: int,
        tick_current: int,
        fee_growth_global_0: int,
        fee_growth_global_1: int,
    ) -> tuple[int, int]:
        tick_lower_data = self.ticks.get(tick_lower, Tick.uninitialized())
        tick_upper_data = self.ticks.get(tick_upper, Tick.uninitialized())

        if tick_current >= tick_lower:
            fee_growth_below_0 = tick_lower_data.fee_growth_outside_0
            fee_growth_below_1 = tick_lower_data.fee_growth_outside_1
        else:
            fee_growth_below_0 = uint_over_under_flow(fee_growth_global_0 - tick_lower_data.fee_growth_outside_0, 256)
            fee_growth_below_1 = uint_over_under_flow(fee_growth_global_1 - tick_lower_data.fee_growth_outside_1, 256)

        if tick_current < tick_upper:
            fee_growth_above_0 = tick_upper_data.fee_growth_outside_0
            fee_growth_above_1 = tick_upper_data.fee_growth_outside_1
        else:
            fee_growth_above_0 = uint_over_under_flow(fee_growth_global_0 - tick_upper_data.fee_growth_outside_0, 256)
            fee_growth_above_1 = uint_over_under_flow(fee_growth_global_1 - tick_upper_data.fee_growth_outside_1, 256)

        # Accumulators wrap at 2 ** 256, so only differences between them are meaningful
        fee_growth_inside_0 = uint_over_under_flow(fee_growth_global_0 - fee_growth_below_0, 256)
        fee_growth_inside_1 = uint_over_under_flow(fee_growth_global_1 - fee_growth_below_1, 256)

        return (
            uint_over_under_flow(fee_growth_inside_0 - fee_growth_above_0, 256),
            uint_over_under_flow(fee_growth_inside_1 - fee_growth_above_1, 256),
        )
