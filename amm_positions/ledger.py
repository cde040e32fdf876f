import datetime
import logging
from copy import deepcopy

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from amm_positions.addresses import POOL_INIT_CODE_HASH, UNISWAP_V3_FACTORY
from amm_positions.authorization import Authorizer, OwnerAuthorizer
from amm_positions.exceptions import (
    Expired,
    InsufficientLiquidity,
    InvalidCollectRequest,
    InvalidRange,
    InvalidTokenId,
    MathOverflow,
    NotCleared,
    SlippageExceeded,
    Unauthorized,
)
from amm_positions.gateway import Checkpointable, PoolGateway
from amm_positions.math import PositionMath
from amm_positions.pool_registry import PoolRegistry, compute_pool_address
from amm_positions.resolver import LiquidityResolver
from amm_positions.types import PoolKey, Position
from amm_positions.utils import uint_over_under_flow

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("ledger")


def atomic(method):
    """
    Decorator that applies a ledger operation all-or-nothing.  Ledger state is checkpointed before the operation
    runs, along with the gateway state if the gateway is Checkpointable, and both are restored if it raises.
    """

    def inner(ref, *args, **kwargs):
        ledger_checkpoint = ref._checkpoint()  # pylint: disable=protected-access
        gateway_checkpoint = ref.gateway.checkpoint() if isinstance(ref.gateway, Checkpointable) else None
        try:
            return method(ref, *args, **kwargs)
        except Exception as exc:
            logger.debug(f"Rolling back {method.__name__}: {exc!r}")
            ref._restore(ledger_checkpoint)  # pylint: disable=protected-access
            if gateway_checkpoint is not None:
                ref.gateway.rollback(gateway_checkpoint)
            raise

    return inner


# pylint: disable=too-many-instance-attributes
class PositionLedger:
    """
    Authoritative store of liquidity positions.

    Each position is a claim on liquidity deposited into a single tick range of a pool.  The ledger owns the
    position lifecycle (open, increase, decrease, collect, close), and accrues trading fees to each position by
    diffing the pool's fee growth inside the position's range against the snapshot stored on the position.

    All liquidity is held at the pool by the gateway's account, so positions sharing a range are aggregated at
    the pool and split again by the ledger.
    """

    math = PositionMath

    positions: dict[int, Position]
    """
    Open positions keyed by token id.  Closed positions are deleted, and their ids are never reused
    """
    registry: PoolRegistry
    """
    Pool handle cache.  Positions store the handle of their pool rather than the full pool key
    """
    next_token_id: int
    """
    Token id assigned to the next opened position.  Ids start at 1, and 0 is never assigned
    """
    block_number: int
    block_timestamp: int
    """
    Current timestamp of the ledger, used for deadline checks.  Every time advance_block() is called, this value
    is incremented by 12 seconds.
    """

    def __init__(self, gateway: PoolGateway, **kwargs):
        """
        :param gateway: Gateway used to execute liquidity changes against the pools
        :key registry: Existing PoolRegistry.  Defaults to an empty registry
        :key authorizer: Authorizer consulted before decrease, collect and close.  Defaults to an OwnerAuthorizer
        :key factory: Factory address used to derive pool addresses.  Defaults to the Uniswap V3 factory
        :key init_code_hash: Pool init code hash used to derive pool addresses
        :key positions: Existing positions keyed by token id
        :key next_token_id: Token id of the next opened position.  Defaults to 1
        :key initial_timestamp: Initial block timestamp.  Defaults to the current time
        :key initial_block: Initial block number.  Defaults to 0
        """
        self.gateway = gateway
        self.resolver = LiquidityResolver(self.math)

        self.registry = registry if (registry := kwargs.get("registry")) is not None else PoolRegistry()
        self.authorizer: Authorizer = (
            authorizer if (authorizer := kwargs.get("authorizer")) is not None else OwnerAuthorizer()
        )
        self.factory = to_checksum_address(kwargs.get("factory", UNISWAP_V3_FACTORY))
        self.init_code_hash = kwargs.get("init_code_hash", POOL_INIT_CODE_HASH)

        self.positions = dict(kwargs.get("positions", {}))
        self.next_token_id = kwargs.get("next_token_id", 1)
        if self.next_token_id < 1:
            raise ValueError("Token ids start at 1")

        self.block_timestamp = kwargs.get("initial_timestamp", int(datetime.datetime.now().timestamp()))
        self.block_number = kwargs.get("initial_block", 0)

    def __repr__(self):
        return f"PositionLedger(positions={len(self.positions)}, pools={len(self.registry)})"

    # -----------------------------------------------------------------------------------------------------------
    #  Position Operations
    # -----------------------------------------------------------------------------------------------------------

    @atomic
    def open(  # pylint: disable=too-many-arguments
        self,
        pool_key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        amount_0_desired: int,
        amount_1_desired: int,
        recipient: ChecksumAddress,
        amount_0_min: int = 0,
        amount_1_min: int = 0,
        deadline: int | None = None,
    ) -> tuple[int, int, int, int]:
        """
        Opens a new position, depositing the largest liquidity the desired amounts allow.

        :param pool_key: Key of the pool to deposit into
        :param tick_lower: Lower tick of the position
        :param tick_upper: Upper tick of the position
        :param amount_0_desired: Maximum amount of token 0 to deposit
        :param amount_1_desired: Maximum amount of token 1 to deposit
        :param recipient: Owner of the new position
        :param amount_0_min: Minimum amount of token 0 that must be deposited
        :param amount_1_min: Minimum amount of token 1 that must be deposited
        :param deadline: Unix timestamp after which the operation is rejected
        :return: (token_id, liquidity, amount_0, amount_1)
        """
        self._check_deadline(deadline)
        if tick_lower >= tick_upper:
            raise InvalidRange(f"Lower tick {tick_lower} must be less than upper tick {tick_upper}")

        pool_id = self.registry.resolve(compute_pool_address(self.factory, pool_key, self.init_code_hash), pool_key)

        liquidity, amount_0, amount_1 = self._add_liquidity(
            pool_key, tick_lower, tick_upper, amount_0_desired, amount_1_desired, amount_0_min, amount_1_min
        )

        token_id = self.next_token_id
        self.next_token_id += 1

        fee_growth_inside_0, fee_growth_inside_1 = self.gateway.fee_growth_snapshot(pool_key, tick_lower, tick_upper)
        self.positions[token_id] = Position(
            pool_id=pool_id,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=liquidity,
            fee_growth_inside_0_last=fee_growth_inside_0,
            fee_growth_inside_1_last=fee_growth_inside_1,
        )
        self.authorizer.position_opened(token_id, recipient)

        logger.info(
            f"Opened position {token_id} in pool {pool_id} [{tick_lower}, {tick_upper}] with liquidity {liquidity} "
            f"for ({amount_0}, {amount_1})"
        )
        return token_id, liquidity, amount_0, amount_1

    @atomic
    def increase(  # pylint: disable=too-many-arguments
        self,
        token_id: int,
        amount_0_desired: int,
        amount_1_desired: int,
        amount_0_min: int = 0,
        amount_1_min: int = 0,
        deadline: int | None = None,
    ) -> tuple[int, int, int]:
        """
        Adds liquidity to an existing position.  Fees accrued by the position's previous liquidity are credited
        to the position before the new liquidity is added.

        :return: (liquidity_added, amount_0, amount_1)
        """
        self._check_deadline(deadline)
        position = self._load_position(token_id)
        pool_key = self.registry.key_of(position.pool_id)

        liquidity, amount_0, amount_1 = self._add_liquidity(
            pool_key,
            position.tick_lower,
            position.tick_upper,
            amount_0_desired,
            amount_1_desired,
            amount_0_min,
            amount_1_min,
        )

        self._accrue_fees(position, pool_key)
        position.liquidity += liquidity
        position.nonce += 1

        logger.info(f"Increased position {token_id} by {liquidity} liquidity for ({amount_0}, {amount_1})")
        return liquidity, amount_0, amount_1

    @atomic
    def decrease(  # pylint: disable=too-many-arguments
        self,
        token_id: int,
        liquidity: int,
        caller: ChecksumAddress,
        amount_0_min: int = 0,
        amount_1_min: int = 0,
        deadline: int | None = None,
    ) -> tuple[int, int]:
        """
        Removes liquidity from a position.  The released tokens are credited to the position's tokens owed, and
        are transferred out through :meth:`collect`.

        :param token_id: Position to decrease
        :param liquidity: Amount of liquidity to remove
        :param caller: Account requesting the decrease.  Must be authorized for the position
        :param amount_0_min: Minimum amount of token 0 that must be released
        :param amount_1_min: Minimum amount of token 1 that must be released
        :param deadline: Unix timestamp after which the operation is rejected
        :return: (amount_0, amount_1) released by the pool
        """
        self._check_deadline(deadline)
        position = self._load_position(token_id)
        self._authorize(caller, token_id)

        if liquidity <= 0:
            raise InvalidRange("Cannot decrease a position by zero liquidity")
        if liquidity > position.liquidity:
            raise InsufficientLiquidity(
                f"Cannot remove {liquidity} liquidity from position {token_id} holding {position.liquidity}"
            )

        pool_key = self.registry.key_of(position.pool_id)
        amount_0, amount_1 = self.gateway.withdraw(pool_key, position.tick_lower, position.tick_upper, liquidity)

        if amount_0 < amount_0_min or amount_1 < amount_1_min:
            raise SlippageExceeded(
                f"Withdrawn amounts ({amount_0}, {amount_1}) below minimums ({amount_0_min}, {amount_1_min})"
            )

        self._accrue_fees(position, pool_key)
        position.tokens_owed_0 += amount_0
        position.tokens_owed_1 += amount_1
        position.liquidity -= liquidity
        position.nonce += 1

        logger.info(f"Decreased position {token_id} by {liquidity} liquidity, releasing ({amount_0}, {amount_1})")
        return amount_0, amount_1

    @atomic
    def collect(
        self,
        token_id: int,
        recipient: ChecksumAddress,
        amount_0_max: int,
        amount_1_max: int,
        caller: ChecksumAddress,
    ) -> tuple[int, int]:
        """
        Transfers tokens owed to a position to recipient, after crediting any fees the position accrued since
        its last update.

        .. note::
            The requested amounts are deducted from tokens owed, even if the pool releases marginally less due
            to its own rounding.  This lets a position always be drained to exactly zero owed.

        :param token_id: Position to collect from
        :param recipient: Account receiving the tokens
        :param amount_0_max: Maximum amount of token 0 to collect
        :param amount_1_max: Maximum amount of token 1 to collect
        :param caller: Account requesting the collect.  Must be authorized for the position
        :return: (amount_0, amount_1) released by the pool
        """
        position = self._load_position(token_id)
        self._authorize(caller, token_id)

        if amount_0_max == 0 and amount_1_max == 0:
            raise InvalidCollectRequest("At least one of amount_0_max and amount_1_max must be non-zero")

        pool_key = self.registry.key_of(position.pool_id)

        if position.liquidity > 0:
            # Zero liquidity burn forces the pool to refresh the fee growth snapshot for the range
            self.gateway.withdraw(pool_key, position.tick_lower, position.tick_upper, 0)
            self._accrue_fees(position, pool_key)

        paid_0 = min(position.tokens_owed_0, amount_0_max)
        paid_1 = min(position.tokens_owed_1, amount_1_max)

        amount_0, amount_1 = self.gateway.collect_payout(
            pool_key, position.tick_lower, position.tick_upper, recipient, paid_0, paid_1
        )

        position.tokens_owed_0 -= paid_0
        position.tokens_owed_1 -= paid_1
        position.nonce += 1

        logger.info(f"Collected ({amount_0}, {amount_1}) from position {token_id} to {recipient}")
        return amount_0, amount_1

    @atomic
    def close(self, token_id: int, caller: ChecksumAddress):
        """
        Deletes a drained position.  The token id is retired and never reassigned.

        :raises NotCleared: if the position still holds liquidity or uncollected tokens
        """
        position = self._load_position(token_id)
        self._authorize(caller, token_id)

        if not position.is_cleared():
            raise NotCleared(
                f"Position {token_id} is not cleared.  Liquidity: {position.liquidity}, "
                f"Tokens Owed: ({position.tokens_owed_0}, {position.tokens_owed_1})"
            )

        del self.positions[token_id]
        self.authorizer.position_closed(token_id)

        logger.info(f"Closed position {token_id}")

    # -----------------------------------------------------------------------------------------------------------
    #  Views
    # -----------------------------------------------------------------------------------------------------------

    def get_position(self, token_id: int) -> Position:
        """
        Returns a copy of a position

        :raises InvalidTokenId: if the position does not exist
        """
        return self._load_position(token_id).model_copy()

    def pool_key_of(self, token_id: int) -> PoolKey:
        """Returns the key of the pool a position belongs to"""
        return self.registry.key_of(self._load_position(token_id).pool_id)

    def position_amounts(self, token_id: int) -> tuple[int, int]:
        """
        Returns the token value of a position's liquidity at the pool's current price.  Tokens owed are not
        included.

        :return: (amount_0, amount_1)
        """
        position = self._load_position(token_id)
        pool_key = self.registry.key_of(position.pool_id)
        return self.resolver.amounts_for_range(
            self.gateway.current_price(pool_key),
            position.tick_lower,
            position.tick_upper,
            position.liquidity,
        )

    def advance_block(self, blocks: int = 1):
        """
        Advances the current block by blocks, and the block timestamp by 12 seconds per block

        :param blocks: Number of blocks to advance.  Defaults to 1
        """
        self.block_number += blocks
        self.block_timestamp += 12 * blocks

    # -----------------------------------------------------------------------------------------------------------
    #  Internal Methods
    # -----------------------------------------------------------------------------------------------------------

    def _load_position(self, token_id: int) -> Position:
        try:
            return self.positions[token_id]
        except KeyError:
            raise InvalidTokenId(f"Position {token_id} does not exist")  # pylint: disable=raise-missing-from

    def _check_deadline(self, deadline: int | None):
        if deadline is not None and self.block_timestamp > deadline:
            raise Expired(f"Deadline {deadline} has passed.  Current timestamp: {self.block_timestamp}")

    def _authorize(self, caller: ChecksumAddress, token_id: int):
        if not self.authorizer.is_authorized(caller, token_id):
            raise Unauthorized(f"{caller} is not authorized to manage position {token_id}")

    def _add_liquidity(  # pylint: disable=too-many-arguments
        self,
        pool_key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        amount_0_desired: int,
        amount_1_desired: int,
        amount_0_min: int,
        amount_1_min: int,
    ) -> tuple[int, int, int]:
        current_sqrt_price = self.gateway.current_price(pool_key)
        liquidity = self.resolver.liquidity_for_range(
            current_sqrt_price, tick_lower, tick_upper, amount_0_desired, amount_1_desired
        )
        if liquidity == 0:
            raise InvalidRange(
                f"Desired amounts ({amount_0_desired}, {amount_1_desired}) resolve to zero liquidity "
                f"in range [{tick_lower}, {tick_upper}]"
            )

        amount_0, amount_1 = self.gateway.deposit(pool_key, tick_lower, tick_upper, liquidity)

        if amount_0 < amount_0_min or amount_1 < amount_1_min:
            raise SlippageExceeded(
                f"Deposited amounts ({amount_0}, {amount_1}) below minimums ({amount_0_min}, {amount_1_min})"
            )

        return liquidity, amount_0, amount_1

    def _accrue_fees(self, position: Position, pool_key: PoolKey):
        """
        Credits the fees earned by the position's current liquidity since the last snapshot, then stores the
        pool's current fee growth as the new snapshot.  Must run before the position's liquidity changes.
        """
        fee_growth_inside_0, fee_growth_inside_1 = self.gateway.fee_growth_snapshot(
            pool_key, position.tick_lower, position.tick_upper
        )

        growth_delta_0 = uint_over_under_flow(fee_growth_inside_0 - position.fee_growth_inside_0_last, 256)
        growth_delta_1 = uint_over_under_flow(fee_growth_inside_1 - position.fee_growth_inside_1_last, 256)

        owed_0 = self.math.full_math.mul_div(growth_delta_0, position.liquidity, self.math.Q128)
        owed_1 = self.math.full_math.mul_div(growth_delta_1, position.liquidity, self.math.Q128)

        logger.debug(
            f"Accruing fees.  Liquidity: {position.liquidity}, Fee Growth 0: {growth_delta_0}, "
            f"Fee Growth 1: {growth_delta_1}, Owed: ({owed_0}, {owed_1})"
        )

        tokens_owed_0 = position.tokens_owed_0 + owed_0
        tokens_owed_1 = position.tokens_owed_1 + owed_1
        if tokens_owed_0 > self.math.UINT_128_MAX or tokens_owed_1 > self.math.UINT_128_MAX:
            raise MathOverflow(f"Tokens owed ({tokens_owed_0}, {tokens_owed_1}) overflow UINT128")

        position.tokens_owed_0 = tokens_owed_0
        position.tokens_owed_1 = tokens_owed_1
        position.fee_growth_inside_0_last = fee_growth_inside_0
        position.fee_growth_inside_1_last = fee_growth_inside_1

    def _checkpoint(self):
        return deepcopy(self.positions), self.registry.snapshot(), self.next_token_id

    def _restore(self, checkpoint):
        # Restored in place, since the registry may be shared with the caller
        positions, registry_snapshot, self.next_token_id = checkpoint
        self.positions.clear()
        self.positions.update(positions)
        self.registry.restore(registry_snapshot)
