import logging
from copy import deepcopy
from typing import Any

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from amm_positions.addresses import POOL_INIT_CODE_HASH, UNISWAP_V3_FACTORY
from amm_positions.exceptions import FullMathRevert, PoolRejected, PoolRevert, TickMathRevert
from amm_positions.gateway import Checkpointable, PoolGateway
from amm_positions.math import Q96
from amm_positions.pool_registry import compute_pool_address
from amm_positions.types import PoolKey
from amm_positions.utils import random_address

from .pool import SimulatedPool

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("simulation")


def pool_call(method):
    """Decorator that surfaces reverts raised inside a simulated pool as PoolRejected"""

    def inner(ref, *args, **kwargs):
        try:
            return method(ref, *args, **kwargs)
        except (PoolRevert, FullMathRevert, TickMathRevert) as exc:
            raise PoolRejected(f"Pool rejected {method.__name__}: {exc}") from exc

    return inner


class SimulatedPoolGateway(PoolGateway, Checkpointable):
    """
    PoolGateway backed by in-process :class:`SimulatedPool` instances.  Pools are addressed the same way they are
    on-chain, through the CREATE2 address derived from the factory and the pool key, and all liquidity is held
    at the pools by a single owner account.

    Tokens paid out through :meth:`collect_payout` are tracked per recipient in :attr:`balances`.
    """

    pools: dict[ChecksumAddress, SimulatedPool]
    balances: dict[ChecksumAddress, dict[ChecksumAddress, int]]
    """
    Tokens transferred to each recipient, keyed by recipient and then by token address
    """

    def __init__(self, **kwargs):
        """
        :key owner: Account that holds the liquidity at the pools.  Defaults to a random address
        :key factory: Factory address used to derive pool addresses.  Defaults to the Uniswap V3 factory
        :key init_code_hash: Pool init code hash used to derive pool addresses
        """
        self.owner = to_checksum_address(kwargs.get("owner", random_address()))
        self.factory = to_checksum_address(kwargs.get("factory", UNISWAP_V3_FACTORY))
        self.init_code_hash = kwargs.get("init_code_hash", POOL_INIT_CODE_HASH)

        self.pools = {}
        self.balances = {}

    def pool_address(self, pool_key: PoolKey) -> ChecksumAddress:
        """Returns the deterministic address of the pool for a key"""
        return compute_pool_address(self.factory, pool_key, self.init_code_hash)

    def create_pool(self, pool_key: PoolKey, initial_price: int = Q96, **kwargs) -> SimulatedPool:
        """
        Deploys a simulated pool for a key.  Extra keyword arguments are passed through to :class:`SimulatedPool`,
        ie a nonstandard tick_spacing.

        :param pool_key: Key of the pool to create
        :param initial_price: Initial sqrt price as a Q64.96.  Defaults to a 1 for 1 price
        :return: the created pool
        """
        pool_address = self.pool_address(pool_key)
        if pool_address in self.pools:
            raise PoolRejected(f"Pool {pool_address} already exists")

        try:
            pool = SimulatedPool(
                token_0=pool_key.token_0,
                token_1=pool_key.token_1,
                fee=pool_key.fee,
                pool_address=pool_address,
                initial_price=initial_price,
                **kwargs,
            )
        except (PoolRevert, TickMathRevert) as exc:
            raise PoolRejected(f"Could not create pool {pool_address}: {exc}") from exc

        self.pools[pool_address] = pool
        logger.info(f"Created simulated pool {pool_address} for {pool_key.token_0} <-> {pool_key.token_1}")
        return pool

    def get_pool(self, pool_key: PoolKey) -> SimulatedPool:
        """
        Returns the simulated pool for a key

        :raises PoolRejected: if no pool was created for the key
        """
        try:
            return self.pools[self.pool_address(pool_key)]
        except KeyError:
            raise PoolRejected(  # pylint: disable=raise-missing-from
                f"No pool deployed for {pool_key.token_0} <-> {pool_key.token_1} @ {pool_key.fee}"
            )

    def balance_of(self, recipient: ChecksumAddress, token: ChecksumAddress) -> int:
        """Returns the amount of token paid out to recipient"""
        return self.balances.get(to_checksum_address(recipient), {}).get(to_checksum_address(token), 0)

    # -----------------------------------------------------------------------------------------------------------
    #  PoolGateway Interface
    # -----------------------------------------------------------------------------------------------------------

    def current_price(self, pool_key: PoolKey) -> int:
        return self.get_pool(pool_key).slot0.sqrt_price

    @pool_call
    def deposit(self, pool_key: PoolKey, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        return self.get_pool(pool_key).mint(self.owner, tick_lower, tick_upper, liquidity)

    @pool_call
    def withdraw(self, pool_key: PoolKey, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        return self.get_pool(pool_key).burn(self.owner, tick_lower, tick_upper, liquidity)

    @pool_call
    def collect_payout(
        self,
        pool_key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        recipient: ChecksumAddress,
        amount_0: int,
        amount_1: int,
    ) -> tuple[int, int]:
        paid_0, paid_1 = self.get_pool(pool_key).collect(self.owner, tick_lower, tick_upper, amount_0, amount_1)

        recipient_balances = self.balances.setdefault(to_checksum_address(recipient), {})
        recipient_balances[pool_key.token_0] = recipient_balances.get(pool_key.token_0, 0) + paid_0
        recipient_balances[pool_key.token_1] = recipient_balances.get(pool_key.token_1, 0) + paid_1

        return paid_0, paid_1

    @pool_call
    def fee_growth_snapshot(self, pool_key: PoolKey, tick_lower: int, tick_upper: int) -> tuple[int, int]:
        position_info = self.get_pool(pool_key).get_position(self.owner, tick_lower, tick_upper)
        return position_info.fee_growth_inside_0_last, position_info.fee_growth_inside_1_last

    # -----------------------------------------------------------------------------------------------------------
    #  Checkpointing
    # -----------------------------------------------------------------------------------------------------------

    def checkpoint(self) -> Any:
        return deepcopy((self.pools, self.balances))

    def rollback(self, checkpoint: Any) -> None:
        """
        Restores pools and balances in place.  Pool objects handed out before the checkpoint stay attached to the
        gateway, and pools created after the checkpoint are removed.
        """
        pools, balances = deepcopy(checkpoint)

        for pool_address in set(self.pools) - set(pools):
            del self.pools[pool_address]
        for pool_address, pool in pools.items():
            if pool_address in self.pools:
                self.pools[pool_address].__dict__.update(pool.__dict__)
            else:
                self.pools[pool_address] = pool

        self.balances.clear()
        self.balances.update(balances)
