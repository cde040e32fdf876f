from abc import ABC, abstractmethod
from typing import Any

from eth_typing import ChecksumAddress

from amm_positions.types import PoolKey


class PoolGateway(ABC):
    """
    Interface through which the ledger talks to the external pool engine.

    Every call is synchronous.  Implementations raise :class:`~amm_positions.exceptions.PoolRejected` when the
    pool refuses a request, which aborts the ledger operation.  Liquidity deposited through a gateway is held
    at the pool by a single owner (the gateway's account), and the ledger splits it into positions.
    """

    @abstractmethod
    def current_price(self, pool_key: PoolKey) -> int:
        """Returns the current sqrt price of the pool as a Q64.96 fixed point number"""

    @abstractmethod
    def deposit(self, pool_key: PoolKey, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        """
        Adds liquidity to the range.

        :return: (amount_0, amount_1) the pool required for the liquidity
        """

    @abstractmethod
    def withdraw(self, pool_key: PoolKey, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        """
        Removes liquidity from the range.  A zero liquidity withdraw refreshes the fee growth snapshot of the
        range without moving any liquidity.

        :return: (amount_0, amount_1) released by the withdrawal and credited to the gateway's account at the pool
        """

    @abstractmethod
    def collect_payout(
        self,
        pool_key: PoolKey,
        tick_lower: int,
        tick_upper: int,
        recipient: ChecksumAddress,
        amount_0: int,
        amount_1: int,
    ) -> tuple[int, int]:
        """
        Transfers up to (amount_0, amount_1) of the range's credited tokens to recipient

        :return: (amount_0, amount_1) actually transferred
        """

    @abstractmethod
    def fee_growth_snapshot(self, pool_key: PoolKey, tick_lower: int, tick_upper: int) -> tuple[int, int]:
        """
        Returns the fee growth inside the range as of the last liquidity change on the range

        :return: (fee_growth_inside_0, fee_growth_inside_1), Q128.128 per unit of liquidity
        """


class Checkpointable(ABC):
    """
    Implemented by gateways whose pool state lives in process, so that a failed ledger operation can roll back
    the pool calls it already made.  Gateways backed by a transactional execution environment do not need it.
    """

    @abstractmethod
    def checkpoint(self) -> Any:
        """Returns an opaque snapshot of the gateway state"""

    @abstractmethod
    def rollback(self, checkpoint: Any) -> None:
        """Restores the gateway state captured by :meth:`checkpoint`"""
