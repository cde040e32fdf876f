import logging

from eth_abi import encode
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_bytes, to_checksum_address

from amm_positions.addresses import POOL_INIT_CODE_HASH
from amm_positions.exceptions import MathOverflow, UnknownPool
from amm_positions.math.shared import UINT_80_MAX
from amm_positions.types import PoolKey, PoolRegistryEntry

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("pool_registry")


def compute_pool_address(
    factory: ChecksumAddress,
    pool_key: PoolKey,
    init_code_hash: bytes = POOL_INIT_CODE_HASH,
) -> ChecksumAddress:
    """
    Deterministically computes the pool address from the factory and the pool key through CREATE2.

    :param factory: Address of the factory that deploys the pools
    :param pool_key: Key of the pool
    :param init_code_hash: keccak256 of the pool creation code
    :return: ChecksumAddress of the pool
    """
    salt = keccak(encode(["address", "address", "uint24"], [pool_key.token_0, pool_key.token_1, pool_key.fee]))
    create2_hash = keccak(b"\xff" + to_bytes(hexstr=factory) + salt + init_code_hash)
    return to_checksum_address(create2_hash[12:])


class PoolRegistry:
    """
    Bidirectional cache between pool addresses, compact integer handles and pool keys.

    Positions reference their pool through the handle returned by :meth:`resolve`, so the full key is stored
    once per pool instead of once per position.  Handles start at 1, are assigned sequentially, and are
    never deleted or reassigned.
    """

    max_pool_id: int = UINT_80_MAX

    def __init__(self, entries: list[PoolRegistryEntry] | None = None, next_pool_id: int = 1):
        self._entries: dict[int, PoolRegistryEntry] = {}
        self._pool_ids: dict[ChecksumAddress, int] = {}
        self.next_pool_id = next_pool_id

        for entry in entries or []:
            self._entries[entry.pool_id] = entry
            self._pool_ids[entry.pool_address] = entry.pool_id

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[PoolRegistryEntry]:
        """Registry entries sorted by pool_id"""
        return [self._entries[pool_id] for pool_id in sorted(self._entries)]

    def resolve(self, pool_address: ChecksumAddress, pool_key: PoolKey) -> int:
        """
        Returns the handle for pool_address, assigning the next sequential handle if the address has not been
        seen before.  Calling resolve again for a known address has no side effects.

        :param pool_address: Address of the pool
        :param pool_key: Key the pool was deployed with
        :return: pool handle
        """
        pool_address = to_checksum_address(pool_address)
        if (pool_id := self._pool_ids.get(pool_address)) is not None:
            return pool_id

        pool_id = self.next_pool_id
        if pool_id > self.max_pool_id:
            raise MathOverflow("Pool registry handle space exhausted")

        self._entries[pool_id] = PoolRegistryEntry(pool_id=pool_id, pool_address=pool_address, pool_key=pool_key)
        self._pool_ids[pool_address] = pool_id
        self.next_pool_id += 1

        logger.info(f"Registered pool {pool_address} with handle {pool_id}")
        return pool_id

    def key_of(self, pool_id: int) -> PoolKey:
        """
        Returns the PoolKey for a handle

        :raises UnknownPool: if the handle has not been assigned
        """
        return self.entry_of(pool_id).pool_key

    def entry_of(self, pool_id: int) -> PoolRegistryEntry:
        try:
            return self._entries[pool_id]
        except KeyError:
            raise UnknownPool(f"Pool handle {pool_id} has not been assigned")  # pylint: disable=raise-missing-from

    def pool_id_of(self, pool_address: ChecksumAddress) -> int | None:
        """Returns the handle of a pool address, or None if the address is unknown"""
        return self._pool_ids.get(to_checksum_address(pool_address))

    def snapshot(self) -> tuple[dict[int, PoolRegistryEntry], dict[ChecksumAddress, int], int]:
        """Returns a copy of the registry state that :meth:`restore` can reapply to this instance"""
        return dict(self._entries), dict(self._pool_ids), self.next_pool_id

    def restore(self, snapshot: tuple[dict[int, PoolRegistryEntry], dict[ChecksumAddress, int], int]):
        """Restores a snapshot in place, so callers holding this registry observe the restored state"""
        entries, pool_ids, next_pool_id = snapshot
        self._entries = dict(entries)
        self._pool_ids = dict(pool_ids)
        self.next_pool_id = next_pool_id
