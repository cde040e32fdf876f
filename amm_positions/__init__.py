from amm_positions.authorization import Authorizer, OwnerAuthorizer
from amm_positions.gateway import Checkpointable, PoolGateway
from amm_positions.ledger import PositionLedger
from amm_positions.pool_registry import PoolRegistry, compute_pool_address
from amm_positions.resolver import LiquidityResolver
from amm_positions.types import PoolKey, PoolRegistryEntry, Position

__all__ = [
    "Authorizer",
    "Checkpointable",
    "LiquidityResolver",
    "OwnerAuthorizer",
    "PoolGateway",
    "PoolKey",
    "PoolRegistry",
    "PoolRegistryEntry",
    "Position",
    "PositionLedger",
    "compute_pool_address",
]
