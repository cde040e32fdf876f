from .gateway import SimulatedPoolGateway
from .pool import SimulatedPool
from .types import PoolImmutables, PoolState, PositionInfo, Slot0, Tick

__all__ = [
    "SimulatedPool",
    "SimulatedPoolGateway",
    "PoolImmutables",
    "PoolState",
    "PositionInfo",
    "Slot0",
    "Tick",
]
