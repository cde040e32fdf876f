from .migrations import migrate_up
from .models import Base, LedgerCounter, PoolRegistryRecord, PositionRecord
from .persistence import get_pool_entries, get_position, get_positions, load_ledger, save_ledger

__all__ = [
    "Base",
    "LedgerCounter",
    "PoolRegistryRecord",
    "PositionRecord",
    "migrate_up",
    "get_pool_entries",
    "get_position",
    "get_positions",
    "load_ledger",
    "save_ledger",
]
