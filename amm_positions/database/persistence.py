import logging
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from amm_positions.gateway import PoolGateway
from amm_positions.ledger import PositionLedger
from amm_positions.pool_registry import PoolRegistry
from amm_positions.types import PoolKey, PoolRegistryEntry, Position

from .models import LedgerCounter, PoolRegistryRecord, PositionRecord

logger = logging.getLogger("amm_positions").getChild("database")

NEXT_TOKEN_ID = "next_token_id"
NEXT_POOL_ID = "next_pool_id"


def get_positions(db_session: Session, pool_id: int | None = None) -> Sequence[PositionRecord]:
    """Selects stored positions ordered by token id, optionally filtered to a single pool"""
    select_stmt = select(PositionRecord).order_by(PositionRecord.token_id)
    if pool_id is not None:
        select_stmt = select_stmt.where(PositionRecord.pool_id == pool_id)
    return db_session.scalars(select_stmt).all()


def get_position(db_session: Session, token_id: int) -> PositionRecord | None:
    """Returns the stored position for a token id, or None if no such position is stored"""
    return db_session.get(PositionRecord, token_id)


def get_pool_entries(db_session: Session) -> Sequence[PoolRegistryRecord]:
    """Selects every stored pool registry entry ordered by pool handle"""
    return db_session.scalars(select(PoolRegistryRecord).order_by(PoolRegistryRecord.pool_id)).all()


def get_counters(db_session: Session) -> dict[str, int]:
    """Returns the stored ledger counters keyed by name"""
    return {counter.name: counter.value for counter in db_session.scalars(select(LedgerCounter))}


def position_from_record(record: PositionRecord) -> Position:
    return Position(
        nonce=record.nonce,
        pool_id=record.pool_id,
        tick_lower=record.tick_lower,
        tick_upper=record.tick_upper,
        liquidity=record.liquidity,
        fee_growth_inside_0_last=record.fee_growth_inside_0_last,
        fee_growth_inside_1_last=record.fee_growth_inside_1_last,
        tokens_owed_0=record.tokens_owed_0,
        tokens_owed_1=record.tokens_owed_1,
    )


def registry_entry_from_record(record: PoolRegistryRecord) -> PoolRegistryEntry:
    return PoolRegistryEntry(
        pool_id=record.pool_id,
        pool_address=record.pool_address,
        pool_key=PoolKey(token_0=record.token_0, token_1=record.token_1, fee=record.fee),
    )


def save_ledger(db_session: Session, ledger: PositionLedger):
    """
    Writes the ledger's positions, pool registry and counters to the database.  Positions that were closed since
    the last save are deleted.

    :param db_session: Database session.  Committed before returning
    :param ledger: Ledger to save
    """
    db_session.execute(delete(PositionRecord).where(PositionRecord.token_id.not_in(list(ledger.positions))))

    for token_id, position in ledger.positions.items():
        db_session.merge(PositionRecord(token_id=token_id, **position.model_dump()))

    for entry in ledger.registry.entries:
        db_session.merge(
            PoolRegistryRecord(
                pool_id=entry.pool_id,
                pool_address=entry.pool_address,
                token_0=entry.pool_key.token_0,
                token_1=entry.pool_key.token_1,
                fee=entry.pool_key.fee,
            )
        )

    db_session.merge(LedgerCounter(name=NEXT_TOKEN_ID, value=ledger.next_token_id))
    db_session.merge(LedgerCounter(name=NEXT_POOL_ID, value=ledger.registry.next_pool_id))
    db_session.commit()

    logger.info(f"Saved {len(ledger.positions)} positions and {len(ledger.registry)} pools")


def load_ledger(db_session: Session, gateway: PoolGateway, **kwargs) -> PositionLedger:
    """
    Rebuilds a ledger from the database.  Position ownership is not stored with the ledger, so callers that
    enforce ownership should pass an ``authorizer`` that already knows the owners.

    :param db_session: Database session
    :param gateway: Gateway the loaded ledger will execute against
    :param kwargs: Additional keyword arguments passed to :class:`PositionLedger`
    :return: PositionLedger
    """
    counters = get_counters(db_session)

    registry = PoolRegistry(
        entries=[registry_entry_from_record(record) for record in get_pool_entries(db_session)],
        next_pool_id=counters.get(NEXT_POOL_ID, 1),
    )
    positions = {record.token_id: position_from_record(record) for record in get_positions(db_session)}

    logger.info(f"Loaded {len(positions)} positions and {len(registry)} pools")

    return PositionLedger(
        gateway,
        registry=registry,
        positions=positions,
        next_token_id=counters.get(NEXT_TOKEN_ID, 1),
        **kwargs,
    )
