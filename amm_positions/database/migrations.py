import logging

from sqlalchemy import Engine

from .models import Base

logger = logging.getLogger("amm_positions").getChild("database")


def migrate_up(db_engine: Engine):
    """Create Sqlalchemy DB Tables"""
    logger.info(f"Creating ledger tables: {', '.join(sorted(Base.metadata.tables))}")
    Base.metadata.create_all(bind=db_engine)
