from typing import Annotated

from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# Unsigned integers wider than 64 bits are stored as decimal text so they round trip exactly


class BigUInt(TypeDecorator):
    """Stores arbitrarily large non-negative python ints as decimal text"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value < 0:
            raise ValueError(f"Cannot store negative value {value} as an unsigned integer")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


AddressPK = Annotated[str, mapped_column(Text, primary_key=True)]
IndexedAddress = Annotated[str, mapped_column(Text, index=True, nullable=False)]
Address = Annotated[str, mapped_column(Text)]

UInt256 = Annotated[int, mapped_column(BigUInt, nullable=False)]
UInt128 = Annotated[int, mapped_column(BigUInt, nullable=False)]


class Base(DeclarativeBase):
    """Base class for ledger tables"""


# pylint: disable=missing-class-docstring


class PositionRecord(Base):
    __tablename__ = "positions"

    token_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    nonce: Mapped[int] = mapped_column(BigInteger, nullable=False)
    pool_id: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)
    tick_lower: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_upper: Mapped[int] = mapped_column(Integer, nullable=False)
    liquidity: Mapped[UInt128]
    fee_growth_inside_0_last: Mapped[UInt256]
    fee_growth_inside_1_last: Mapped[UInt256]
    tokens_owed_0: Mapped[UInt128]
    tokens_owed_1: Mapped[UInt128]


class PoolRegistryRecord(Base):
    __tablename__ = "pool_registry"

    pool_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    pool_address: Mapped[IndexedAddress]
    token_0: Mapped[Address]
    token_1: Mapped[Address]
    fee: Mapped[int] = mapped_column(Integer, nullable=False)


class LedgerCounter(Base):
    __tablename__ = "ledger_counters"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False)
