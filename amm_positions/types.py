from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from amm_positions.utils import sort_tokens


class PoolKey(BaseModel):
    """
    Identifies a single pool.  Tokens are stored in canonical order, so an unordered token pair and fee tier
    always map to exactly one key.
    """

    model_config = ConfigDict(frozen=True)

    token_0: ChecksumAddress
    """
        Token with the lower address.  Prices are quoted as token_1 per token_0
    """
    token_1: ChecksumAddress
    """
        Token with the higher address
    """
    fee: int
    """
        The fee tier of the pool, measured in hundredths of a bip (0.0001%).  A 0.3% pool has a fee of 3000
    """

    @field_validator("token_0", "token_1", mode="before")
    @classmethod
    def checksum_tokens(cls, value: str) -> ChecksumAddress:
        return to_checksum_address(value)

    @model_validator(mode="after")
    def check_token_order(self) -> "PoolKey":
        if int(self.token_0, 16) >= int(self.token_1, 16):
            raise ValueError(f"Pool tokens are not sorted: {self.token_0} must be less than {self.token_1}")
        return self

    @classmethod
    def from_tokens(cls, token_a: str, token_b: str, fee: int) -> "PoolKey":
        """Builds a pool key from an unordered token pair"""
        token_0, token_1 = sort_tokens(token_a, token_b)
        return PoolKey(token_0=token_0, token_1=token_1, fee=fee)


class PoolRegistryEntry(BaseModel):
    """Maps a compact pool handle to the address and key of the pool it stands for"""

    model_config = ConfigDict(frozen=True)

    pool_id: int
    """
        Handle assigned by the registry.  Handles start at 1 and are never reassigned
    """
    pool_address: ChecksumAddress
    """
        Deployment address of the pool, derived from the factory and the pool key
    """
    pool_key: PoolKey


class Position(BaseModel):
    """
    Stores the liquidity, fee growth snapshot, and fees owed for a single position.

    .. note::
        Tokens owed are only updated when the position is touched (increase, decrease or collect).  The fee
        growth snapshot is the pool's fee growth inside the position's range as of that last update.
    """

    nonce: int = 0
    """
        Mutation counter.  Incremented every time the position's state changes, invalidating approvals or
        signatures that were computed against an earlier state
    """
    pool_id: int
    """
        Registry handle of the pool this position belongs to
    """
    tick_lower: int
    tick_upper: int
    liquidity: int
    """
        Amount of liquidity owned by this position
    """
    fee_growth_inside_0_last: int
    """
        Token 0 fee growth per unit of liquidity inside the position's range as of the last update.  The pool's
        accumulator wraps at 2 ** 256, so this value may be numerically larger than a later snapshot.
    """
    fee_growth_inside_1_last: int
    """
        Token 1 fee growth per unit of liquidity inside the position's range as of the last update
    """
    tokens_owed_0: int = 0
    """
        Number of token_0 owed to the position holder, including withdrawn principal and accrued fees
    """
    tokens_owed_1: int = 0
    """
        Number of token_1 owed to the position holder
    """

    def is_cleared(self) -> bool:
        """Returns True if the position holds no liquidity and no uncollected tokens"""
        return self.liquidity == 0 and self.tokens_owed_0 == 0 and self.tokens_owed_1 == 0
