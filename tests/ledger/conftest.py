import pytest

from amm_positions import OwnerAuthorizer, PoolGateway, PoolRegistry, PositionLedger, compute_pool_address
from amm_positions.addresses import UNISWAP_V3_FACTORY
from amm_positions.math import PositionMath
from amm_positions.types import Position


class StaticGateway(PoolGateway):
    """
    Gateway with a fixed price, and fee growth set directly by the test.  Deposits and withdrawals are priced with
    the same rounding a pool uses, and payouts can be configured to fall short of the requested amounts.
    """

    def __init__(self, sqrt_price: int = 2**96, payout_shortfall: int = 0):
        self.sqrt_price = sqrt_price
        self.payout_shortfall = payout_shortfall
        self.fee_growth: dict[tuple[int, int], tuple[int, int]] = {}
        self.liquidity: dict[tuple[int, int], int] = {}
        self.payouts: list[tuple] = []
        self.withdrawals: list[tuple] = []

    def _amounts(self, tick_lower: int, tick_upper: int, liquidity: int, round_up: bool) -> tuple[int, int]:
        sqrt_price_lower = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick_lower)
        sqrt_price_upper = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick_upper)
        sqrt_price_math = PositionMath.sqrt_price_math

        if self.sqrt_price <= sqrt_price_lower:
            return sqrt_price_math.get_amount_0_delta(sqrt_price_lower, sqrt_price_upper, liquidity, round_up), 0
        if self.sqrt_price < sqrt_price_upper:
            return (
                sqrt_price_math.get_amount_0_delta(self.sqrt_price, sqrt_price_upper, liquidity, round_up),
                sqrt_price_math.get_amount_1_delta(sqrt_price_lower, self.sqrt_price, liquidity, round_up),
            )
        return 0, sqrt_price_math.get_amount_1_delta(sqrt_price_lower, sqrt_price_upper, liquidity, round_up)

    def current_price(self, pool_key):
        return self.sqrt_price

    def deposit(self, pool_key, tick_lower, tick_upper, liquidity):
        self.liquidity[(tick_lower, tick_upper)] = self.liquidity.get((tick_lower, tick_upper), 0) + liquidity
        return self._amounts(tick_lower, tick_upper, liquidity, True)

    def withdraw(self, pool_key, tick_lower, tick_upper, liquidity):
        self.withdrawals.append((tick_lower, tick_upper, liquidity))
        self.liquidity[(tick_lower, tick_upper)] -= liquidity
        return self._amounts(tick_lower, tick_upper, liquidity, False)

    def collect_payout(self, pool_key, tick_lower, tick_upper, recipient, amount_0, amount_1):
        paid = max(amount_0 - self.payout_shortfall, 0), max(amount_1 - self.payout_shortfall, 0)
        self.payouts.append((recipient, *paid))
        return paid

    def fee_growth_snapshot(self, pool_key, tick_lower, tick_upper):
        return self.fee_growth.get((tick_lower, tick_upper), (0, 0))


@pytest.fixture(name="static_gateway")
def fixture_static_gateway():
    return StaticGateway()


@pytest.fixture(name="static_ledger")
def fixture_static_ledger(static_gateway):
    return PositionLedger(static_gateway, initial_timestamp=1_700_000_000, initial_block=18_000_000)


@pytest.fixture(name="seed_position")
def fixture_seed_position(static_gateway, pool_key, owner):
    """Builds a ledger holding a single position, without going through open()"""

    def _seed_position(liquidity: int, fee_growth_inside_last: tuple[int, int] = (0, 0), **position_kwargs):
        registry = PoolRegistry()
        pool_id = registry.resolve(compute_pool_address(UNISWAP_V3_FACTORY, pool_key), pool_key)

        authorizer = OwnerAuthorizer()
        authorizer.position_opened(1, owner)

        static_gateway.liquidity[(-600, 600)] = liquidity
        position = Position(
            pool_id=pool_id,
            tick_lower=-600,
            tick_upper=600,
            liquidity=liquidity,
            fee_growth_inside_0_last=fee_growth_inside_last[0],
            fee_growth_inside_1_last=fee_growth_inside_last[1],
            **position_kwargs,
        )
        return PositionLedger(
            static_gateway,
            registry=registry,
            authorizer=authorizer,
            positions={1: position},
            next_token_id=2,
            initial_timestamp=1_700_000_000,
        )

    return _seed_position
