import pytest

from amm_positions.addresses import UNISWAP_V3_FACTORY
from amm_positions.exceptions import PoolRejected
from amm_positions.math import Q128
from amm_positions.pool_registry import compute_pool_address
from amm_positions.types import PoolKey

from ..utils import encode_sqrt_price


class TestPoolManagement:
    def test_pool_address_matches_create2_address(self, simulated_gateway, pool_key):
        pool = simulated_gateway.create_pool(pool_key)

        assert pool.immutables.pool_address == compute_pool_address(UNISWAP_V3_FACTORY, pool_key)
        assert simulated_gateway.pool_address(pool_key) == pool.immutables.pool_address
        assert simulated_gateway.get_pool(pool_key) is pool

    def test_pool_uses_key_tokens_and_fee(self, simulated_gateway, random_address):
        pool_key = PoolKey.from_tokens(random_address(), random_address(), 500)
        pool = simulated_gateway.create_pool(pool_key, encode_sqrt_price(1, 10))

        assert pool.immutables.token_0 == pool_key.token_0
        assert pool.immutables.token_1 == pool_key.token_1
        assert pool.immutables.tick_spacing == 10
        assert simulated_gateway.current_price(pool_key) == encode_sqrt_price(1, 10)

    def test_create_pool_twice_raises(self, simulated_gateway, pool_key):
        simulated_gateway.create_pool(pool_key)
        with pytest.raises(PoolRejected):
            simulated_gateway.create_pool(pool_key)

    def test_create_pool_with_invalid_price_raises(self, simulated_gateway, pool_key):
        with pytest.raises(PoolRejected):
            simulated_gateway.create_pool(pool_key, initial_price=1)
        assert not simulated_gateway.pools

    def test_get_unknown_pool_raises(self, simulated_gateway, pool_key):
        with pytest.raises(PoolRejected):
            simulated_gateway.get_pool(pool_key)
        with pytest.raises(PoolRejected):
            simulated_gateway.current_price(pool_key)


class TestGatewayOperations:
    def test_deposit_mints_for_gateway_owner(self, simulated_gateway, pool_key):
        pool = simulated_gateway.create_pool(pool_key)

        amount_0, amount_1 = simulated_gateway.deposit(pool_key, -600, 600, 10000)

        position = pool.get_position(simulated_gateway.owner, -600, 600)
        assert position.liquidity == 10000
        assert (amount_0, amount_1) == (pool.state.balance_0, pool.state.balance_1)

    def test_deposit_misaligned_ticks_raises(self, simulated_gateway, pool_key):
        simulated_gateway.create_pool(pool_key)
        with pytest.raises(PoolRejected):
            simulated_gateway.deposit(pool_key, -601, 600, 10000)

    def test_withdraw_more_than_deposited_raises(self, simulated_gateway, pool_key):
        simulated_gateway.create_pool(pool_key)
        simulated_gateway.deposit(pool_key, -600, 600, 10000)
        with pytest.raises(PoolRejected):
            simulated_gateway.withdraw(pool_key, -600, 600, 10001)

    def test_fee_growth_snapshot_refreshes_on_zero_withdraw(self, simulated_gateway, pool_key):
        pool = simulated_gateway.create_pool(pool_key)
        simulated_gateway.deposit(pool_key, -600, 600, 1000)
        pool.donate(1000, 0)

        assert simulated_gateway.fee_growth_snapshot(pool_key, -600, 600) == (0, 0)
        assert simulated_gateway.withdraw(pool_key, -600, 600, 0) == (0, 0)
        assert simulated_gateway.fee_growth_snapshot(pool_key, -600, 600) == (Q128, 0)

    def test_fee_growth_snapshot_of_unknown_range_raises(self, simulated_gateway, pool_key):
        simulated_gateway.create_pool(pool_key)
        with pytest.raises(PoolRejected):
            simulated_gateway.fee_growth_snapshot(pool_key, -600, 600)

    def test_collect_payout_credits_recipient(self, simulated_gateway, pool_key, random_address):
        simulated_gateway.create_pool(pool_key)
        recipient = random_address()

        simulated_gateway.deposit(pool_key, -600, 600, 10000)
        amount_0, amount_1 = simulated_gateway.withdraw(pool_key, -600, 600, 10000)

        assert simulated_gateway.collect_payout(pool_key, -600, 600, recipient, amount_0, 1) == (amount_0, 1)
        assert simulated_gateway.balance_of(recipient, pool_key.token_0) == amount_0
        assert simulated_gateway.balance_of(recipient, pool_key.token_1) == 1
        assert simulated_gateway.balance_of(random_address(), pool_key.token_0) == 0


class TestCheckpointing:
    def test_rollback_restores_pools_and_balances(self, simulated_gateway, pool_key, random_address):
        pool = simulated_gateway.create_pool(pool_key)
        simulated_gateway.deposit(pool_key, -600, 600, 10000)
        checkpoint = simulated_gateway.checkpoint()

        simulated_gateway.withdraw(pool_key, -600, 600, 10000)
        simulated_gateway.collect_payout(pool_key, -600, 600, random_address(), 10, 10)
        assert pool.get_position(simulated_gateway.owner, -600, 600).liquidity == 0

        simulated_gateway.rollback(checkpoint)

        restored = simulated_gateway.get_pool(pool_key)
        assert restored.get_position(simulated_gateway.owner, -600, 600).liquidity == 10000
        assert restored.state.liquidity == 10000
        assert simulated_gateway.balances == {}

    def test_checkpoint_is_not_mutated_by_later_calls(self, simulated_gateway, pool_key):
        simulated_gateway.create_pool(pool_key)
        checkpoint = simulated_gateway.checkpoint()

        simulated_gateway.deposit(pool_key, -600, 600, 10000)
        simulated_gateway.rollback(checkpoint)
        simulated_gateway.deposit(pool_key, -600, 600, 500)
        simulated_gateway.rollback(checkpoint)

        assert simulated_gateway.get_pool(pool_key).state.liquidity == 0

    def test_rollback_keeps_pool_references_attached(self, simulated_gateway, pool_key, random_address):
        pool = simulated_gateway.create_pool(pool_key)
        checkpoint = simulated_gateway.checkpoint()

        simulated_gateway.deposit(pool_key, -600, 600, 10000)
        later_key = PoolKey.from_tokens(random_address(), random_address(), 3000)
        simulated_gateway.create_pool(later_key)

        simulated_gateway.rollback(checkpoint)

        assert simulated_gateway.get_pool(pool_key) is pool
        assert pool.state.liquidity == 0
        with pytest.raises(PoolRejected):
            simulated_gateway.get_pool(later_key)

        simulated_gateway.deposit(pool_key, -600, 600, 500)
        assert pool.state.liquidity == 500
