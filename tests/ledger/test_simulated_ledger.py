import pytest

from amm_positions.exceptions import PoolRejected, SlippageExceeded
from amm_positions.math import UINT_128_MAX
from amm_positions.types import PoolKey


class TestSharedRanges:
    def test_positions_in_the_same_range_split_fees(self, initialize_simulated_ledger, pool_key, random_address):
        ledger, pool = initialize_simulated_ledger()
        alice, bob = random_address(), random_address()

        alice_id, alice_liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, alice)
        bob_id, bob_liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, bob)
        assert alice_liquidity == bob_liquidity
        assert pool.state.liquidity == alice_liquidity + bob_liquidity

        pool.donate(1000, 2000)

        alice_fees = ledger.collect(alice_id, alice, UINT_128_MAX, UINT_128_MAX, alice)
        bob_fees = ledger.collect(bob_id, bob, UINT_128_MAX, UINT_128_MAX, bob)

        assert alice_fees == bob_fees
        assert 499 <= alice_fees[0] <= 500
        assert 999 <= alice_fees[1] <= 1000

    def test_ledger_fees_never_exceed_pool_fees(self, initialize_simulated_ledger, pool_key, random_address):
        ledger, pool = initialize_simulated_ledger()
        recipient = random_address()

        token_ids = [ledger.open(pool_key, -600, 600, 10**6 + i, 10**6, recipient)[0] for i in range(3)]
        pool.donate(10**6 + 7, 10**6 + 11)

        collected_0, collected_1 = 0, 0
        for token_id in token_ids:
            amount_0, amount_1 = ledger.collect(token_id, recipient, UINT_128_MAX, UINT_128_MAX, recipient)
            collected_0 += amount_0
            collected_1 += amount_1

        assert collected_0 <= 10**6 + 7
        assert collected_1 <= 10**6 + 11
        assert collected_0 >= 10**6 + 7 - 3


class TestFeeAccrual:
    def test_accrual_is_additive_across_operations(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()

        token_id, liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)
        pool.donate(1000, 0)

        ledger.increase(token_id, 10**6, 10**6)
        pool.donate(1000, 0)

        withdrawn_0, _ = ledger.decrease(token_id, liquidity, owner)
        pool.donate(1000, 0)

        collected_0, _ = ledger.collect(token_id, owner, UINT_128_MAX, UINT_128_MAX, owner)
        fees_0 = collected_0 - withdrawn_0

        assert 2997 <= fees_0 <= 3000
        assert ledger.get_position(token_id).tokens_owed_0 == 0
        assert pool.get_position(ledger.gateway.owner, -600, 600).tokens_owed_0 == 0

    def test_out_of_range_position_earns_nothing(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()

        in_range_id, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)
        above_id, *_ = ledger.open(pool_key, 600, 1800, 10**6, 0, owner)

        pool.move_to_tick(1200)
        pool.donate(1000, 1000)

        assert ledger.collect(in_range_id, owner, UINT_128_MAX, UINT_128_MAX, owner) == (0, 0)

        amount_0, amount_1 = ledger.collect(above_id, owner, UINT_128_MAX, UINT_128_MAX, owner)
        assert 999 <= amount_0 <= 1000
        assert 999 <= amount_1 <= 1000

    def test_position_amounts_follow_price(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()
        token_id, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)

        amount_0, amount_1 = ledger.position_amounts(token_id)
        assert amount_0 > 0 and amount_1 > 0

        pool.move_to_tick(1200)
        amount_0, amount_1 = ledger.position_amounts(token_id)
        assert amount_0 == 0 and amount_1 > 0


class TestAtomicity:
    def test_slippage_rolls_back_pool_state(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()
        _, liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)

        with pytest.raises(SlippageExceeded):
            ledger.open(pool_key, -600, 600, 10**6, 10**6, owner, amount_0_min=10**7)

        assert pool.state.liquidity == liquidity
        assert pool.get_position(ledger.gateway.owner, -600, 600).liquidity == liquidity
        assert ledger.next_token_id == 2
        assert len(ledger.registry) == 1

    def test_decrease_slippage_rolls_back_pool_state(self, initialize_simulated_ledger, pool_key, owner):
        ledger, _ = initialize_simulated_ledger()
        token_id, liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)

        with pytest.raises(SlippageExceeded):
            ledger.decrease(token_id, liquidity, owner, amount_1_min=10**7)

        pool = ledger.gateway.get_pool(pool_key)
        assert pool.state.liquidity == liquidity
        assert pool.get_position(ledger.gateway.owner, -600, 600).tokens_owed_0 == 0
        assert ledger.get_position(token_id).liquidity == liquidity

    def test_misaligned_ticks_are_rejected_by_pool(self, initialize_simulated_ledger, pool_key, owner):
        ledger, _ = initialize_simulated_ledger()

        with pytest.raises(PoolRejected):
            ledger.open(pool_key, -601, 600, 10**6, 10**6, owner)

        assert len(ledger.registry) == 0
        assert ledger.next_token_id == 1
        assert ledger.gateway.get_pool(pool_key).state.liquidity == 0

    def test_unknown_pool_is_rejected(self, initialize_simulated_ledger, random_address, owner):
        ledger, _ = initialize_simulated_ledger()
        missing_key = PoolKey.from_tokens(random_address(), random_address(), 500)

        with pytest.raises(PoolRejected):
            ledger.open(missing_key, -600, 600, 10**6, 10**6, owner)
        assert len(ledger.registry) == 0

    def test_pool_reference_survives_rollback(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()
        token_id, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)

        with pytest.raises(SlippageExceeded):
            ledger.increase(token_id, 10**6, 10**6, amount_0_min=10**9)

        assert pool is ledger.gateway.get_pool(pool_key)

        pool.donate(1000, 1000)
        amount_0, amount_1 = ledger.collect(token_id, owner, UINT_128_MAX, UINT_128_MAX, owner)

        assert 999 <= amount_0 <= 1000
        assert 999 <= amount_1 <= 1000


class TestLifecycle:
    def test_collect_pays_recipient(self, initialize_simulated_ledger, pool_key, owner, random_address):
        ledger, _ = initialize_simulated_ledger()
        recipient = random_address()

        token_id, liquidity, *_ = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)
        ledger.decrease(token_id, liquidity, owner)
        amount_0, amount_1 = ledger.collect(token_id, recipient, UINT_128_MAX, UINT_128_MAX, owner)

        assert ledger.gateway.balance_of(recipient, pool_key.token_0) == amount_0
        assert ledger.gateway.balance_of(recipient, pool_key.token_1) == amount_1
        assert ledger.gateway.balance_of(owner, pool_key.token_0) == 0

    def test_open_drain_and_close(self, initialize_simulated_ledger, pool_key, owner):
        ledger, pool = initialize_simulated_ledger()

        token_id, liquidity, deposited_0, deposited_1 = ledger.open(pool_key, -600, 600, 10**6, 10**6, owner)
        withdrawn_0, withdrawn_1 = ledger.decrease(token_id, liquidity, owner)
        assert deposited_0 - withdrawn_0 in (0, 1)
        assert deposited_1 - withdrawn_1 in (0, 1)

        assert ledger.collect(token_id, owner, UINT_128_MAX, UINT_128_MAX, owner) == (withdrawn_0, withdrawn_1)
        ledger.close(token_id, owner)

        assert ledger.positions == {}
        assert pool.state.liquidity == 0
