import random

import pytest
from eth_utils import to_checksum_address

from amm_positions import PositionLedger
from amm_positions.simulation import SimulatedPoolGateway
from amm_positions.types import PoolKey

from .utils import encode_sqrt_price


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="pool_key")
def fixture_pool_key(random_address):
    return PoolKey.from_tokens(random_address(), random_address(), 3000)


@pytest.fixture(name="owner")
def fixture_owner(random_address):
    return random_address()


@pytest.fixture(name="simulated_gateway")
def fixture_simulated_gateway(random_address):
    return SimulatedPoolGateway(owner=random_address())


@pytest.fixture(name="initialize_simulated_ledger")
def fixture_initialize_simulated_ledger(simulated_gateway, pool_key):
    def _initialize_simulated_ledger(initial_price: int = encode_sqrt_price(1, 1), **kwargs):
        pool = simulated_gateway.create_pool(pool_key, initial_price)
        ledger = PositionLedger(simulated_gateway, initial_timestamp=1_700_000_000, initial_block=18_000_000, **kwargs)
        return ledger, pool

    return _initialize_simulated_ledger
