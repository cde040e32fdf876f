from math import isqrt

MIN_TICK = {1: -887272, 10: -887270, 60: -887220, 200: -887200}
MAX_TICK = {1: 887272, 10: 887270, 60: 887220, 200: 887200}


def encode_sqrt_price(reserve_1: int, reserve_0: int) -> int:
    """Returns floor(sqrt(reserve_1 / reserve_0) * 2 ** 96)"""
    return isqrt((reserve_1 << 192) // reserve_0)


def expand_to_decimals(num: int, decimals: int = 18) -> int:
    return (10**decimals) * num


def uint_max(bits: int) -> int:
    return 2**bits - 1
