from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address as tca

# Major ERC20 Tokens
USDC_ADDRESS: ChecksumAddress = tca("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
WETH_ADDRESS: ChecksumAddress = tca("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")


# Uniswap Addresses
UNISWAP_V3_FACTORY = tca("0x1F98431c8aD98523631AE4a59f267346ea31F984")

# keccak256 of the pool creation code, used when deriving pool addresses through CREATE2
POOL_INIT_CODE_HASH = bytes.fromhex("e34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54")
