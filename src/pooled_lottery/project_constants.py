"""
Project-wide immutable parameters for the pooled lottery.

These values define the public rules of the draw.
Changing them changes eligibility and MUST be publicly announced.
"""

# Value units are wei; ether uses 18 decimals
ETHER_DECIMALS = 18
WEI_PER_ETHER = 10**ETHER_DECIMALS

# Minimum entry (exclusive): deposits must be strictly greater than this
MIN_ENTRY_WEI = WEI_PER_ETHER // 100  # 0.01 ether

# Development chain defaults
DEFAULT_ACCOUNTS = 10
DEFAULT_ACCOUNT_BALANCE_WEI = 100 * WEI_PER_ETHER
DEFAULT_GAS_PRICE_WEI = 20 * 10**9  # 20 gwei
GAS_PER_TX = 1_000_000
BLOCK_TIME_S = 12
GENESIS_TIMESTAMP = 1_700_000_000

DEFAULT_STATE_FILE = "lottery_state.json"
