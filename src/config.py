"""
Configuration for the token launchpad.

Default values used when a launchpad YAML config (see config_loader.py) does not
override them. Review these before pointing the launchpad at mainnet.
"""

# Token defaults
# Decimals are fixed at mint creation and cannot be changed afterwards
DEFAULT_DECIMALS: int = 9
MAX_DECIMALS: int = 9
DEFAULT_STANDARD: str = "extended"  # "classic" (SPL Token + Metaplex) or "extended" (Token-2022)


# Network settings
DEFAULT_RPC_ENDPOINT: str = "https://api.devnet.solana.com"
COMMITMENT: str = "confirmed"  # Commitment used for lookups, anchors and confirmation
SKIP_PREFLIGHT: bool = False  # Keep preflight on so rejected batches fail before landing


# Confirmation
# Seconds between signature status polls; polling stops once the anchor's
# last valid block height is exceeded
CONFIRMATION_POLL_INTERVAL: int | float = 1.0


# Priority fee in microlamports per compute unit (0 means no compute budget instruction)
PRIORITY_FEE: int = 0


# Logging
LOG_LEVEL: str = "INFO"
