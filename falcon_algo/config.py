"""
Falcon Algorand SDK - Configuration

Network endpoints and protocol policy constants.

Environment overrides:
    ALGOD_URL            algod endpoint used for every network (required for devnet)
    ALGOD_TOKEN          API token for ALGOD_URL (may be empty)
    FALCON_FILLER_TXNS   number of filler transactions added to a send group
    FALCON_HTTP_TIMEOUT  per-request HTTP timeout in seconds
    FALCON_SIGNER        deterministic Falcon transaction signer, "module:callable"
"""

import os
from typing import Dict, Tuple

from .errors import ConfigurationError
from .pq_types import Network

# ═══════════════════════════════════════════════════════════════════════════════
# NETWORKS
# ═══════════════════════════════════════════════════════════════════════════════

# nodely.dev public algod endpoints
NODELY_MAINNET_ALGOD_URL = "https://mainnet-api.4160.nodely.dev"
NODELY_TESTNET_ALGOD_URL = "https://testnet-api.4160.nodely.dev"
NODELY_BETANET_ALGOD_URL = "https://betanet-api.4160.nodely.dev"

ALGOD_URLS: Dict[Network, str] = {
    Network.MAINNET: NODELY_MAINNET_ALGOD_URL,
    Network.TESTNET: NODELY_TESTNET_ALGOD_URL,
    Network.BETANET: NODELY_BETANET_ALGOD_URL,
}

# BetaNet carries the newest opcodes (falcon_verify)
COMPILER_NETWORK = Network.BETANET

# ═══════════════════════════════════════════════════════════════════════════════
# PROTOCOL POLICY
# ═══════════════════════════════════════════════════════════════════════════════

# Counter is a single byte
SEARCH_BOUND = 256

# Logic-sig bytes each group member contributes to the pooled size limit
MAX_LSIG_SIZE_PER_TXN = 1000

# Three fillers cover the ~3 KB program + signature
DEFAULT_FILLER_TXNS = 3

# Rounds to wait for confirmation before giving up
DEFAULT_CONFIRMATION_ROUNDS = 9

DEFAULT_HTTP_TIMEOUT = 30

DEFAULT_CONFIG = {
    "network": Network.MAINNET.value,
    "filler_txns": DEFAULT_FILLER_TXNS,
    "confirmation_rounds": DEFAULT_CONFIRMATION_ROUNDS,
    "http_timeout": DEFAULT_HTTP_TIMEOUT,
}


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")
    return value


def filler_txn_count() -> int:
    """Configured number of filler transactions per send group."""
    return _int_from_env("FALCON_FILLER_TXNS", DEFAULT_FILLER_TXNS)


def http_timeout() -> int:
    return _int_from_env("FALCON_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)


def signer_path() -> str:
    return os.environ.get("FALCON_SIGNER", "").strip()


def algod_endpoint(network: Network) -> Tuple[str, str]:
    """
    Resolve the algod endpoint for a network.

    ALGOD_URL (with ALGOD_TOKEN, which may be empty) overrides the public
    endpoints for every network. DevNet has no public endpoint.

    Args:
        network: Target network

    Returns:
        (url, token)

    Raises:
        ConfigurationError: DevNet requested without ALGOD_URL
    """
    url = os.environ.get("ALGOD_URL", "")
    if url:
        return url, os.environ.get("ALGOD_TOKEN", "")
    if network == Network.DEVNET:
        raise ConfigurationError("ALGOD_URL not set for devnet")
    return ALGOD_URLS[network], ""
