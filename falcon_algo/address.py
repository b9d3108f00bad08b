"""
Falcon Algorand SDK - Address Derivation

Derives the Algorand account controlled by a Falcon public key.

The counter embedded in the control program is incremented until the
program address is NOT a valid edwards25519 point. Such an address cannot
be an ed25519 public key, so no ed25519 private key exists for it, not even
for an adversary able to break ed25519. Only the logic-sig plus a Falcon
signature can authorize spends.

About half of all addresses are off the curve, so two attempts suffice on
average. The search is deterministic: the same public key always yields
the same (counter, address).
"""

import functools
import logging
from typing import Callable, Optional

from algosdk import encoding

from . import logicsig
from .config import COMPILER_NETWORK, SEARCH_BOUND
from .curve import is_on_curve
from .errors import DerivationExhausted, InvalidKeySize
from .ledger_client import get_ledger_client
from .pq_types import DerivedAccount, FALCON_PUBLIC_KEY_SIZE

logger = logging.getLogger(__name__)

Synthesizer = Callable[[bytes, int], bytes]


def check_counter(public_key: bytes, counter: int,
                  synthesize: Synthesizer = logicsig.synthesize) -> Optional[DerivedAccount]:
    """
    Try a single counter value.

    Returns:
        The derived account, or None if its address is on the curve
    """
    program = synthesize(public_key, counter)
    address = logicsig.program_address(program)
    if is_on_curve(encoding.decode_address(address)):
        return None
    return DerivedAccount(address=address, counter=counter, program=program)


def search(public_key: bytes,
           synthesize: Synthesizer = logicsig.synthesize) -> DerivedAccount:
    """
    Find the first counter whose program address is off the curve.

    Args:
        public_key: 1793-byte Falcon public key
        synthesize: Program builder (fast or compiled path)

    Returns:
        DerivedAccount for the first suitable counter

    Raises:
        InvalidKeySize: Public key is not 1793 bytes
        DerivationExhausted: All 256 counters give on-curve addresses
    """
    if len(public_key) != FALCON_PUBLIC_KEY_SIZE:
        raise InvalidKeySize(
            f"public key must be {FALCON_PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        )
    for counter in range(SEARCH_BOUND):
        account = check_counter(public_key, counter, synthesize)
        if account is not None:
            logger.debug(f"Derived {account.address} at counter {counter}")
            return account
    raise DerivationExhausted("unsuitable Falcon public key for Algorand address")


def derive_account(public_key: bytes) -> DerivedAccount:
    """Derive the account using the precompiled template."""
    return search(public_key)


def derive_account_with_compilation(public_key: bytes, ledger=None) -> DerivedAccount:
    """
    Derive the account compiling every candidate program through algod.

    Gives the same result as derive_account(); used to check the
    precompiled template against the node's assembler. Without a ledger
    the BetaNet compiler is used.
    """
    if ledger is None:
        ledger = get_ledger_client(COMPILER_NETWORK)
    return search(public_key, functools.partial(logicsig.synthesize_compiled, ledger=ledger))


def get_address_from_public_key(public_key: bytes) -> str:
    """Algorand address controlled by a Falcon public key."""
    return derive_account(public_key).address
