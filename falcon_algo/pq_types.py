"""
Falcon Algorand SDK - Data Types

Keys, derived accounts, send options and transaction groups.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from algosdk import encoding
from algosdk.transaction import Transaction

from .errors import InvalidKeySize, OperationCancelled

# Falcon-1024 sizes (bytes)
FALCON_PUBLIC_KEY_SIZE = 1793
FALCON_PRIVATE_KEY_SIZE = 2305
FALCON_MAX_SIGNATURE_SIZE = 1462


class Network(Enum):
    """Algorand networks"""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    BETANET = "betanet"
    DEVNET = "devnet"


@dataclass(frozen=True)
class FalconKeyPair:
    """
    Falcon-1024 key pair.

    The private key may be empty when only the public half is known
    (address derivation needs nothing else).
    """
    public_key: bytes
    private_key: bytes = b""

    def __post_init__(self):
        if len(self.public_key) != FALCON_PUBLIC_KEY_SIZE:
            raise InvalidKeySize(
                f"public key must be {FALCON_PUBLIC_KEY_SIZE} bytes, "
                f"got {len(self.public_key)}"
            )
        if self.private_key and len(self.private_key) != FALCON_PRIVATE_KEY_SIZE:
            raise InvalidKeySize(
                f"private key must be {FALCON_PRIVATE_KEY_SIZE} bytes, "
                f"got {len(self.private_key)}",
                step="sign",
            )

    @property
    def has_private_key(self) -> bool:
        return bool(self.private_key)


@dataclass(frozen=True)
class DerivedAccount:
    """
    Logic-sig account controlled by a Falcon public key.

    Fields:
      - address: Algorand address of the control program
      - counter: Search counter embedded in the program (0-255)
      - program: Control program bytecode
    """
    address: str
    counter: int
    program: bytes

    @property
    def raw_address(self) -> bytes:
        """32-byte address (program hash)."""
        return encoding.decode_address(self.address)


@dataclass
class SendOptions:
    """
    Per-call send options.

    fee is only used when flat_fee is set; otherwise the suggested
    per-byte fee applies. filler_count and max_rounds fall back to the
    configured defaults when None.
    """
    network: Network = Network.MAINNET
    fee: int = 0
    flat_fee: bool = False
    note: bytes = b""
    filler_count: Optional[int] = None
    max_rounds: Optional[int] = None


@dataclass(frozen=True)
class TransactionGroup:
    """
    Atomic transaction group.

    Element 0 is the intended payment; the rest are zero-amount fillers.
    Every element carries the same group id.
    """
    transactions: Tuple[Transaction, ...]

    @property
    def intended(self) -> Transaction:
        return self.transactions[0]

    @property
    def fillers(self) -> Tuple[Transaction, ...]:
        return self.transactions[1:]

    @property
    def group_id(self) -> bytes:
        return self.transactions[0].group

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self):
        return iter(self.transactions)


@dataclass
class CancelToken:
    """
    Cancellation signal for a send.

    Set the event (or let the deadline pass) to abort the pipeline at the
    next step boundary or polling round.

    Usage:
        token = CancelToken.with_timeout(60)
        send(keypair, to, amount, cancel=token)
    """
    event: threading.Event = field(default_factory=threading.Event)
    deadline: Optional[float] = None  # time.monotonic() value

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self):
        self.event.set()

    @property
    def cancelled(self) -> bool:
        if self.event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self, step: str):
        """Raise OperationCancelled if the token has fired."""
        if self.event.is_set():
            raise OperationCancelled("operation cancelled", step=step)
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise OperationCancelled("deadline exceeded", step=step)
