"""
Falcon Algorand SDK - Transaction Group Builder

The control program plus its Falcon signature is ~3 KB, while each
transaction contributes only 1000 bytes to the group's pooled logic-sig
size limit. The payment is therefore grouped with zero-amount filler
transactions signed by a public, secret-free program. The payment pays
the fillers' minimum fees so the group as a whole is well funded.

Transactions are treated as values: every helper returns new objects and
group stamping is the final step.
"""

import copy
import logging
import math
from typing import List, Sequence, Tuple

from algosdk import constants, encoding
from algosdk.transaction import PaymentTxn, SuggestedParams, Transaction, calculate_group_id

from . import logicsig
from .config import MAX_LSIG_SIZE_PER_TXN
from .errors import ConfigurationError, LedgerError, NetworkParamsUnavailable
from .pq_types import FALCON_MAX_SIGNATURE_SIZE, SendOptions, TransactionGroup

logger = logging.getLogger(__name__)

MAX_NOTE_SIZE = constants.note_max_length
MAX_GROUP_SIZE = constants.tx_group_limit


def required_filler_count(program_size: int = logicsig.PROGRAM_SIZE,
                          signature_size: int = FALCON_MAX_SIGNATURE_SIZE,
                          max_lsig_size: int = MAX_LSIG_SIZE_PER_TXN) -> int:
    """
    Fillers needed so the group's pooled logic-sig budget covers
    program + signature.
    """
    group_size = math.ceil((program_size + signature_size) / max_lsig_size)
    return max(group_size - 1, 0)


def validate_filler_count(filler_count: int):
    """
    Raises:
        ConfigurationError: Too few fillers for the logic-sig size, or a
            group larger than the ledger allows
    """
    required = required_filler_count()
    if filler_count < required:
        raise ConfigurationError(
            f"{filler_count} filler transactions cannot cover a "
            f"{logicsig.PROGRAM_SIZE + FALCON_MAX_SIGNATURE_SIZE}-byte logic-sig "
            f"(need at least {required})"
        )
    if filler_count + 1 > MAX_GROUP_SIZE:
        raise ConfigurationError(
            f"group of {filler_count + 1} exceeds the {MAX_GROUP_SIZE} transaction limit"
        )


def make_payment(sp: SuggestedParams, sender: str, receiver: str, amount: int,
                 options: SendOptions) -> PaymentTxn:
    """Intended payment, fee from suggested params or options.fee when flat."""
    if options.flat_fee:
        sp = copy.copy(sp)
        sp.flat_fee = True
        sp.fee = options.fee
    return PaymentTxn(sender, sp, receiver, amount, note=options.note or None)


def make_fillers(sp: SuggestedParams, count: int) -> List[PaymentTxn]:
    """
    Zero-amount self payments from the filler address, flat fee 0.
    Each carries a distinct one-byte note so their ids differ.
    """
    filler_sp = copy.copy(sp)
    filler_sp.flat_fee = True
    filler_sp.fee = 0
    address = logicsig.filler_address()
    return [
        PaymentTxn(address, filler_sp, address, 0, note=bytes([i]))
        for i in range(count)
    ]


def with_added_fee(txn: Transaction, extra: int) -> Transaction:
    updated = copy.copy(txn)
    updated.fee = txn.fee + extra
    return updated


def stamp_group(txns: Sequence[Transaction]) -> Tuple[Transaction, ...]:
    """Compute the group id over txns (in order) and return stamped copies."""
    unstamped = []
    for txn in txns:
        cleared = copy.copy(txn)
        cleared.group = None
        unstamped.append(cleared)

    gid = calculate_group_id(unstamped)

    stamped = []
    for txn in unstamped:
        txn.group = gid
        stamped.append(txn)
    return tuple(stamped)


class GroupBuilder:
    """
    Builds the atomic send group.

    Usage:
        builder = GroupBuilder(ledger)
        group = builder.build(account.address, "RECEIVER...", 1_000_000,
                              SendOptions(), filler_count=3)
    """

    def __init__(self, ledger):
        """
        Args:
            ledger: Client exposing fetch_suggested_params()
        """
        self.ledger = ledger

    def fetch_params(self) -> SuggestedParams:
        try:
            return self.ledger.fetch_suggested_params()
        except LedgerError as e:
            raise NetworkParamsUnavailable(e.message) from e

    def build(self, sender: str, receiver: str, amount: int,
              options: SendOptions, filler_count: int) -> TransactionGroup:
        """
        Build payment + fillers as one group.

        Args:
            sender: Derived logic-sig address
            receiver: Destination address
            amount: microAlgos, must be positive
            options: Fee mode and note
            filler_count: Number of filler transactions

        Returns:
            TransactionGroup with the payment first

        Raises:
            ValueError: Bad amount, receiver or note
            ConfigurationError: Unusable filler_count
            NetworkParamsUnavailable: Suggested params could not be fetched
        """
        if not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"amount must be a positive integer, got {amount!r}")
        if not encoding.is_valid_address(receiver):
            raise ValueError(f"invalid receiver address: {receiver!r}")
        if len(options.note) > MAX_NOTE_SIZE:
            raise ValueError(f"note exceeds {MAX_NOTE_SIZE} bytes")
        validate_filler_count(filler_count)

        sp = self.fetch_params()

        payment = make_payment(sp, sender, receiver, amount, options)
        payment = with_added_fee(payment, filler_count * sp.min_fee)
        fillers = make_fillers(sp, filler_count)

        group = TransactionGroup(stamp_group([payment] + fillers))
        logger.info(
            f"Built group of {len(group)} for {amount} microAlgos "
            f"{sender[:8]}... -> {receiver[:8]}... (fee {group.intended.fee})"
        )
        return group
