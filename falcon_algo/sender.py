"""
Falcon Algorand SDK - Group Signer & Submitter

Spends from a Falcon-controlled account:

  1. derive the control program and address from the public key
  2. build payment + filler group
  3. sign the payment's transaction id with Falcon, pass the signature as
     arg 0 of the control program; sign fillers with the filler program
  4. submit the whole group as one unit and wait for confirmation

The ledger commits the whole group or none of it, so a call either returns
a confirmed transaction id or raises an error naming the failed step.
"""

import base64
import logging
from typing import Optional, Tuple

from algosdk import constants, encoding
from algosdk.transaction import LogicSig, LogicSigTransaction, Transaction

from . import config, falcon, logicsig
from .falcon import Signer
from .address import derive_account
from .errors import (
    ConfirmationTimeout,
    FalconAlgoError,
    LedgerError,
    SignatureFailure,
    SubmissionRejected,
)
from .group import GroupBuilder
from .ledger_client import get_ledger_client
from .pq_types import CancelToken, DerivedAccount, FalconKeyPair, SendOptions, TransactionGroup

logger = logging.getLogger(__name__)


def transaction_id(txn: Transaction) -> bytes:
    """Raw 32-byte transaction id, the value TEAL's `txn TxID` pushes."""
    encoded = base64.b64decode(encoding.msgpack_encode(txn))
    return encoding.checksum(constants.txid_prefix + encoded)


def _encode_signed(stxn: LogicSigTransaction) -> bytes:
    return base64.b64decode(encoding.msgpack_encode(stxn))


def _sign_txid(signer: Signer, private_key: bytes, txid: bytes) -> bytes:
    # falcon_verify only accepts the deterministic encoding: a second
    # signature over the same txid must be identical
    try:
        signature = signer(private_key, txid)
        again = signer(private_key, txid)
    except SignatureFailure:
        raise
    except Exception as e:
        raise SignatureFailure(f"falcon signing failed: {e}") from e
    if signature != again:
        raise SignatureFailure("signer is not deterministic; falcon_verify would reject it")
    return signature


def sign_group(group: TransactionGroup, account: DerivedAccount, keypair: FalconKeyPair,
               signer: Signer) -> Tuple[str, bytes]:
    """
    Sign every transaction of a send group.

    Args:
        group: Group built by GroupBuilder
        account: Account derived from keypair.public_key
        keypair: Falcon key pair with private key
        signer: Deterministic Falcon signer (private_key, message) -> signature

    Returns:
        (txid of the payment, concatenated signed transactions)

    Raises:
        SignatureFailure: No private key, the primitive failed, or it is
            not deterministic
    """
    intended = group.intended
    if intended.sender != account.address:
        raise ValueError(f"group sender {intended.sender} is not {account.address}")
    if not keypair.has_private_key:
        raise SignatureFailure("private key required to sign")

    signature = _sign_txid(signer, keypair.private_key, transaction_id(intended))

    lsig = LogicSig(account.program, args=[signature])
    parts = [_encode_signed(LogicSigTransaction(intended, lsig))]

    filler_lsig = LogicSig(logicsig.FILLER_PROGRAM)
    for filler in group.fillers:
        parts.append(_encode_signed(LogicSigTransaction(filler, filler_lsig)))

    txid = intended.get_txid()
    logger.debug(f"Signed group for {txid} ({len(signature)}-byte signature)")
    return txid, b"".join(parts)


def submit_group(ledger, raw: bytes, txid: str, max_rounds: int,
                 cancel: Optional[CancelToken] = None) -> dict:
    """
    Submit a signed group and wait for it to be confirmed.

    Returns:
        Pending transaction info of the confirmed payment

    Raises:
        SubmissionRejected: Node refused the group
        ConfirmationTimeout: Not confirmed within max_rounds
        OperationCancelled: Token fired
    """
    if cancel is not None:
        cancel.check("submit")
    try:
        ledger.submit_raw_group(raw)
    except LedgerError as e:
        raise SubmissionRejected(e.message) from e
    logger.info(f"Submitted group {txid}, waiting up to {max_rounds} rounds")

    if cancel is not None:
        cancel.check("confirm")
    try:
        return ledger.wait_for_confirmation(txid, max_rounds, cancel)
    except LedgerError as e:
        raise ConfirmationTimeout(f"confirmation not observed: {e.message}") from e


def send(keypair: FalconKeyPair, receiver: str, amount: int,
         options: Optional[SendOptions] = None, ledger=None,
         signer: Optional[Signer] = None,
         cancel: Optional[CancelToken] = None) -> str:
    """
    Send ALGO from the account controlled by keypair.

    Args:
        keypair: Falcon key pair (private key required)
        receiver: Destination address
        amount: microAlgos, must be positive
        options: Network, fee mode, note, filler count, confirmation bound
        ledger: algod client (defaults to the options.network client)
        signer: Deterministic Falcon signer (defaults to FALCON_SIGNER)
        cancel: Optional cancellation token

    Returns:
        Transaction id of the confirmed payment

    Raises:
        FalconAlgoError: Typed error naming the failed step
        ValueError: Bad amount, receiver or note
    """
    options = options or SendOptions()
    cancel = cancel or CancelToken()
    if signer is None:
        signer = falcon.configured_signer()
    filler_count = options.filler_count
    if filler_count is None:
        filler_count = config.filler_txn_count()
    max_rounds = options.max_rounds or config.DEFAULT_CONFIRMATION_ROUNDS

    cancel.check("derive")
    account = derive_account(keypair.public_key)

    if ledger is None:
        ledger = get_ledger_client(options.network)

    cancel.check("build")
    group = GroupBuilder(ledger).build(account.address, receiver, amount, options, filler_count)

    cancel.check("sign")
    txid, raw = sign_group(group, account, keypair, signer)

    try:
        submit_group(ledger, raw, txid, max_rounds, cancel)
    except FalconAlgoError as e:
        logger.error(f"Send of {txid} failed at {e.step}: {e.message}")
        raise
    return txid
