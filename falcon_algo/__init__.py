"""
Falcon Algorand SDK

Algorand accounts controlled by Falcon-1024 (post-quantum) keys.

Architecture:
  - The account is a logic-sig derived from the Falcon public key; it
    approves a transaction only with a Falcon signature of the txid
  - The derived address is never a valid ed25519 point, so no ed25519
    private key exists for it
  - Spends go out as an atomic group: the payment plus filler
    transactions that pool enough logic-sig budget for the ~3 KB program

Usage:
    from falcon_algo import (
        Network, SendOptions, generate_keypair, get_address_from_public_key, send,
    )

    keypair = generate_keypair()
    address = get_address_from_public_key(keypair.public_key)

    # After funding the address. The signer must produce Algorand's
    # deterministic Falcon signatures; without signer= it is loaded
    # from FALCON_SIGNER ("module:callable").
    txid = send(keypair, "RECEIVER...", 1_000_000, SendOptions(network=Network.TESTNET),
                signer=my_signer)
"""

from .pq_types import (
    FalconKeyPair,
    DerivedAccount,
    SendOptions,
    TransactionGroup,
    CancelToken,
    Network,
)
from .errors import (
    FalconAlgoError,
    LedgerError,
    InvalidKeySize,
    DerivationExhausted,
    NetworkParamsUnavailable,
    CompileFailed,
    SignatureFailure,
    SubmissionRejected,
    ConfirmationTimeout,
    OperationCancelled,
    ConfigurationError,
)
from .falcon import Signer, generate_keypair, load_signer, configured_signer
from .logicsig import synthesize, synthesize_compiled, render_source, program_address
from .address import (
    search,
    derive_account,
    derive_account_with_compilation,
    get_address_from_public_key,
)
from .ledger_client import LedgerClient, get_ledger_client
from .group import GroupBuilder
from .sender import send, sign_group, submit_group

__version__ = "0.1.0"
__all__ = [
    # Types
    "FalconKeyPair", "DerivedAccount", "SendOptions", "TransactionGroup",
    "CancelToken", "Network",
    # Errors
    "FalconAlgoError", "LedgerError", "InvalidKeySize", "DerivationExhausted",
    "NetworkParamsUnavailable", "CompileFailed", "SignatureFailure",
    "SubmissionRejected", "ConfirmationTimeout", "OperationCancelled",
    "ConfigurationError",
    # Derivation
    "generate_keypair", "synthesize", "synthesize_compiled", "render_source",
    "program_address", "search", "derive_account",
    "derive_account_with_compilation", "get_address_from_public_key",
    # Sending
    "LedgerClient", "get_ledger_client", "GroupBuilder",
    "send", "sign_group", "submit_group", "Signer", "load_signer", "configured_signer",
]
