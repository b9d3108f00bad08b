"""
Falcon Algorand SDK - Falcon-1024 primitive

Key generation and message signatures go through pqcrypto's Falcon-1024
bindings. Those signatures are randomized, while the AVM's falcon_verify
only accepts Algorand's deterministic compressed format. Transaction
signing therefore takes an explicit Signer, loaded from a
"module:attribute" path (FALCON_SIGNER or --signer).
"""

import importlib
import logging
from typing import Callable

from algosdk import encoding
from pqcrypto.sign import falcon_1024

from . import config
from .errors import ConfigurationError, SignatureFailure
from .pq_types import FalconKeyPair, FALCON_PRIVATE_KEY_SIZE

logger = logging.getLogger(__name__)

# (private_key, message) -> signature
Signer = Callable[[bytes, bytes], bytes]


def generate_keypair() -> FalconKeyPair:
    """Generate a fresh Falcon-1024 key pair from OS entropy."""
    public_key, private_key = falcon_1024.generate_keypair()
    return FalconKeyPair(public_key=public_key, private_key=private_key)


def sign(private_key: bytes, message: bytes) -> bytes:
    """
    Sign message with a Falcon-1024 private key.

    Randomized: two calls give different signatures. Not accepted by
    falcon_verify on chain.

    Args:
        private_key: 2305-byte Falcon-1024 private key
        message: Bytes to sign

    Returns:
        Signature bytes

    Raises:
        SignatureFailure: Wrong key size or the primitive failed
    """
    if len(private_key) != FALCON_PRIVATE_KEY_SIZE:
        raise SignatureFailure(
            f"private key must be {FALCON_PRIVATE_KEY_SIZE} bytes, got {len(private_key)}"
        )
    try:
        return falcon_1024.sign(private_key, message)
    except Exception as e:
        raise SignatureFailure(f"falcon signing failed: {e}") from e


def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Check a Falcon-1024 signature. Returns False on any mismatch."""
    try:
        return bool(falcon_1024.verify(public_key, message, signature))
    except Exception as e:
        logger.debug(f"falcon verify rejected signature: {e}")
        return False


def message_digest(message: bytes) -> bytes:
    """SHA-512/256 of message, the bytes that sign_message signs."""
    return encoding.checksum(message)


def sign_message(private_key: bytes, message: bytes) -> bytes:
    return sign(private_key, message_digest(message))


def verify_message(public_key: bytes, message: bytes, signature: bytes) -> bool:
    return verify(public_key, message_digest(message), signature)


def load_signer(path: str) -> Signer:
    """
    Import a transaction signer from "package.module:callable".

    Raises:
        ConfigurationError: Malformed path, import failure or not callable
    """
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(f"signer must look like 'module:callable', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import signer module {module_name}: {e}") from e
    signer = getattr(module, attribute, None)
    if not callable(signer):
        raise ConfigurationError(f"{path} is not a callable signer")
    logger.debug(f"Loaded transaction signer {path}")
    return signer


def configured_signer() -> Signer:
    """
    Signer named by FALCON_SIGNER.

    Raises:
        ConfigurationError: FALCON_SIGNER unset or unusable
    """
    path = config.signer_path()
    if not path:
        raise ConfigurationError(
            "no deterministic Falcon signer configured (set FALCON_SIGNER=module:callable)"
        )
    return load_signer(path)
