"""
Falcon Algorand SDK - Control Program Synthesizer

Builds the logic-sig program that approves a transaction only when arg 0
is a valid Falcon signature of the transaction id.

Two paths produce the same bytes:
  - synthesize():          patches a precompiled template (no I/O)
  - synthesize_compiled(): renders TEAL source and compiles it via algod

Template (AVM version 12, pinned):

    offset | bytes          | teal
    -------+----------------+----------------------------------------
         0 | 0c             | #pragma version 12
         1 | 26 01 01 00    | bytecblock 0x00        (counter at 4)
         5 | 31 17          | txn TxID
         7 | 2d             | arg 0
         8 | 80 81 0e ...   | pushbytes <1793-byte public key>
      1804 | 85             | falcon_verify
"""

import logging

from algosdk.transaction import LogicSig

from .errors import CompileFailed, InvalidKeySize, LedgerError
from .pq_types import FALCON_PUBLIC_KEY_SIZE

logger = logging.getLogger(__name__)

AVM_VERSION = 12

COUNTER_OFFSET = 4

# Everything before the public key; pushbytes length 1793 is varint 81 0e
PROGRAM_PREFIX = bytes([
    AVM_VERSION,
    0x26, 0x01, 0x01, 0x00,
    0x31, 0x17,
    0x2d,
    0x80, 0x81, 0x0e,
])
PROGRAM_SUFFIX = bytes([0x85])

PROGRAM_SIZE = len(PROGRAM_PREFIX) + FALCON_PUBLIC_KEY_SIZE + len(PROGRAM_SUFFIX)

PROGRAM_TEMPLATE = """#pragma version 12
bytecblock TMPL_COUNTER // counter
txn TxID
arg 0
pushbytes TMPL_FALCON_PUBLIC_KEY
falcon_verify
"""

# Public program: approves only zero-amount, zero-fee payments that can
# neither rekey nor close the filler account.
FILLER_SOURCE = """#pragma version 12
txn TypeEnum
pushint 1 // pay
==
txn Amount
!
&&
txn Fee
!
&&
txn RekeyTo
global ZeroAddress
==
&&
txn CloseRemainderTo
global ZeroAddress
==
&&
"""
FILLER_PROGRAM = bytes([
    AVM_VERSION,
    0x31, 0x10, 0x81, 0x01, 0x12,          # txn TypeEnum == pay
    0x31, 0x08, 0x14, 0x10,                # && !txn Amount
    0x31, 0x01, 0x14, 0x10,                # && !txn Fee
    0x31, 0x20, 0x32, 0x03, 0x12, 0x10,    # && txn RekeyTo == ZeroAddress
    0x31, 0x09, 0x32, 0x03, 0x12, 0x10,    # && txn CloseRemainderTo == ZeroAddress
])


def _check_inputs(public_key: bytes, counter: int):
    if len(public_key) != FALCON_PUBLIC_KEY_SIZE:
        raise InvalidKeySize(
            f"public key must be {FALCON_PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
        )
    if not 0 <= counter <= 0xff:
        raise ValueError(f"counter must fit in one byte, got {counter}")


def synthesize(public_key: bytes, counter: int) -> bytes:
    """
    Build the control program by patching the precompiled template.

    Args:
        public_key: 1793-byte Falcon public key
        counter: Search counter (0-255)

    Returns:
        Program bytecode

    Raises:
        InvalidKeySize: Public key is not 1793 bytes
    """
    _check_inputs(public_key, counter)
    prefix = bytearray(PROGRAM_PREFIX)
    prefix[COUNTER_OFFSET] = counter
    return bytes(prefix) + bytes(public_key) + PROGRAM_SUFFIX


def render_source(public_key: bytes, counter: int) -> str:
    """TEAL source of the control program for (public_key, counter)."""
    _check_inputs(public_key, counter)
    source = PROGRAM_TEMPLATE.replace("TMPL_COUNTER", f"0x{counter:02x}", 1)
    return source.replace("TMPL_FALCON_PUBLIC_KEY", "0x" + bytes(public_key).hex(), 1)


def synthesize_compiled(public_key: bytes, counter: int, ledger) -> bytes:
    """
    Build the control program by compiling its TEAL source.

    Args:
        public_key: 1793-byte Falcon public key
        counter: Search counter (0-255)
        ledger: Client exposing compile_program(source) -> bytes

    Returns:
        Program bytecode

    Raises:
        InvalidKeySize: Public key is not 1793 bytes
        CompileFailed: algod refused or could not be reached
    """
    source = render_source(public_key, counter)
    try:
        program = ledger.compile_program(source)
    except LedgerError as e:
        raise CompileFailed(e.message) from e
    logger.debug(f"Compiled control program (counter={counter}, {len(program)} bytes)")
    return program


def program_address(program: bytes) -> str:
    """Address of a logic-sig program: SHA-512/256("Program" || program)."""
    return LogicSig(program).address()


def filler_address() -> str:
    """Address of the public filler program."""
    return program_address(FILLER_PROGRAM)
