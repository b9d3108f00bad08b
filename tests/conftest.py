"""
Shared fixtures: a stub ledger standing in for algod, and test keys.
"""

import hashlib
import os

import pytest
from algosdk.transaction import SuggestedParams

from falcon_algo.errors import ConfirmationTimeout, LedgerError
from falcon_algo.pq_types import FALCON_PRIVATE_KEY_SIZE, FALCON_PUBLIC_KEY_SIZE, FalconKeyPair

MAINNET_GENESIS_HASH = "wGHE2Pwdvd7S12BL5FaOP20EGYesN73ktiC1qzkkit8="

# All-zero public key resolves to counter 1
ZERO_KEY_ADDRESS = "UFYQPVR3TVT54VVJUGJI6TSIOYF7OR42LC6FPVJFP55ZPH4PH2UKIE4UFQ"
ZERO_KEY_COUNTER_0_ADDRESS = "FKHIKZSOYRHJKWJKDE2A56C4J3SENELZLGWOMBCYVQMWYFOIC2E2GQ3MXU"
FILLER_ADDRESS = "H7CBAWOBIZ56TYPXWYQ7J6BSKYQ7GP5NJZHIZS4G3H6YOQ2XTAPFLJYYEM"


def pseudo_key(seed: int) -> bytes:
    """Deterministic 1793-byte public key for derivation tests."""
    return hashlib.shake_256(f"falcon-test-key-{seed}".encode()).digest(FALCON_PUBLIC_KEY_SIZE)


def _uvarint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7f) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


TXN_FIELDS = {"Fee": 1, "Amount": 8, "CloseRemainderTo": 9, "TypeEnum": 16, "TxID": 23, "RekeyTo": 32}
GLOBAL_FIELDS = {"ZeroAddress": 3}
SIMPLE_OPS = {"&&": 0x10, "==": 0x12, "!": 0x14, "falcon_verify": 0x85}


def assemble(source: str) -> bytes:
    """Assembler for the handful of opcodes our programs use."""
    program = bytearray()
    for line in source.splitlines():
        line = line.split("//")[0].strip()
        if not line:
            continue
        op, _, arg = line.partition(" ")
        arg = arg.strip()
        if op == "#pragma":
            program.append(int(arg.split()[1]))
        elif op == "bytecblock":
            value = bytes.fromhex(arg[2:])
            program += bytes([0x26, 0x01]) + _uvarint(len(value)) + value
        elif op == "txn":
            program += bytes([0x31, TXN_FIELDS[arg]])
        elif op == "global":
            program += bytes([0x32, GLOBAL_FIELDS[arg]])
        elif op in SIMPLE_OPS:
            program.append(SIMPLE_OPS[op])
        elif line == "arg 0":
            program.append(0x2d)
        elif op == "pushbytes":
            value = bytes.fromhex(arg[2:])
            program += bytes([0x80]) + _uvarint(len(value)) + value
        elif op == "pushint":
            program += bytes([0x81]) + _uvarint(int(arg))
        else:
            raise LedgerError(400, f"unknown opcode: {line}")
    return bytes(program)


class FakeLedger:
    """
    Stub ledger client.

    confirm_round: round offset at which the transaction confirms
    (None = never). Every call is recorded in .calls.
    """

    def __init__(self, fee=0, min_fee=1000, confirm_round=2,
                 fail_params=False, reject_submit=False):
        self.fee = fee
        self.min_fee = min_fee
        self.confirm_round = confirm_round
        self.fail_params = fail_params
        self.reject_submit = reject_submit
        self.calls = []
        self.submitted = []

    def fetch_suggested_params(self):
        self.calls.append("params")
        if self.fail_params:
            raise LedgerError(503, "node unavailable")
        return SuggestedParams(
            fee=self.fee,
            first=1000,
            last=2000,
            gh=MAINNET_GENESIS_HASH,
            gen="mainnet-v1.0",
            flat_fee=False,
            min_fee=self.min_fee,
        )

    def compile_program(self, source):
        self.calls.append("compile")
        return assemble(source)

    def submit_raw_group(self, raw):
        self.calls.append("submit")
        if self.reject_submit:
            raise LedgerError(400, "overspend")
        self.submitted.append(raw)
        return "TXID"

    def wait_for_confirmation(self, txid, max_rounds, cancel=None):
        self.calls.append("confirm")
        if self.confirm_round is None or self.confirm_round > max_rounds:
            raise ConfirmationTimeout(f"transaction {txid} not confirmed after {max_rounds} rounds")
        return {"confirmed-round": 1000 + self.confirm_round}


def deterministic_signer(private_key, message):
    """Stand-in for a deterministic Falcon signer; importable as conftest:deterministic_signer."""
    return hashlib.sha512(private_key + message).digest()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def zero_key():
    return bytes(FALCON_PUBLIC_KEY_SIZE)


@pytest.fixture
def keypair(zero_key):
    return FalconKeyPair(public_key=zero_key, private_key=bytes(FALCON_PRIVATE_KEY_SIZE))


@pytest.fixture
def fake_signer():
    """Deterministic stand-in for Falcon signing; records what it signed."""
    signed = []

    def signer(private_key, message):
        signed.append(message)
        return deterministic_signer(private_key, message)

    signer.signed = signed
    return signer


def pytest_collection_modifyitems(config, items):
    if os.environ.get("ALGOD_URL"):
        return
    skip = pytest.mark.skip(reason="ALGOD_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
