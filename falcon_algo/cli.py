#!/usr/bin/env python3
"""
Falcon Algorand CLI

Usage:
    # Create a Falcon-1024 keypair
    falcon-algo create --out mykeys.json

    # Show key material
    falcon-algo info --key mykeys.json

    # Sign and verify a message (SHA-512/256 of the message is signed)
    falcon-algo sign --key mykeys.json --msg "hello world"
    falcon-algo verify --key mykeys.json --msg "hello world" --signature <HEX>

    # Derive the Algorand address controlled by the key
    falcon-algo address --key mykeys.json

    # Send 1 ALGO (amounts in microAlgos) with a deterministic Falcon signer
    falcon-algo send --key mykeys.json --to <ADDRESS> --amount 1000000
        --network testnet --signer mysigner:sign_compressed

Exit codes: 0 success, 1 verify found the signature INVALID,
2 any error (message on stderr).

Configuration:
    ALGOD_URL / ALGOD_TOKEN override the node for every network.
    FALCON_SIGNER supplies the send signer when --signer is omitted.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import config
from .address import get_address_from_public_key
from .errors import FalconAlgoError
from .falcon import generate_keypair, load_signer, sign_message, verify_message
from .keyfile import load_keypair, parse_hex, read_keys, save_keypair, write_file_atomic
from .pq_types import Network, SendOptions
from .sender import send

log = logging.getLogger("falcon_algo.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return EXIT_ERROR


def cmd_create(args) -> int:
    """Generate a keypair and write it to --out (stdout if omitted)."""
    keypair = generate_keypair()
    if not args.out:
        print(f"public_key: {keypair.public_key.hex()}")
        print(f"private_key: {keypair.private_key.hex()}")
        return EXIT_OK
    try:
        save_keypair(args.out, keypair)
    except OSError as e:
        return _fail(f"failed to write {args.out}: {e}")
    log.info(f"Keypair written to {args.out}")
    return EXIT_OK


def cmd_info(args) -> int:
    """Print the key material found in --key."""
    try:
        public_key, private_key = read_keys(args.key)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read --key: {e}")
    if public_key is None and private_key is None:
        return _fail(f"no keys found in {args.key}")
    if public_key is not None:
        print(f"public_key: {public_key.hex()}")
    if private_key is not None:
        print(f"private_key: {private_key.hex()}")
    return EXIT_OK


def _read_message(args) -> bytes:
    """Message bytes from --msg or --in, hex-decoded with --hex."""
    if args.input:
        with open(args.input, "rb") as f:
            data = f.read()
        return parse_hex(data.decode().strip()) if args.hex else data
    return parse_hex(args.msg) if args.hex else args.msg.encode()


def cmd_sign(args) -> int:
    """Sign a message with the private key in --key."""
    try:
        keypair = load_keypair(args.key)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read --key: {e}")
    except FalconAlgoError as e:
        return _fail(f"failed to read --key: {e.message}")
    if not keypair.has_private_key:
        return _fail(f"private key not found in {args.key} (required for signing)")

    try:
        message = _read_message(args)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read message: {e}")

    try:
        signature = sign_message(keypair.private_key, message)
    except FalconAlgoError as e:
        return _fail(f"signing failed: {e.message}")

    if not args.out:
        print(signature.hex())
        return EXIT_OK
    try:
        write_file_atomic(args.out, signature)
    except OSError as e:
        return _fail(f"failed to write signature: {e}")
    return EXIT_OK


def cmd_verify(args) -> int:
    """Verify a message signature against the public key in --key."""
    try:
        public_key, _ = read_keys(args.key)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read --key: {e}")
    if public_key is None:
        return _fail(f"public key not found in {args.key}")

    try:
        message = _read_message(args)
        if args.sig:
            with open(args.sig, "rb") as f:
                signature = f.read()
        else:
            signature = parse_hex(args.signature)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read input: {e}")

    if verify_message(public_key, message, signature):
        print("VALID")
        return EXIT_OK
    print("INVALID")
    return EXIT_INVALID


def cmd_address(args) -> int:
    """Derive the Algorand address of the public key in --key."""
    try:
        public_key, _ = read_keys(args.key)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read --key: {e}")
    if public_key is None:
        return _fail(f"public key not found in {args.key}")

    try:
        address = get_address_from_public_key(public_key)
    except FalconAlgoError as e:
        return _fail(f"error deriving address: {e.message}")

    if not args.out:
        print(address)
        return EXIT_OK
    try:
        with open(args.out, "w") as f:
            f.write(address + "\n")
    except OSError as e:
        return _fail(f"failed to write {args.out}: {e}")
    return EXIT_OK


def cmd_send(args) -> int:
    """Send microAlgos from the key's account."""
    if args.amount <= 0:
        return _fail("--amount must be > 0")
    try:
        keypair = load_keypair(args.key)
    except (OSError, ValueError) as e:
        return _fail(f"failed to read --key: {e}")
    except FalconAlgoError as e:
        return _fail(f"failed to read --key: {e.message}")
    if not keypair.has_private_key:
        return _fail(f"private key not found in {args.key} (required for sending)")

    signer_path = args.signer or config.signer_path()
    if not signer_path:
        return _fail("no deterministic Falcon signer: pass --signer module:callable or set FALCON_SIGNER")
    try:
        signer = load_signer(signer_path)
    except FalconAlgoError as e:
        return _fail(f"send failed ({e.step}): {e.message}")

    options = SendOptions(
        network=Network(args.network),
        fee=args.fee or 0,
        flat_fee=args.fee is not None,
        note=args.note.encode() if args.note else b"",
        filler_count=args.fillers,
        max_rounds=args.rounds,
    )

    try:
        txid = send(keypair, args.to, args.amount, options, signer=signer)
    except FalconAlgoError as e:
        return _fail(f"send failed ({e.step}): {e.message}")
    except ValueError as e:
        return _fail(f"send failed: {e}")

    print(txid)
    return EXIT_OK


def _add_message_args(parser: argparse.ArgumentParser):
    message_group = parser.add_mutually_exclusive_group(required=True)
    message_group.add_argument("--in", dest="input", help="File containing the message")
    message_group.add_argument("--msg", help="Inline message text")
    parser.add_argument("--hex", action="store_true", help="Message is hex-encoded")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="falcon-algo",
                                     description="Falcon-controlled Algorand accounts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    create_parser = subparsers.add_parser("create", help="Create a Falcon-1024 keypair")
    create_parser.add_argument("--out", help="Keypair JSON file (stdout if omitted)")

    info_parser = subparsers.add_parser("info", help="Show keypair file contents")
    info_parser.add_argument("--key", required=True, help="Keypair JSON file")

    sign_parser = subparsers.add_parser("sign", help="Sign a message")
    sign_parser.add_argument("--key", required=True, help="Keypair JSON file")
    _add_message_args(sign_parser)
    sign_parser.add_argument("--out", help="Write signature bytes to file (stdout hex if omitted)")

    verify_parser = subparsers.add_parser("verify", help="Verify a message signature")
    verify_parser.add_argument("--key", required=True, help="Keypair or public key JSON file")
    _add_message_args(verify_parser)
    signature_group = verify_parser.add_mutually_exclusive_group(required=True)
    signature_group.add_argument("--sig", help="File containing signature bytes")
    signature_group.add_argument("--signature", help="Hex-encoded signature")

    address_parser = subparsers.add_parser("address", help="Derive Algorand address")
    address_parser.add_argument("--key", required=True, help="Keypair or public key JSON file")
    address_parser.add_argument("--out", help="Write address to file (stdout if omitted)")

    send_parser = subparsers.add_parser("send", help="Send ALGO from the derived address")
    send_parser.add_argument("--key", required=True, help="Keypair JSON file")
    send_parser.add_argument("--to", required=True, help="Destination address")
    send_parser.add_argument("--amount", type=int, required=True, help="Amount in microAlgos")
    send_parser.add_argument("--fee", type=int, help="Flat fee in microAlgos (suggested fee if omitted)")
    send_parser.add_argument("--note", help="Transaction note (utf-8)")
    send_parser.add_argument("--network", default=Network.MAINNET.value,
                             choices=[n.value for n in Network], help="Network (default: mainnet)")
    send_parser.add_argument("--fillers", type=int, help="Filler transactions (default: config)")
    send_parser.add_argument("--rounds", type=int, help="Rounds to wait for confirmation")
    send_parser.add_argument("--signer", help="Deterministic Falcon signer, module:callable (default: FALCON_SIGNER)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    commands = {
        "create": cmd_create,
        "info": cmd_info,
        "sign": cmd_sign,
        "verify": cmd_verify,
        "address": cmd_address,
        "send": cmd_send,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return EXIT_ERROR
    return command(args)


if __name__ == "__main__":
    sys.exit(main())
