"""
Falcon Algorand SDK - Keypair files

JSON keypair format:
    {
      "public_key": "<hex>",
      "private_key": "<hex>"
    }

Either field may be omitted; hex may carry a 0x prefix.
"""

import json
import os
import tempfile
from typing import Optional, Tuple

from .pq_types import FalconKeyPair


def parse_hex(value: str) -> bytes:
    """Decode hex, accepting a 0x prefix and an odd number of nibbles."""
    value = value.strip()
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    if len(value) % 2 == 1:
        value = "0" + value
    return bytes.fromhex(value)


def read_keys(path: str) -> Tuple[Optional[bytes], Optional[bytes]]:
    """
    Read raw key material from a keypair JSON file.

    Returns:
        (public_key, private_key), None for missing fields

    Raises:
        ValueError: Invalid JSON or hex
        OSError: File could not be read
    """
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}") from e

    keys = []
    for name in ("public_key", "private_key"):
        raw = data.get(name, "")
        if not raw:
            keys.append(None)
            continue
        try:
            keys.append(parse_hex(raw))
        except ValueError as e:
            raise ValueError(f"invalid {name} hex: {e}") from e
    return keys[0], keys[1]


def load_keypair(path: str) -> FalconKeyPair:
    """
    Load a FalconKeyPair from a JSON file.

    Raises:
        ValueError: Public key missing, or bad JSON / hex
        InvalidKeySize: Key of the wrong length
    """
    public_key, private_key = read_keys(path)
    if public_key is None:
        raise ValueError(f"public key not found in {path}")
    return FalconKeyPair(public_key=public_key, private_key=private_key or b"")


def write_file_atomic(path: str, data: bytes, mode: int = 0o644):
    """Write data to path via a temp file in the same directory and a rename."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".falcon.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def save_keypair(path: str, keypair: FalconKeyPair, mode: int = 0o600):
    """Write keypair JSON atomically, readable by the owner only."""
    data = {"public_key": keypair.public_key.hex()}
    if keypair.has_private_key:
        data["private_key"] = keypair.private_key.hex()
    write_file_atomic(path, json.dumps(data, indent=2).encode(), mode)
