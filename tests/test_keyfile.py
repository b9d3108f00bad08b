"""
Tests for keypair JSON files and key types.

Test: pytest tests/test_keyfile.py
"""

import json
import os
import stat

import pytest

from falcon_algo.errors import InvalidKeySize
from falcon_algo.keyfile import load_keypair, parse_hex, read_keys, save_keypair
from falcon_algo.pq_types import FALCON_PRIVATE_KEY_SIZE, FALCON_PUBLIC_KEY_SIZE, FalconKeyPair


@pytest.mark.parametrize("value,expected", [
    ("deadbeef", b"\xde\xad\xbe\xef"),
    ("0xDEADBEEF", b"\xde\xad\xbe\xef"),
    ("  0Xab\n", b"\xab"),
    ("abc", b"\x0a\xbc"),
    ("", b""),
])
def test_parse_hex(value, expected):
    assert parse_hex(value) == expected


def test_parse_hex_invalid():
    with pytest.raises(ValueError):
        parse_hex("zz")


class TestFalconKeyPair:

    def test_public_only(self):
        kp = FalconKeyPair(public_key=bytes(FALCON_PUBLIC_KEY_SIZE))
        assert not kp.has_private_key

    def test_wrong_public_size(self):
        with pytest.raises(InvalidKeySize):
            FalconKeyPair(public_key=bytes(FALCON_PUBLIC_KEY_SIZE - 1))

    def test_wrong_private_size(self):
        with pytest.raises(InvalidKeySize):
            FalconKeyPair(public_key=bytes(FALCON_PUBLIC_KEY_SIZE), private_key=bytes(10))


class TestFiles:

    def test_round_trip(self, tmp_path, keypair):
        path = str(tmp_path / "keys.json")
        save_keypair(path, keypair)
        assert load_keypair(path) == keypair

    def test_file_mode(self, tmp_path, keypair):
        path = str(tmp_path / "keys.json")
        save_keypair(path, keypair)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_no_temp_files_left(self, tmp_path, keypair):
        save_keypair(str(tmp_path / "keys.json"), keypair)
        assert os.listdir(tmp_path) == ["keys.json"]

    def test_public_only_file(self, tmp_path):
        path = tmp_path / "pub.json"
        path.write_text(json.dumps({"public_key": "0x" + "00" * FALCON_PUBLIC_KEY_SIZE}))

        kp = load_keypair(str(path))
        assert kp.public_key == bytes(FALCON_PUBLIC_KEY_SIZE)
        assert not kp.has_private_key

    def test_private_only_file(self, tmp_path):
        path = tmp_path / "priv.json"
        path.write_text(json.dumps({"private_key": "11" * FALCON_PRIVATE_KEY_SIZE}))

        public_key, private_key = read_keys(str(path))
        assert public_key is None
        assert private_key == b"\x11" * FALCON_PRIVATE_KEY_SIZE
        with pytest.raises(ValueError):
            load_keypair(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            read_keys(str(path))

    def test_invalid_hex(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"public_key": "xyz"}))
        with pytest.raises(ValueError) as exc_info:
            read_keys(str(path))
        assert "public_key" in str(exc_info.value)

    def test_wrong_key_size(self, tmp_path):
        path = tmp_path / "short.json"
        path.write_text(json.dumps({"public_key": "00" * 32}))
        with pytest.raises(InvalidKeySize):
            load_keypair(str(path))
