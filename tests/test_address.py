"""
Tests for address derivation and the curve-avoidance search.

Test: pytest tests/test_address.py
"""

import pytest
from algosdk import encoding

from falcon_algo import address, logicsig
from falcon_algo.curve import is_on_curve
from falcon_algo.errors import DerivationExhausted, InvalidKeySize
from falcon_algo.pq_types import Network

from conftest import ZERO_KEY_ADDRESS, FakeLedger, pseudo_key

BATTERY = [pseudo_key(seed) for seed in range(16)]


class TestGoldenVector:

    def test_zero_key(self, zero_key):
        account = address.derive_account(zero_key)

        assert account.counter == 1
        assert account.address == ZERO_KEY_ADDRESS
        assert account.program == logicsig.synthesize(zero_key, 1)

    def test_zero_key_counter_0_is_on_curve(self, zero_key):
        assert address.check_counter(zero_key, 0) is None

    def test_get_address_from_public_key(self, zero_key):
        assert address.get_address_from_public_key(zero_key) == ZERO_KEY_ADDRESS


class TestSearch:

    @pytest.mark.parametrize("key", BATTERY)
    def test_deterministic(self, key):
        first = address.search(key)
        second = address.search(key)
        assert (first.counter, first.address) == (second.counter, second.address)

    @pytest.mark.parametrize("key", BATTERY)
    def test_result_off_curve(self, key):
        account = address.search(key)
        assert len(account.raw_address) == 32
        assert not is_on_curve(account.raw_address)
        assert encoding.encode_address(account.raw_address) == account.address

    @pytest.mark.parametrize("key", BATTERY)
    def test_first_suitable_counter(self, key):
        """Every earlier counter lands on the curve."""
        account = address.search(key)
        for counter in range(account.counter):
            assert address.check_counter(key, counter) is None

    def test_stops_at_first_hit(self, zero_key):
        tried = []

        def synthesize(public_key, counter):
            tried.append(counter)
            return logicsig.synthesize(public_key, counter)

        address.search(zero_key, synthesize)
        assert tried == [0, 1]

    def test_exhausted(self, zero_key, monkeypatch):
        monkeypatch.setattr(address, "is_on_curve", lambda raw: True)
        with pytest.raises(DerivationExhausted) as exc_info:
            address.search(zero_key)
        assert exc_info.value.step == "derive"

    def test_exhausted_after_256_counters(self, zero_key, monkeypatch):
        tried = []

        def synthesize(public_key, counter):
            tried.append(counter)
            return logicsig.synthesize(public_key, counter)

        monkeypatch.setattr(address, "is_on_curve", lambda raw: True)
        with pytest.raises(DerivationExhausted):
            address.search(zero_key, synthesize)
        assert tried == list(range(256))

    @pytest.mark.parametrize("size", [0, 1792, 1794, 2305])
    def test_rejects_wrong_key_size(self, size):
        with pytest.raises(InvalidKeySize):
            address.search(bytes(size))


class TestCompiledDerivation:

    @pytest.mark.parametrize("key", BATTERY[:6])
    def test_matches_fast_path(self, key):
        fast = address.derive_account(key)
        compiled = address.derive_account_with_compilation(key, FakeLedger())
        assert compiled == fast

    def test_zero_key_compiles_once_per_counter(self, zero_key):
        ledger = FakeLedger()
        account = address.derive_account_with_compilation(zero_key, ledger)

        assert account.address == ZERO_KEY_ADDRESS
        assert ledger.calls == ["compile", "compile"]

    def test_defaults_to_betanet_compiler(self, zero_key, monkeypatch):
        ledger = FakeLedger()
        requested = []

        def get_ledger_client(network):
            requested.append(network)
            return ledger

        monkeypatch.setattr(address, "get_ledger_client", get_ledger_client)
        account = address.derive_account_with_compilation(zero_key)

        assert account.address == ZERO_KEY_ADDRESS
        assert requested == [Network.BETANET]
