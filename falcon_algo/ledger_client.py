"""
Falcon Algorand SDK - Ledger Client

HTTP client for the algod v2 REST API.
"""

import base64
import logging
from typing import Any, Dict, Optional

import requests
from algosdk.transaction import SuggestedParams

from . import config
from .errors import ConfirmationTimeout, LedgerError, SubmissionRejected
from .pq_types import CancelToken, Network

logger = logging.getLogger(__name__)

# Validity window algod's own clients use for suggested params
VALIDITY_WINDOW = 1000


class LedgerClient:
    """
    algod client.

    Usage:
        ledger = LedgerClient("https://testnet-api.4160.nodely.dev")
        sp = ledger.fetch_suggested_params()
        txid = ledger.submit_raw_group(raw_bytes)
        info = ledger.wait_for_confirmation(txid, max_rounds=9)
    """

    def __init__(self, url: str, token: str = "", timeout: int = 30):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if token:
            self.session.headers["X-Algo-API-Token"] = token

    def _request(self, method: str, path: str, data: Optional[bytes] = None,
                 content_type: Optional[str] = None,
                 params: Optional[Dict[str, str]] = None) -> Any:
        """Make an algod call and return the decoded JSON body."""
        headers = {"Content-Type": content_type} if content_type else None
        try:
            response = self.session.request(
                method,
                f"{self.url}{path}",
                data=data,
                headers=headers,
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise LedgerError(-1, f"Connection failed: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise LedgerError(response.status_code, message)

        return response.json()

    # ═══════════════════════════════════════════════════════════════════════
    # NODE STATUS
    # ═══════════════════════════════════════════════════════════════════════

    def status(self) -> dict:
        """Get node status (last-round, ...)."""
        return self._request("GET", "/v2/status")

    def status_after_block(self, round_num: int) -> dict:
        """Block until the node has seen the round after round_num."""
        return self._request("GET", f"/v2/status/wait-for-block-after/{round_num}")

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSACTIONS
    # ═══════════════════════════════════════════════════════════════════════

    def fetch_suggested_params(self) -> SuggestedParams:
        """
        Get current network parameters.

        Returns:
            SuggestedParams with the per-byte fee (flat_fee unset), the
            minimum fee and a 1000-round validity window
        """
        res = self._request("GET", "/v2/transactions/params")
        return SuggestedParams(
            fee=res["fee"],
            first=res["last-round"],
            last=res["last-round"] + VALIDITY_WINDOW,
            gh=res["genesis-hash"],
            gen=res["genesis-id"],
            flat_fee=False,
            consensus_version=res["consensus-version"],
            min_fee=res["min-fee"],
        )

    def compile_program(self, source: str) -> bytes:
        """
        Compile TEAL source.

        Args:
            source: TEAL program text

        Returns:
            Program bytecode
        """
        res = self._request("POST", "/v2/teal/compile",
                            data=source.encode(), content_type="text/plain")
        return base64.b64decode(res["result"])

    def submit_raw_group(self, raw: bytes) -> str:
        """
        Submit concatenated signed transactions as one unit.

        Returns:
            Transaction id of the first transaction
        """
        res = self._request("POST", "/v2/transactions",
                            data=raw, content_type="application/x-binary")
        return res["txId"]

    def pending_transaction_info(self, txid: str) -> dict:
        """Get pool / confirmation info for a transaction."""
        return self._request("GET", f"/v2/transactions/pending/{txid}",
                             params={"format": "json"})

    def wait_for_confirmation(self, txid: str, max_rounds: int,
                              cancel: Optional[CancelToken] = None) -> dict:
        """
        Poll until the transaction is confirmed.

        Args:
            txid: Transaction id
            max_rounds: Rounds to wait before giving up
            cancel: Optional cancellation token, checked every round

        Returns:
            Pending transaction info with confirmed-round set

        Raises:
            SubmissionRejected: The pool dropped the transaction
            ConfirmationTimeout: Not confirmed within max_rounds
        """
        start_round = self.status()["last-round"] + 1
        current_round = start_round

        while current_round < start_round + max_rounds:
            if cancel is not None:
                cancel.check("confirm")

            info = self.pending_transaction_info(txid)
            if info.get("confirmed-round", 0) > 0:
                logger.info(f"Transaction {txid} confirmed in round {info['confirmed-round']}")
                return info
            if info.get("pool-error"):
                raise SubmissionRejected(f"transaction rejected: {info['pool-error']}")

            self.status_after_block(current_round)
            current_round += 1

        raise ConfirmationTimeout(
            f"transaction {txid} not confirmed after {max_rounds} rounds"
        )


def get_ledger_client(network: Network) -> LedgerClient:
    """
    Client for a network, honouring ALGOD_URL / ALGOD_TOKEN.

    Raises:
        ConfigurationError: DevNet without ALGOD_URL
    """
    url, token = config.algod_endpoint(network)
    logger.debug(f"Using algod at {url} for {network.value}")
    return LedgerClient(url, token, timeout=config.http_timeout())
