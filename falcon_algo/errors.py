"""
Falcon Algorand SDK - Errors

Every failure of the derivation / send pipeline is one of these types.
Each error records the pipeline step that produced it.
"""

from typing import Optional


class FalconAlgoError(Exception):
    """Base class for all SDK errors."""

    step = "unknown"

    def __init__(self, message: str, step: Optional[str] = None):
        if step is not None:
            self.step = step
        self.message = message
        super().__init__(f"{self.step}: {message}")


class LedgerError(FalconAlgoError):
    """algod HTTP call failed."""

    step = "ledger"

    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(f"HTTP {status}: {message}")


class InvalidKeySize(FalconAlgoError):
    step = "derive"


class DerivationExhausted(FalconAlgoError):
    """No counter value yields an off-curve address: the key is unsuitable."""
    step = "derive"


class NetworkParamsUnavailable(FalconAlgoError):
    step = "build"


class CompileFailed(FalconAlgoError):
    step = "compile"


class SignatureFailure(FalconAlgoError):
    step = "sign"


class SubmissionRejected(FalconAlgoError):
    step = "submit"


class ConfirmationTimeout(FalconAlgoError):
    step = "confirm"


class OperationCancelled(FalconAlgoError):
    step = "cancel"


class ConfigurationError(FalconAlgoError):
    step = "config"
