"""
Exception Hierarchy

Every failure inside a run surfaces as one of these. Nothing is retried:
the first error propagates to the run wrapper in ``live_nft.main`` which
logs it and exits with a non-zero status.
"""

from typing import Any, Dict, Optional

from live_nft.core.logging import run_id_var, stage_var


class LiveNftError(Exception):
    """Base exception for the updater."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        run_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.stage = stage or stage_var.get()
        self.run_id = run_id or run_id_var.get()
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "error_type": type(self).__name__,
            "stage": self.stage,
            "run_id": self.run_id,
            "details": self.details,
        }


class ConfigError(LiveNftError):
    """Raised when a required env var is missing or unusable."""

    def __init__(self, message: str, variable: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if variable:
            self.details["variable"] = variable


class DataValidationError(LiveNftError):
    """Raised when a data API answers with a payload we cannot use."""


class ExternalAPIError(LiveNftError):
    """Raised when an external HTTP call fails (data API, chain SDK)."""

    def __init__(self, message: str, service: str, http_status: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.details["service"] = service
        self.details["http_status"] = http_status


class PreconditionError(LiveNftError):
    """Raised when the admin account cannot perform the run (balance, rights)."""


class RenderError(LiveNftError):
    """Raised when the template or font cannot be loaded."""


class StorageError(LiveNftError):
    """Raised when writing the image locally or uploading it to IPFS fails."""


class ExtrinsicError(LiveNftError):
    """Raised when a chain transaction does not complete."""

    def __init__(self, message: str, tx_hash: Optional[str] = None, chain_error: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.details["tx_hash"] = tx_hash
        if chain_error is not None:
            self.details["chain_error"] = chain_error
