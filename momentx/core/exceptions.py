"""
Custom exceptions for MomentX.

Provides a hierarchy of exceptions for better error handling and debugging.
"""

from typing import Any, Dict, List, Optional


class MomentXError(Exception):
    """Base exception for all MomentX errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(MomentXError):
    """Raised when there are configuration issues."""

    pass


class DataAccessError(MomentXError):
    """Base class for data access errors."""

    pass


class SuiRPCError(DataAccessError):
    """HTTP level failure or malformed answer from the Sui node."""

    pass


class SuiTransportError(SuiRPCError):
    """Connection failure, timeout or 5xx answer; safe to retry for queries."""

    pass


class RPCError(DataAccessError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.code = code
        self.method = method


class FaucetError(DataAccessError):
    """Faucet request failed."""

    pass


class PublishError(MomentXError):
    """Publish effects did not contain the expected new object event."""

    pass


class ObjectFieldError(MomentXError):
    """An on-chain object snapshot is missing an expected field."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class TransactionError(MomentXError):
    """The node executed a transaction but reported a failure status."""

    def __init__(self, message: str, digest: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.digest = digest


class WorkflowError(MomentXError):
    """A pipeline step failed; earlier steps stay applied on the ledger."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        completed_steps: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.step = step
        self.completed_steps = completed_steps or []
