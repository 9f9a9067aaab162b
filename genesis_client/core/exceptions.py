"""
Application-level exceptions.

Validation errors (InvalidDateError, InvalidAmountError, RecordFormatError) abort
an operation before any network call. Session and gateway errors are logged,
reported as user notices, and re-raised to the caller.
"""

from __future__ import annotations


class GenesisError(Exception):
    """Base class for all Genesis client errors."""


class ConfigurationError(GenesisError):
    """Missing or invalid client configuration."""


class WalletUnavailableError(GenesisError):
    """No wallet provider detected, or no usable contract handle / account."""

    def __init__(self, message: str = "Please install a wallet provider (e.g. Metamask)."):
        super().__init__(message)


class ConnectionRejectedError(GenesisError):
    """The user declined wallet authorization."""


class InvalidDateError(GenesisError, ValueError):
    """A date entered by the user could not be parsed."""


class InvalidAmountError(GenesisError, ValueError):
    """An amount entered by the user is non-numeric or negative."""


class RecordFormatError(GenesisError, ValueError):
    """A raw ledger record does not match its schema."""


class TransactionFailedError(GenesisError):
    """The provider or ledger rejected or reverted a transaction."""

    def __init__(self, message: str, method: str | None = None, tx_hash: str | None = None):
        super().__init__(message)
        self.method = method
        self.tx_hash = tx_hash


class ContractCallError(GenesisError):
    """A read-only contract call failed."""

    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self.method = method
