"""Custom exceptions for SplitLedger."""


class SplitLedgerError(Exception):
    """Base exception for all SplitLedger errors."""

    pass


class ConfigurationError(SplitLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidInputError(SplitLedgerError, ValueError):
    """Raised for empty participant lists, non-positive amounts or negative shares."""

    pass


class UnsupportedSplitKindError(SplitLedgerError):
    """Raised when an unknown split strategy tag is requested."""

    def __init__(self, kind: str, message: str | None = None):
        self.kind = kind
        super().__init__(message or f"Unsupported split kind: {kind!r}")


class InvariantViolationError(SplitLedgerError):
    """Raised when the settlement sweep leaves residual balance on one side.

    This signals that net positions did not sum to zero, which means the
    ledger state was corrupted upstream. It is never a user-facing condition.
    """

    pass
