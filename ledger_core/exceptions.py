"""Domain-specific exceptions for the household ledger core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when a transaction cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class BackupReadError(ValidationError):
    """Raised when a backup file cannot be parsed at all."""


class BackupFormatError(ValidationError):
    """Raised when a backup document lacks a transactions array."""
