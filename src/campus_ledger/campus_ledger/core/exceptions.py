class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced student, invoice or record does not exist."""


class ImmutableRecordError(DomainError):
    """Raised when trying to change a record that is closed (e.g. a paid invoice)."""


class DataServiceError(DomainError):
    """Raised when the remote data service cannot be reached or answers badly."""
