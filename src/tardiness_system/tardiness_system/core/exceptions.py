class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class InvalidStateError(DomainError):
    """Raised when a record is not in a state that allows the operation."""


class ConcurrencyConflict(DomainError):
    """Raised when a transactional update lost against a concurrent writer."""


class ConfigurationError(DomainError):
    """Raised when required configuration (rules, incident types) is missing or broken."""


class RuleOverlapError(ConfigurationError):
    """Raised when active lateness rules cover the same minutes-late values."""
