"""Custom exception types for domain and API layers."""


class AppError(Exception):
    """Base app exception."""


class ValidationError(AppError):
    """Malformed caller input, such as a date that is not MM-YYYY."""


class NotFoundError(AppError):
    """No subscription matches the requested identifier."""


class StoreError(AppError):
    """Persistence-layer failure; the database error is chained as __cause__."""
