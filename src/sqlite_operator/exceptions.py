"""Exceptions raised by the sqlite operator."""

__all__ = [
    "SqliteOperatorError",
    "PreconditionError",
    "InvalidSpecError",
]


class SqliteOperatorError(Exception):
    """Generic base exception used for this operator."""


class PreconditionError(SqliteOperatorError):
    """Raised when the spec asks for something it does not fully describe.

    Retrying will not help until the resource is edited.
    """


class InvalidSpecError(PreconditionError):
    """Raised when a SqliteDatabase spec cannot be parsed."""
