"""Exception hierarchy used throughout the storage engine."""

from __future__ import annotations


class DBMSError(Exception):
    """Base class for every error raised by the package."""

    default_message = "database error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class KeyNotFoundError(DBMSError, KeyError):
    """A lookup key is not present in an index or store."""

    default_message = "key not found"


class KeyTooLargeError(DBMSError, ValueError):
    """A key is larger than the configured limit."""

    default_message = "key is too large"


class EmptyKeyError(DBMSError, ValueError):
    """An operation was requested with an empty key."""

    default_message = "empty key"


class ImmutableError(DBMSError):
    """A write was attempted on a read-only store."""

    default_message = "operation not allowed in read-only mode"


class NotFoundError(DBMSError, LookupError):
    """A requested object does not exist."""

    default_message = "not found"


class InvalidDataTypeError(DBMSError, TypeError):
    """A value of the wrong kind was given to a column type."""

    default_message = "invalid set data type"


class TypeSyntaxError(DBMSError, ValueError):
    """A type declaration could not be parsed."""

    default_message = "invalid syntax"


class CastError(DBMSError, TypeError):
    """A value cannot be converted to the requested type."""

    default_message = "typecast not supported"