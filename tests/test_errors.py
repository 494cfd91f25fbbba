import pytest

from dbmscore.errors import (
    CastError,
    DBMSError,
    EmptyKeyError,
    ImmutableError,
    InvalidDataTypeError,
    KeyNotFoundError,
    KeyTooLargeError,
    NotFoundError,
    TypeSyntaxError,
)


@pytest.mark.parametrize(
    "error_class, message",
    [
        (KeyNotFoundError, "key not found"),
        (KeyTooLargeError, "key is too large"),
        (EmptyKeyError, "empty key"),
        (ImmutableError, "operation not allowed in read-only mode"),
        (NotFoundError, "not found"),
        (InvalidDataTypeError, "invalid set data type"),
    ],
)
def test_default_messages(error_class, message):
    assert str(error_class()) == message


def test_custom_message_overrides_default():
    error = CastError("from a to b")
    assert str(error) == "from a to b"
    assert error.message == "from a to b"


@pytest.mark.parametrize(
    "error_class",
    [
        KeyNotFoundError,
        KeyTooLargeError,
        EmptyKeyError,
        ImmutableError,
        NotFoundError,
        InvalidDataTypeError,
        TypeSyntaxError,
        CastError,
    ],
)
def test_every_error_is_a_dbms_error(error_class):
    error = error_class("boom")
    assert isinstance(error, DBMSError)
    assert error.message == "boom"
    assert str(error) == "boom"


def test_key_not_found_is_catchable_as_key_error():
    error = KeyNotFoundError()
    assert isinstance(error, KeyError)
    assert str(error) == "key not found"


def test_invalid_data_type_is_catchable_as_type_error():
    error = InvalidDataTypeError("bad value")
    assert isinstance(error, TypeError)
    assert str(error) == "bad value"