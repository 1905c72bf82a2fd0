"""Unit tests for the flagbind exception hierarchy."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import ipaddress

import pytest

from flagbind.exceptions import (
    BindError,
    CommandError,
    FlagbindError,
    InternalBindError,
    NilTargetError,
    NumberOverflowError,
    ParseValueError,
    UnsupportedFieldTypeError,
    type_name,
)
from flagbind.types import Int8


@pytest.mark.unit
class TestBindErrorRendering:
    """Test the diagnostic string of bind errors."""

    def test_message_only(self):
        """Test an error without type or cause."""
        assert str(NilTargetError("unable bind nil value to command")) == "bind error: unable bind nil value to command"

    def test_with_type(self):
        """Test an error naming the offending type."""
        err = UnsupportedFieldTypeError("unsupported type of field", type=complex)
        assert str(err) == "bind error(type = complex): unsupported type of field"

    def test_with_type_and_cause(self):
        """Test an error with both segments."""
        cause = ValueError("boom")
        err = InternalBindError("internal error", cause=cause, type=str)
        assert str(err) == "bind error(type = str): internal error; cause by [boom]"
        assert err.cause is cause
        assert err.original_error is cause
        assert err.message == "internal error"


@pytest.mark.unit
class TestHierarchy:
    """Test the base classes of each error."""

    def test_bind_errors(self):
        """Test that bind errors are flagbind errors."""
        assert issubclass(BindError, FlagbindError)
        assert issubclass(NilTargetError, BindError)

    def test_parse_errors_are_value_errors(self):
        """Test that parse errors can be caught as ValueError."""
        err = NumberOverflowError("number overflow", token="300")
        assert isinstance(err, ParseValueError)
        assert isinstance(err, ValueError)
        assert err.token == "300"

    def test_command_error(self):
        """Test that command errors keep the command and the original error."""
        original = KeyError("x")
        err = CommandError("no such flag -x", command="app", original_error=original)
        assert isinstance(err, FlagbindError)
        assert err.command == "app"
        assert err.original_error is original
        assert str(err) == "no such flag -x"


@pytest.mark.unit
class TestTypeName:
    """Test type rendering in diagnostics."""

    @pytest.mark.parametrize(
        "tp,expected",
        [
            (int, "int"),
            (ipaddress.IPv4Address, "ipaddress.IPv4Address"),
            (Int8, "flagbind.types.Int8"),
            (dict[str, int], "dict[str, int]"),
        ],
    )
    def test_names(self, tp, expected):
        """Test builtins, library classes, width markers and generics."""
        assert type_name(tp) == expected
