#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the flagbind library.

This module defines the exception classes raised while binding record fields
to command-line options and while parsing option values. They carry more
context than generic built-ins: the offending type and the original error.

Exception Hierarchy
-------------------
- FlagbindError (base exception)

  - BindError (binding-time errors, rendered with type and cause)
    - NilTargetError (nil record or nil command)
    - NonInstanceTargetError (a class object instead of an instance)
    - NonRecordTargetError (an instance that is not a dataclass)
    - UnsupportedFieldTypeError (no binding strategy for the field type)
    - UnsupportedMapTypeError (dict key/value type outside the primitives)
    - MalformedKeyValueError (map token without ``=``)
    - InternalBindError (unexpected registration failure)

  - ParseValueError (malformed primitive token, also a ValueError)
    - NumberOverflowError (value outside the target width)

  - CommandError (flag registry errors: required marking, parse failures)

"""

from typing import Any


def type_name(tp: Any) -> str:
    """Render a type for diagnostics (``int``, ``ipaddress.IPv4Address``, ``dict[str, int]``)."""
    if isinstance(tp, type) and not getattr(tp, "__args__", None):
        module = getattr(tp, "__module__", "builtins")
        if module == "builtins":
            return tp.__qualname__
        return f"{module}.{tp.__qualname__}"
    if hasattr(tp, "__supertype__"):
        return f"{tp.__module__}.{tp.__name__}"
    return repr(tp)


class FlagbindError(Exception):
    """Base exception class for all flagbind-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class BindError(FlagbindError):
    """Exception raised when a record cannot be bound to a command.

    The string form is ``bind error(type = <T>): <message>; cause by [<cause>]``,
    where the type and cause segments only appear when known.

    Parameters
    ----------
    message : str
        Description of the binding failure
    cause : Exception, optional
        The error that caused this one
    type : type, optional
        The offending type

    """

    def __init__(self, message: str, cause: Exception | None = None, type: Any = None):
        """Initialize the bind error with an optional cause and offending type."""
        super().__init__(message, original_error=cause)
        self.type = type

    @property
    def cause(self) -> Exception | None:
        """Return the error that caused this one."""
        return self.original_error

    def __str__(self) -> str:
        """Render the diagnostic string."""
        err = "bind error"
        if self.type is not None:
            err += f"(type = {type_name(self.type)})"

        err += f": {self.message}"
        if self.cause is not None:
            err += f"; cause by [{self.cause}]"
        return err


class NilTargetError(BindError):
    """Exception raised when the record or the command is None."""


class NonInstanceTargetError(BindError):
    """Exception raised when a class object is bound instead of an instance of it."""


class NonRecordTargetError(BindError):
    """Exception raised when the bound value is not a dataclass instance."""


class UnsupportedFieldTypeError(BindError):
    """Exception raised when no binding strategy exists for a field type."""


class UnsupportedMapTypeError(BindError):
    """Exception raised when a dict key or value type is not a supported primitive."""


class MalformedKeyValueError(BindError):
    """Exception raised when a map option token is not of the form ``key=value``."""


class InternalBindError(BindError):
    """Exception raised when registering an option fails unexpectedly.

    The original failure is kept as the cause.
    """


class ParseValueError(FlagbindError, ValueError):
    """Exception raised when a token cannot be parsed as the requested type.

    Parameters
    ----------
    message : str
        Description of the parse failure
    token : str, optional
        The token that failed to parse
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, token: str | None = None, original_error: Exception | None = None):
        """Initialize the parse error with the offending token."""
        super().__init__(message, original_error=original_error)
        self.token = token


class NumberOverflowError(ParseValueError):
    """Exception raised when a number does not fit the declared width."""


class CommandError(FlagbindError):
    """Exception raised by the command flag registry.

    Covers unknown flags passed to required-marking and every failure while
    parsing arguments (missing required options, invalid values, unknown options).

    Parameters
    ----------
    message : str
        Description of the error
    command : str, optional
        Name of the command that raised it
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, command: str | None = None, original_error: Exception | None = None):
        """Initialize the command error."""
        super().__init__(message, original_error=original_error)
        self.command = command
