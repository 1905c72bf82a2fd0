"""flagbind - declare command-line options as dataclass fields.

flagbind turns the fields of a dataclass instance into options of a command.
The current field values are the option defaults, and parsing the command's
arguments writes the parsed values back into the instance.

Basic Usage
-----------
    >>> from dataclasses import dataclass
    >>> from typing import Optional
    >>> from flagbind import Command, bind, flag
    >>> @dataclass
    ... class Apply:
    ...     namespace: str = flag("default", shorthand="n", usage="namespace scope for this request")
    ...     file: Optional[str] = flag(None, shorthand="f", usage="file to apply")
    >>> apply = Apply()
    >>> cmd = Command("apply")
    >>> _ = bind(cmd, apply)
    >>> _ = cmd.parse_flags(["-n", "app", "-f", "pod.yaml"])
    >>> apply.namespace, apply.file
    ('app', 'pod.yaml')

Field metadata
--------------
name
    Option name; derived from the field name by default
shorthand
    One-letter alias
usage
    Help text
flagbind
    Attribute list: ``persistent``/``persist``/``p`` makes sub-commands
    inherit the option, ``required``/``require``/``r`` makes it mandatory

Supported types
---------------
``bool``, ``str``, ``int``, ``float`` and the bounded widths of
:mod:`flagbind.types`, ``ipaddress`` addresses and networks, ``IPMask``,
``timedelta``, ``Count``, ``BytesHex``, ``list`` of primitives, addresses or
durations, ``dict`` of primitives, nested dataclasses and ``Optional`` of any
of these.
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from flagbind.binder import Binder, bind
from flagbind.command import Command, FlagSet
from flagbind.exceptions import (
    BindError,
    CommandError,
    FlagbindError,
    InternalBindError,
    MalformedKeyValueError,
    NilTargetError,
    NonInstanceTargetError,
    NonRecordTargetError,
    NumberOverflowError,
    ParseValueError,
    UnsupportedFieldTypeError,
    UnsupportedMapTypeError,
)
from flagbind.metadata import FieldDescriptor, flag, to_kebab_case
from flagbind.options import BindOptions
from flagbind.types import (
    BytesHex,
    Count,
    Float32,
    Float64,
    Int,
    Int8,
    Int16,
    Int32,
    Int64,
    IPMask,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)

__version__ = "0.1.0"

__all__ = [
    "Binder",
    "BindError",
    "BindOptions",
    "BytesHex",
    "Command",
    "CommandError",
    "Count",
    "FieldDescriptor",
    "FlagSet",
    "FlagbindError",
    "Float32",
    "Float64",
    "IPMask",
    "Int",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InternalBindError",
    "MalformedKeyValueError",
    "NilTargetError",
    "NonInstanceTargetError",
    "NonRecordTargetError",
    "NumberOverflowError",
    "ParseValueError",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "UnsupportedFieldTypeError",
    "UnsupportedMapTypeError",
    "bind",
    "flag",
    "to_kebab_case",
]
