#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Keyed (dict) option values.

A dict field is exposed as a repeatable ``key=value`` option: every invocation
sets one entry of the field's dict, later invocations overwriting earlier ones
for the same key.
"""

from __future__ import annotations

import json
from typing import Any

from flagbind.codec import is_primitive, parse_primitive
from flagbind.constants import KEY_VALUE_SEPARATOR
from flagbind.exceptions import (
    BindError,
    MalformedKeyValueError,
    ParseValueError,
    UnsupportedMapTypeError,
    type_name,
)
from flagbind.metadata import FieldRef


class MapValue:
    """A settable, string-representable view of one dict field.

    Parameters
    ----------
    ref : FieldRef
        Reference to the dict field; its value must already be a dict
    key_type : Any
        Declared key type
    value_type : Any
        Declared value type

    Raises
    ------
    UnsupportedMapTypeError
        If the key or value type is not a bool, int, float or str width

    """

    def __init__(self, ref: FieldRef, key_type: Any, value_type: Any) -> None:
        if not is_primitive(key_type):
            raise UnsupportedMapTypeError("unsupported type of map key", type=key_type)
        if not is_primitive(value_type):
            raise UnsupportedMapTypeError("unsupported type of map value", type=value_type)

        self.ref = ref
        self.key_type = key_type
        self.value_type = value_type

    @property
    def value(self) -> dict:
        return self.ref.get()

    def set(self, arg: str) -> None:
        """Parse ``key=value`` and store the pair in the field's dict.

        Raises
        ------
        MalformedKeyValueError
            If ``arg`` contains no ``=``
        BindError
            If the key or the value does not parse as its declared type

        """
        key_token, sep, value_token = arg.partition(KEY_VALUE_SEPARATOR)
        if not sep:
            raise MalformedKeyValueError("invalid key-value pair format, key=value")

        try:
            key = parse_primitive(self.key_type, key_token)
        except ParseValueError as e:
            raise BindError(f"unexpected map key {key_token!r}", cause=e, type=self.key_type) from e

        try:
            value = parse_primitive(self.value_type, value_token)
        except ParseValueError as e:
            raise BindError(f"unexpected map value {value_token!r}", cause=e, type=self.value_type) from e

        self.value[key] = value

    def type(self) -> str:
        """Return the type name shown as the option's metavar."""
        return f"dict[{type_name(self.key_type)}, {type_name(self.value_type)}]"

    def __str__(self) -> str:
        """Render the current dict as JSON for help output."""
        return json.dumps(self.value, sort_keys=True)

    def __repr__(self) -> str:
        return f"MapValue({self.type()}, {self})"
