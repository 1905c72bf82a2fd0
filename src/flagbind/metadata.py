#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Per-field metadata for bound options.

A record declares its options through dataclass field metadata:

    @dataclass
    class Person:
        name: str = field(default="", metadata={"shorthand": "n", "usage": "person name", "flagbind": "required p"})

or, equivalently, with the :func:`flag` helper:

    @dataclass
    class Person:
        name: str = flag("", shorthand="n", usage="person name", required=True, persistent=True)

This module turns one field into a :class:`FieldDescriptor`.
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import MISSING, dataclass
from typing import Annotated, Any, Dict, Mapping, Optional, Union, get_args, get_origin, get_type_hints

from flagbind.constants import (
    ATTR_SEPARATORS,
    DEFAULT_ATTRS_KEY,
    DEFAULT_NAME_KEY,
    DEFAULT_SHORTHAND_KEY,
    DEFAULT_USAGE_KEY,
    PERSISTENT_ATTRS,
    REQUIRED_ATTRS,
)
from flagbind.options import BindOptions


@dataclass
class FieldRef:
    """A writable reference to one attribute of a record."""

    record: Any
    attr: str

    def get(self) -> Any:
        return getattr(self.record, self.attr)

    def set(self, value: Any) -> None:
        setattr(self.record, self.attr, value)


@dataclass
class FieldDescriptor:
    """Derived option metadata for one record field.

    Attributes
    ----------
    name : str
        Long option name, without the leading ``--``
    shorthand : str
        One-letter alias, empty for none
    usage : str
        One line of help text
    persistent : bool
        Whether sub-commands inherit the option
    required : bool
        Whether the option must be given
    type : Any
        Resolved field type, with ``Annotated`` and ``Optional`` unwrapped
    ref : FieldRef
        Where parsed values are written

    """

    name: str
    shorthand: str
    usage: str
    persistent: bool
    required: bool
    type: Any
    ref: FieldRef

    @property
    def option_strings(self) -> list[str]:
        """Return the argparse option strings, shorthand first."""
        if self.shorthand:
            return [f"-{self.shorthand}", f"--{self.name}"]
        return [f"--{self.name}"]

    @property
    def dest(self) -> str:
        """Return the namespace attribute the parsed value is mirrored into."""
        return self.name.replace("-", "_")


def to_kebab_case(name: str) -> str:
    """Convert a camel-case identifier to the option-name form.

    Only upper-case letters after the first character change: each becomes a
    ``-`` followed by its lower-case form. Digits, underscores and hyphens are
    kept as they are.

    >>> to_kebab_case("ILoveYou")
    'i-love-you'
    >>> to_kebab_case("Hi0_1-2AxxBC")
    'hi0_1-2-axx-b-c'
    """
    if not name:
        return name

    out = [name[0].lower()]
    for ch in name[1:]:
        if ch.isupper():
            out.append("-")
        out.append(ch.lower())
    return "".join(out)


def split_attrs(value: str) -> list[str]:
    """Split an attribute list on commas and spaces, dropping empty tokens."""
    for sep in ATTR_SEPARATORS[1:]:
        value = value.replace(sep, ATTR_SEPARATORS[0])
    return [token for token in value.split(ATTR_SEPARATORS[0]) if token]


def unwrap_optional(field_type: Any) -> tuple[Any, bool]:
    """Unwrap ``Annotated`` and one level of ``Optional``.

    Returns
    -------
    tuple[Any, bool]
        Tuple of (underlying_type, is_optional). A union of several non-None
        types is returned unchanged.

    """
    origin = get_origin(field_type)
    if origin is Annotated:
        return unwrap_optional(get_args(field_type)[0])

    if origin is Union or origin is types.UnionType:
        args = get_args(field_type)
        if type(None) in args:
            non_none = [arg for arg in args if arg is not type(None)]
            if len(non_none) == 1:
                inner = non_none[0]
                if get_origin(inner) is Annotated:
                    inner = get_args(inner)[0]
                return inner, True
    return field_type, False


def resolve_field_types(record_type: type) -> Dict[str, Any]:
    """Resolve a dataclass's annotations, including postponed (string) ones.

    Falls back to the raw ``Field.type`` values when the hints cannot be
    resolved (e.g. a class defined in a function body referring to local names).
    """
    try:
        return get_type_hints(record_type, include_extras=True)
    except (NameError, AttributeError, TypeError):
        return {f.name: f.type for f in dataclasses.fields(record_type)}


def extract_descriptor(
    field: dataclasses.Field,
    field_type: Any,
    ref: FieldRef,
    options: Optional[BindOptions] = None,
) -> FieldDescriptor:
    """Build the descriptor of one field.

    Parameters
    ----------
    field : dataclasses.Field
        The field being bound
    field_type : Any
        Its resolved type, optionality already unwrapped
    ref : FieldRef
        Reference to the field's storage
    options : BindOptions, optional
        Metadata key configuration

    Returns
    -------
    FieldDescriptor
        The option metadata

    """
    options = options or BindOptions()
    metadata: Mapping[str, Any] = field.metadata or {}

    name = str(metadata.get(options.name_key) or "")
    if not name:
        name = to_kebab_case(field.name)

    attrs = split_attrs(str(metadata.get(options.attrs_key, "")))

    return FieldDescriptor(
        name=name,
        shorthand=str(metadata.get(options.shorthand_key, "")),
        usage=str(metadata.get(options.usage_key, "")),
        persistent=any(attr in PERSISTENT_ATTRS for attr in attrs),
        required=any(attr in REQUIRED_ATTRS for attr in attrs),
        type=field_type,
        ref=ref,
    )


def flag(
    default: Any = MISSING,
    *,
    default_factory: Any = MISSING,
    name: str = "",
    shorthand: str = "",
    usage: str = "",
    persistent: bool = False,
    required: bool = False,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Declare a dataclass field together with its option metadata.

    Uses the default metadata keys; records bound with custom
    :class:`BindOptions` keys should spell their metadata out.
    """
    meta: Dict[str, Any] = dict(metadata or {})
    if name:
        meta[DEFAULT_NAME_KEY] = name
    if shorthand:
        meta[DEFAULT_SHORTHAND_KEY] = shorthand
    if usage:
        meta[DEFAULT_USAGE_KEY] = usage

    attrs = [attr for attr, enabled in (("persistent", persistent), ("required", required)) if enabled]
    if attrs:
        meta[DEFAULT_ATTRS_KEY] = ",".join(attrs)

    return dataclasses.field(default=default, default_factory=default_factory, metadata=meta)
