#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Selection of the binding strategy for a field type.

Every field is bound through exactly one :class:`Strategy`, chosen once from
its resolved type when the record is bound:

1. Exact types first: ``Count`` is a counter, and IP addresses, networks,
   masks, durations (``timedelta``) and ``BytesHex`` are scalars with their own
   codecs, whatever their underlying representation.
2. Then the structure: nested dataclasses are walked into the same option
   namespace, ``list[E]`` is a repeated option, ``dict[K, V]`` a ``key=value``
   option, and ``bool``, ``str`` and the int/float widths are primitives.
3. Anything else is an :class:`~flagbind.exceptions.UnsupportedFieldTypeError`.
"""

from __future__ import annotations

import dataclasses
import ipaddress
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Optional, Tuple, get_args, get_origin

from flagbind.actions import (
    FieldAppendAction,
    FieldBoolAction,
    FieldCountAction,
    FieldMapAction,
    FieldStoreAction,
)
from flagbind.codec import (
    format_bytes_hex,
    format_duration,
    is_primitive,
    parse_bytes_hex,
    parse_duration,
    parse_ip,
    parse_ip_mask,
    parse_ip_network,
    parse_primitive,
)
from flagbind.exceptions import UnsupportedFieldTypeError
from flagbind.metadata import FieldDescriptor, resolve_field_types, unwrap_optional
from flagbind.types import (
    FLOAT_TYPES,
    IP_ADDRESS_TYPES,
    IP_NETWORK_TYPES,
    SIGNED_RANGES,
    UNSIGNED_RANGES,
    BytesHex,
    Count,
    IPMask,
    is_newtype,
)
from flagbind.values import MapValue

logger = logging.getLogger(__name__)

Codec = Tuple[Callable[[str], Any], Callable[[Any], str]]

# Bound as scalars (or counters) regardless of their representation
SPECIALIZED_TYPES: Tuple[Any, ...] = (*IP_ADDRESS_TYPES, *IP_NETWORK_TYPES, IPMask, timedelta, Count, BytesHex)

# Specialized element types accepted in list fields
SLICE_ELEMENT_TYPES: Tuple[Any, ...] = (*IP_ADDRESS_TYPES, timedelta)


class Strategy(Enum):
    """How a field is exposed as an option."""

    SCALAR = "scalar"
    BOOL = "bool"
    COUNT = "count"
    SLICE = "slice"
    MAP = "map"
    RECORD = "record"


@dataclass
class Binding:
    """A planned option: the field descriptor and the argparse arguments registering it."""

    descriptor: FieldDescriptor
    strategy: Strategy
    kwargs: Dict[str, Any] = field(default_factory=dict)


def is_record_type(tp: Any) -> bool:
    """Return True if ``tp`` is a dataclass type."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def type_label(tp: Any) -> str:
    """Return the short type name shown as an option's metavar (``int8``, ``duration``, ``strings``)."""
    if tp is str:
        return "string"
    if tp is int:
        return "int"
    if tp is float:
        return "float64"
    if tp is timedelta:
        return "duration"
    if tp in IP_ADDRESS_TYPES:
        return "ip"
    if tp in IP_NETWORK_TYPES:
        return "ipNet"
    if tp is IPMask:
        return "ipMask"
    if tp is BytesHex:
        return "bytesHex"
    if get_origin(tp) is list and get_args(tp):
        return f"{type_label(get_args(tp)[0])}s"
    if is_newtype(tp):
        return tp.__name__.lower()
    return getattr(tp, "__name__", str(tp)).lower()


def scalar_codec(tp: Any) -> Optional[Codec]:
    """Return the (parse, render) pair for a scalar type, or None if ``tp`` is not a scalar."""
    if tp in IP_ADDRESS_TYPES:
        return partial(parse_ip, tp), str
    if tp in IP_NETWORK_TYPES:
        return partial(parse_ip_network, tp), str
    if tp is IPMask:
        return parse_ip_mask, str
    if tp is timedelta:
        return parse_duration, format_duration
    if tp is BytesHex:
        return parse_bytes_hex, format_bytes_hex
    if is_primitive(tp):
        return partial(parse_primitive, tp), str
    return None


def select_strategy(tp: Any) -> Strategy:
    """Select the binding strategy for the resolved field type ``tp``.

    Raises
    ------
    UnsupportedFieldTypeError
        If no strategy applies

    """
    if tp is Count:
        return Strategy.COUNT
    if tp in SPECIALIZED_TYPES:
        return Strategy.SCALAR

    if is_record_type(tp):
        return Strategy.RECORD

    origin = get_origin(tp)
    if origin is list or tp is list:
        args = get_args(tp)
        element = unwrap_optional(args[0])[0] if args else None
        if element is not None and (element in SLICE_ELEMENT_TYPES or is_primitive(element)):
            return Strategy.SLICE
        raise UnsupportedFieldTypeError("unsupported slice type", type=tp)

    if origin is dict or tp is dict:
        if len(get_args(tp)) != 2:
            raise UnsupportedFieldTypeError("unsupported map type, declare key and value types", type=tp)
        return Strategy.MAP

    if tp is bool:
        return Strategy.BOOL
    if is_primitive(tp):
        return Strategy.SCALAR

    raise UnsupportedFieldTypeError("unsupported type of field", type=tp)


def _render_list(render: Callable[[Any], str]) -> Callable[[Any], str]:
    def render_list(values: Any) -> str:
        return "[" + ",".join(render(value) for value in values or []) + "]"

    return render_list


def build_binding(descriptor: FieldDescriptor, strategy: Strategy) -> Binding:
    """Build the argparse arguments for one field.

    The option's default is the field's current value.

    Raises
    ------
    UnsupportedMapTypeError
        If a dict field has a key or value type outside the primitives

    """
    tp = descriptor.type
    kwargs: Dict[str, Any] = {
        "dest": descriptor.dest,
        "ref": descriptor.ref,
        "default": descriptor.ref.get(),
        "help": descriptor.usage or None,
    }

    if strategy is Strategy.SCALAR:
        codec = scalar_codec(tp)
        if codec is None:
            raise UnsupportedFieldTypeError("unsupported type of field", type=tp)
        parse, render = codec
        kwargs.update(action=FieldStoreAction, parse=parse, render=render, metavar=type_label(tp))

    elif strategy is Strategy.BOOL:
        kwargs.update(action=FieldBoolAction)

    elif strategy is Strategy.COUNT:
        kwargs.update(action=FieldCountAction)

    elif strategy is Strategy.SLICE:
        element = unwrap_optional(get_args(tp)[0])[0]
        codec = scalar_codec(element)
        if codec is None:
            raise UnsupportedFieldTypeError("unsupported slice type", type=tp)
        parse, render = codec
        kwargs.update(action=FieldAppendAction, parse=parse, render=_render_list(render), metavar=type_label(tp))

    elif strategy is Strategy.MAP:
        key_type, value_type = get_args(tp)
        map_value = MapValue(descriptor.ref, key_type, value_type)
        kwargs.update(action=FieldMapAction, map_value=map_value)

    else:
        raise UnsupportedFieldTypeError(f"no option for {strategy.value} strategy", type=tp)

    logger.debug("Planned %s option --%s for field %s", strategy.value, descriptor.name, descriptor.ref.attr)
    return Binding(descriptor=descriptor, strategy=strategy, kwargs=kwargs)


def _zero_record(record_type: type) -> Any:
    hints = resolve_field_types(record_type)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not f.init or f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        field_type, optional = unwrap_optional(hints.get(f.name, f.type))
        kwargs[f.name] = None if optional else zero_value(field_type)
    return record_type(**kwargs)


def zero_value(tp: Any) -> Any:
    """Return the zero value of a bindable type.

    Used to allocate ``Optional`` fields that are ``None`` before binding.

    Raises
    ------
    UnsupportedFieldTypeError
        If ``tp`` has no zero value (it cannot be bound either)

    """
    origin = get_origin(tp)
    if origin is list:
        return []
    if origin is dict:
        return {}
    if is_record_type(tp):
        return _zero_record(tp)

    if tp is bool:
        return False
    if tp is str:
        return ""
    if tp in FLOAT_TYPES:
        return 0.0
    if tp is Count or tp in SIGNED_RANGES or tp in UNSIGNED_RANGES:
        return 0
    if tp is timedelta:
        return timedelta(0)
    if tp is ipaddress.IPv4Address:
        return ipaddress.IPv4Address(0)
    if tp is ipaddress.IPv6Address:
        return ipaddress.IPv6Address(0)
    if tp is ipaddress.IPv4Network:
        return ipaddress.IPv4Network("0.0.0.0/0")
    if tp is ipaddress.IPv6Network:
        return ipaddress.IPv6Network("::/0")
    if tp is IPMask:
        return IPMask(b"")
    if tp is BytesHex:
        return BytesHex(b"")

    raise UnsupportedFieldTypeError("unsupported type of field", type=tp)
