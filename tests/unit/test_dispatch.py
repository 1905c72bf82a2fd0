"""Unit tests for binding strategy selection."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import ipaddress
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, List, Optional

import pytest

from flagbind.actions import (
    FieldAppendAction,
    FieldBoolAction,
    FieldCountAction,
    FieldMapAction,
    FieldStoreAction,
)
from flagbind.dispatch import Strategy, build_binding, select_strategy, type_label, zero_value
from flagbind.exceptions import UnsupportedFieldTypeError, UnsupportedMapTypeError
from flagbind.metadata import FieldDescriptor, FieldRef
from flagbind.types import BytesHex, Count, Float32, Int8, IPMask, Uint16


@dataclass
class Inner:
    number: int = 0


@dataclass
class NeedsArgs:
    label: str
    size: Int8
    inner: Inner
    note: Optional[str]


@dataclass
class Holder:
    value: Any = None


def _descriptor(tp: Any, value: Any, usage: str = "") -> FieldDescriptor:
    holder = Holder(value)
    return FieldDescriptor(
        name="value",
        shorthand="",
        usage=usage,
        persistent=False,
        required=False,
        type=tp,
        ref=FieldRef(holder, "value"),
    )


@pytest.mark.unit
class TestSelectStrategy:
    """Test strategy selection by field type."""

    @pytest.mark.parametrize(
        "tp,expected",
        [
            (bool, Strategy.BOOL),
            (str, Strategy.SCALAR),
            (int, Strategy.SCALAR),
            (float, Strategy.SCALAR),
            (Int8, Strategy.SCALAR),
            (Uint16, Strategy.SCALAR),
            (Float32, Strategy.SCALAR),
            (ipaddress.IPv4Address, Strategy.SCALAR),
            (ipaddress.IPv6Network, Strategy.SCALAR),
            (IPMask, Strategy.SCALAR),
            (timedelta, Strategy.SCALAR),
            (BytesHex, Strategy.SCALAR),
            (Count, Strategy.COUNT),
            (list[str], Strategy.SLICE),
            (List[int], Strategy.SLICE),
            (list[ipaddress.IPv4Address], Strategy.SLICE),
            (list[timedelta], Strategy.SLICE),
            (dict[str, int], Strategy.MAP),
            (Inner, Strategy.RECORD),
        ],
    )
    def test_supported(self, tp, expected):
        """Test that each supported type maps to one strategy."""
        assert select_strategy(tp) is expected

    @pytest.mark.parametrize("tp", [list[Inner], list[list[int]], list[IPMask], list])
    def test_unsupported_slice(self, tp):
        """Test list element types without a list option."""
        with pytest.raises(UnsupportedFieldTypeError, match="unsupported slice type"):
            select_strategy(tp)

    @pytest.mark.parametrize("tp", [dict])
    def test_untyped_map(self, tp):
        """Test that a dict needs key and value types."""
        with pytest.raises(UnsupportedFieldTypeError, match="declare key and value types"):
            select_strategy(tp)

    @pytest.mark.parametrize("tp", [bytes, complex, set[str], tuple[int, int], Any])
    def test_unsupported(self, tp):
        """Test types without any strategy."""
        with pytest.raises(UnsupportedFieldTypeError, match="unsupported type of field"):
            select_strategy(tp)


@pytest.mark.unit
class TestBuildBinding:
    """Test the argparse arguments built for each strategy."""

    def test_scalar(self):
        """Test a scalar option's arguments."""
        binding = build_binding(_descriptor(Int8, 5, usage="size"), Strategy.SCALAR)
        kwargs = binding.kwargs
        assert kwargs["action"] is FieldStoreAction
        assert kwargs["default"] == 5
        assert kwargs["help"] == "size"
        assert kwargs["metavar"] == "int8"
        assert kwargs["dest"] == "value"
        assert kwargs["parse"]("-3") == -3

    def test_empty_usage_has_no_help(self):
        """Test that an empty usage leaves help unset."""
        binding = build_binding(_descriptor(str, ""), Strategy.SCALAR)
        assert binding.kwargs["help"] is None

    def test_bool(self):
        """Test a boolean option's arguments."""
        binding = build_binding(_descriptor(bool, False), Strategy.BOOL)
        assert binding.kwargs["action"] is FieldBoolAction
        assert binding.kwargs["default"] is False

    def test_count(self):
        """Test a counter option's arguments."""
        binding = build_binding(_descriptor(Count, 0), Strategy.COUNT)
        assert binding.kwargs["action"] is FieldCountAction

    def test_slice(self):
        """Test a list option's arguments and default rendering."""
        binding = build_binding(_descriptor(list[timedelta], [timedelta(seconds=1)]), Strategy.SLICE)
        kwargs = binding.kwargs
        assert kwargs["action"] is FieldAppendAction
        assert kwargs["metavar"] == "durations"
        assert kwargs["parse"]("1m") == timedelta(minutes=1)
        assert kwargs["render"]([timedelta(seconds=1), timedelta(minutes=2)]) == "[1s,2m0s]"

    def test_map(self):
        """Test a dict option's arguments."""
        binding = build_binding(_descriptor(dict[str, int], {}), Strategy.MAP)
        assert binding.kwargs["action"] is FieldMapAction
        assert binding.kwargs["map_value"].type() == "dict[str, int]"

    def test_map_with_unsupported_value(self):
        """Test that a dict of non-primitives is rejected while planning."""
        with pytest.raises(UnsupportedMapTypeError):
            build_binding(_descriptor(dict[str, timedelta], {}), Strategy.MAP)

    def test_logs_planned_option(self, debug_logs):
        """Test that planning an option is logged at debug level."""
        build_binding(_descriptor(str, ""), Strategy.SCALAR)
        assert "Planned scalar option --value" in debug_logs.text


@pytest.mark.unit
class TestTypeLabel:
    """Test metavar labels."""

    @pytest.mark.parametrize(
        "tp,expected",
        [
            (str, "string"),
            (int, "int"),
            (float, "float64"),
            (Uint16, "uint16"),
            (timedelta, "duration"),
            (ipaddress.IPv4Address, "ip"),
            (ipaddress.IPv4Network, "ipNet"),
            (IPMask, "ipMask"),
            (BytesHex, "bytesHex"),
            (list[str], "strings"),
            (list[ipaddress.IPv6Address], "ips"),
        ],
    )
    def test_labels(self, tp, expected):
        """Test the label of each type."""
        assert type_label(tp) == expected


@pytest.mark.unit
class TestZeroValue:
    """Test zero values used to allocate optional fields."""

    @pytest.mark.parametrize(
        "tp,expected",
        [
            (bool, False),
            (str, ""),
            (int, 0),
            (Int8, 0),
            (float, 0.0),
            (Count, 0),
            (timedelta, timedelta(0)),
            (ipaddress.IPv4Address, ipaddress.IPv4Address("0.0.0.0")),
            (ipaddress.IPv4Network, ipaddress.IPv4Network("0.0.0.0/0")),
            (list[int], []),
            (dict[str, int], {}),
            (BytesHex, b""),
        ],
    )
    def test_zero(self, tp, expected):
        """Test the zero value of each type."""
        assert zero_value(tp) == expected

    def test_record_without_defaults(self):
        """Test that records are built from the zero values of their fields."""
        record = zero_value(NeedsArgs)
        assert record == NeedsArgs(label="", size=0, inner=Inner(), note=None)

    def test_unsupported(self):
        """Test that types without a zero value are rejected."""
        with pytest.raises(UnsupportedFieldTypeError):
            zero_value(complex)
