"""Argparse actions writing parsed values into a record.

Each bound option is one of these actions. Besides storing the value in the
parse namespace, as stock argparse actions do, they write it through a
:class:`~flagbind.metadata.FieldRef` into the record the option was bound
from, and track which dests were explicitly provided.
"""

from __future__ import annotations

#  Copyright (c) 2025 Tom Villani, Ph.D.
import argparse
import csv
from typing import Any, Callable, Optional, Sequence, Union

from flagbind.codec import parse_bool
from flagbind.constants import KEY_VALUE_SEPARATOR
from flagbind.exceptions import FlagbindError
from flagbind.metadata import FieldRef
from flagbind.values import MapValue


def _mark_provided(namespace: argparse.Namespace, dest: str) -> None:
    if not hasattr(namespace, "_provided_args"):
        namespace._provided_args = set()
    namespace._provided_args.add(dest)


def was_provided(namespace: argparse.Namespace, dest: str) -> bool:
    """Return True if the option stored under ``dest`` was given on the command line."""
    return dest in getattr(namespace, "_provided_args", ())


class FieldAction(argparse.Action):
    """Base class for actions bound to a record field.

    Parameters
    ----------
    option_strings : Sequence[str]
        The option strings for this action
    dest : str
        The namespace attribute mirroring the field
    ref : FieldRef
        Where parsed values are written
    render : Callable[[Any], str], optional
        Formats values for help output; defaults to ``str``
    **kwargs : Any
        Passed to ``argparse.Action``

    """

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        ref: FieldRef,
        render: Optional[Callable[[Any], str]] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the field action."""
        super().__init__(option_strings=option_strings, dest=dest, **kwargs)
        self.ref = ref
        self.render = render or str

    def format_default(self) -> str:
        """Render the bound field's current value for help output."""
        return self.render(self.ref.get())

    def store(self, namespace: argparse.Namespace, value: Any) -> None:
        """Write ``value`` into the record and mirror it into the namespace."""
        self.ref.set(value)
        setattr(namespace, self.dest, value)
        _mark_provided(namespace, self.dest)

    def convert(self, parse: Callable[[str], Any], token: str) -> Any:
        """Run ``parse`` on ``token``, turning failures into ``argparse.ArgumentError``."""
        try:
            return parse(token)
        except (FlagbindError, ValueError) as e:
            raise argparse.ArgumentError(self, f"invalid argument {token!r}: {e}") from e


class FieldStoreAction(FieldAction):
    """Store one parsed token into a scalar field."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        ref: FieldRef,
        parse: Callable[[str], Any],
        **kwargs: Any,
    ) -> None:
        """Initialize the store action with the token parser."""
        super().__init__(option_strings, dest, ref, **kwargs)
        self.parse = parse

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Parse the token and store it."""
        self.store(namespace, self.convert(self.parse, str(values)))


class FieldBoolAction(FieldAction):
    """Boolean option: ``--flag`` sets True, ``--flag=false`` sets the parsed value.

    The option never consumes the following token, so ``--flag file.txt``
    leaves ``file.txt`` as a positional argument. The attached form only
    reaches this action when the parser registered the whole token as an
    alias of the option (see ``Command.parse_flags``); the value is then read
    back from ``option_string``.
    """

    def __init__(self, option_strings: Sequence[str], dest: str, ref: FieldRef, **kwargs: Any) -> None:
        """Initialize the bool action without an argument."""
        super().__init__(option_strings, dest, ref, nargs=0, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Store True, or the parsed boolean of an attached ``=value``."""
        _, sep, token = (option_string or "").partition(KEY_VALUE_SEPARATOR)
        if sep:
            self.store(namespace, self.convert(parse_bool, token))
        else:
            self.store(namespace, True)


class FieldAppendAction(FieldAction):
    """Repeated option for list fields.

    Every token is read as one CSV record, so ``--tag a,b --tag c`` yields
    ``["a", "b", "c"]``. The first invocation replaces the field's default,
    later ones append.
    """

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        ref: FieldRef,
        parse: Callable[[str], Any],
        **kwargs: Any,
    ) -> None:
        """Initialize the append action with the element parser."""
        super().__init__(option_strings, dest, ref, **kwargs)
        self.parse = parse

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Parse each element of the token and extend the field's list."""
        token = str(values)
        try:
            elements = next(csv.reader([token]), [])
        except csv.Error as e:
            raise argparse.ArgumentError(self, f"invalid argument {token!r}: {e}") from e

        parsed = [self.convert(self.parse, element) for element in elements]

        # keyed by option, not dest: fields may share a dest
        if not hasattr(namespace, "_extended_options"):
            namespace._extended_options = set()
        if self.option_strings[-1] in namespace._extended_options:
            items = list(self.ref.get() or [])
            items.extend(parsed)
        else:
            namespace._extended_options.add(self.option_strings[-1])
            items = parsed
        self.store(namespace, items)


class FieldCountAction(FieldAction):
    """Occurrence counter: each ``-v`` adds one to the field, so ``-vvv`` adds three."""

    def __init__(self, option_strings: Sequence[str], dest: str, ref: FieldRef, **kwargs: Any) -> None:
        """Initialize the count action."""
        super().__init__(option_strings, dest, ref, nargs=0, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Increment the field."""
        self.store(namespace, (self.ref.get() or 0) + 1)


class FieldMapAction(FieldAction):
    """Repeated ``key=value`` option for dict fields."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        ref: FieldRef,
        map_value: MapValue,
        **kwargs: Any,
    ) -> None:
        """Initialize the map action around its :class:`MapValue`."""
        kwargs.setdefault("metavar", "KEY=VALUE")
        super().__init__(option_strings, dest, ref, **kwargs)
        self.map_value = map_value

    def format_default(self) -> str:
        return str(self.map_value)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Set one entry of the field's dict."""
        self.convert(self.map_value.set, str(values))
        setattr(namespace, self.dest, self.map_value.value)
        _mark_provided(namespace, self.dest)
