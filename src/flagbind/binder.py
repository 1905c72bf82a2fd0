#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Binding of dataclass records to command options.

This module walks the fields of a dataclass instance and registers one
option per field on a :class:`~flagbind.command.Command`. The field's
current value becomes the option's default, and parsing the command's
arguments writes the parsed values back into the record.

    @dataclass
    class Person:
        name: str = flag("", shorthand="n", usage="person name", required=True, persistent=True)
        age: int = 0
        gender: Optional[str] = None

    person = Person()
    bind(Command("people"), person)

Binding is staged: every field of the record is planned first and the
options are registered only once the whole record planned successfully. If
registering fails part way, the options this call already registered are
removed again.

``Optional`` fields that are ``None`` are set to the zero value of their type
while planning (``Optional[bool]`` becomes ``False``, ``Optional[Nested]`` a
zero ``Nested``). This mutation happens before any argument is parsed and is
not undone when binding fails.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from typing import Any, List, Optional, Tuple

from flagbind.command import Command, FlagSet
from flagbind.dispatch import Binding, Strategy, build_binding, select_strategy, zero_value
from flagbind.exceptions import (
    BindError,
    FlagbindError,
    InternalBindError,
    NilTargetError,
    NonInstanceTargetError,
    NonRecordTargetError,
    UnsupportedFieldTypeError,
)
from flagbind.metadata import FieldRef, extract_descriptor, resolve_field_types, unwrap_optional
from flagbind.options import BindOptions

logger = logging.getLogger(__name__)


class Binder:
    """Binds records to the options of one command.

    ``bind`` can be called several times, so that the fields of several
    records share one command's option namespace.

    Parameters
    ----------
    cmd : Command
        The command receiving the options
    options : BindOptions, optional
        Metadata keys and field filtering

    Raises
    ------
    NilTargetError
        If ``cmd`` is None

    """

    def __init__(self, cmd: Command, options: Optional[BindOptions] = None) -> None:
        """Initialize the binder."""
        if cmd is None:
            raise NilTargetError("unable bind value to nil command")

        self.cmd = cmd
        self.options = options or BindOptions()

    @classmethod
    def new(cls, cmd: Command, options: Optional[BindOptions] = None) -> Binder:
        """Create a binder for ``cmd``."""
        return cls(cmd, options)

    def bind(self, record: Any) -> List[argparse.Action]:
        """Register every settable field of ``record`` as an option.

        Parameters
        ----------
        record : dataclass instance
            The record whose fields become options. It is mutated: ``None``
            optional fields and dict fields are allocated here, and parsed
            values are written into it later.

        Returns
        -------
        list[argparse.Action]
            The registered options, in field order

        Raises
        ------
        BindError
            If the record is not a dataclass instance or a field cannot be bound
        CommandError
            If the command rejects marking an option required

        """
        if record is None:
            raise NilTargetError("unable bind nil value to command")
        if isinstance(record, type):
            raise NonInstanceTargetError("unable bind to non-instance value, pass an instance", type=record)
        if not dataclasses.is_dataclass(record):
            raise NonRecordTargetError("unsupported type, use dataclass instead", type=type(record))

        bindings = self.plan(record)
        return self._commit(bindings)

    def plan(self, record: Any) -> List[Binding]:
        """Plan the options of ``record`` without registering them."""
        bindings: List[Binding] = []
        self._plan_record(record, bindings)
        return bindings

    def _plan_record(self, record: Any, bindings: List[Binding]) -> None:
        record_type = type(record)
        params = getattr(record_type, "__dataclass_params__", None)
        if params is not None and params.frozen:
            logger.debug("Skipping fields of frozen record %s", record_type.__name__)
            return

        hints = resolve_field_types(record_type)
        for field in dataclasses.fields(record):
            if self.options.skip_private and field.name.startswith("_"):
                logger.debug("Skipping private field %s.%s", record_type.__name__, field.name)
                continue

            declared = hints.get(field.name, field.type)
            if isinstance(declared, str):
                raise UnsupportedFieldTypeError(f"unresolved annotation of field {field.name}", type=declared)

            field_type, optional = unwrap_optional(declared)
            try:
                self._plan_field(record, field, field_type, optional, bindings)
            except BindError:
                raise
            except Exception as e:
                raise InternalBindError("internal error", cause=e, type=field_type) from e

    def _plan_field(
        self,
        record: Any,
        field: dataclasses.Field,
        field_type: Any,
        optional: bool,
        bindings: List[Binding],
    ) -> None:
        ref = FieldRef(record, field.name)
        if optional and ref.get() is None:
            ref.set(zero_value(field_type))
            logger.debug("Allocated zero value for optional field %s", field.name)

        descriptor = extract_descriptor(field, field_type, ref, self.options)
        strategy = select_strategy(field_type)

        if strategy is Strategy.RECORD:
            if ref.get() is None:
                ref.set(zero_value(field_type))
            self._plan_record(ref.get(), bindings)
            return

        if strategy is Strategy.MAP and ref.get() is None:
            ref.set({})

        bindings.append(build_binding(descriptor, strategy))

    def _flag_set(self, binding: Binding) -> FlagSet:
        if binding.descriptor.persistent:
            return self.cmd.persistent_flags()
        return self.cmd.flags()

    def _commit(self, bindings: List[Binding]) -> List[argparse.Action]:
        registered: List[Tuple[FlagSet, argparse.Action]] = []
        try:
            for binding in bindings:
                descriptor = binding.descriptor
                flag_set = self._flag_set(binding)
                try:
                    action = flag_set.add(*descriptor.option_strings, **binding.kwargs)
                except Exception as e:
                    raise InternalBindError("internal error", cause=e, type=descriptor.type) from e
                registered.append((flag_set, action))
                logger.debug("Registered option --%s on %s", descriptor.name, self.cmd.command_path)

                if descriptor.required:
                    if descriptor.persistent:
                        self.cmd.mark_persistent_flag_required(descriptor.name)
                    else:
                        self.cmd.mark_flag_required(descriptor.name)
        except FlagbindError:
            self._rollback(registered)
            raise

        return [action for _, action in registered]

    def _rollback(self, registered: List[Tuple[FlagSet, argparse.Action]]) -> None:
        for flag_set, action in reversed(registered):
            flag_set.remove(action)
            logger.debug("Removed option %s after failed bind", "/".join(action.option_strings))


def bind(cmd: Command, record: Any, options: Optional[BindOptions] = None) -> List[argparse.Action]:
    """Bind the fields of ``record`` to the options of ``cmd``.

    Shorthand for ``Binder(cmd, options).bind(record)``; see :meth:`Binder.bind`.
    """
    return Binder(cmd, options).bind(record)
