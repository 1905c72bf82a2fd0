#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Command tree with local and persistent flag sets, backed by argparse.

A :class:`Command` owns two :class:`FlagSet` registries: local flags, which
only the command itself accepts, and persistent flags, which every
sub-command inherits. Parsing builds an ``argparse.ArgumentParser`` from the
inherited, persistent and local flag sets of the resolved command; argparse
does the tokenizing, help rendering and required-option checks.

    root = Command("kubectl")
    apply = Command("apply", run=lambda cmd, args: ...)
    root.add_command(apply)
    root.execute(["apply", "-f", "pod.yaml"])
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Iterator, List, Optional, Sequence

from flagbind.actions import FieldBoolAction
from flagbind.constants import KEY_VALUE_SEPARATOR
from flagbind.exceptions import CommandError
from flagbind.help_formatter import FlagHelpFormatter

logger = logging.getLogger(__name__)

RunFunc = Callable[["Command", List[str]], Any]


class _CommandArgumentParser(argparse.ArgumentParser):
    """ArgumentParser raising :class:`CommandError` instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise CommandError(message, command=self.prog)

    def register_attached_values(self, args: Sequence[str]) -> None:
        """Register ``--flag=value`` tokens of boolean options as aliases of the option.

        Boolean options take no argument, so argparse would reject the attached
        form. As an alias the whole token resolves to the option's action, which
        reads the value back from the option string it was called with.
        """
        for token in args:
            if token == "--":
                break
            option_string, sep, _ = token.partition(KEY_VALUE_SEPARATOR)
            if not sep or not token.startswith("-"):
                continue
            action = self._option_string_actions.get(option_string)
            if isinstance(action, FieldBoolAction):
                self._option_string_actions[token] = action


class FlagSet:
    """A registry of options.

    Options are stored as argparse actions in a private container parser so
    that they can be shared by the parsers built at parse time.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._container = _CommandArgumentParser(prog=name, add_help=False, exit_on_error=False)

    def add(self, *option_strings: str, **kwargs: Any) -> argparse.Action:
        """Register an option and return its action.

        Raises
        ------
        ValueError
            If a shorthand is longer than one character
        argparse.ArgumentError
            If an option string is already registered

        """
        for option_string in option_strings:
            if not option_string.startswith("--") and len(option_string) > 2:
                raise ValueError(f"{option_string[1:]!r} shorthand is more than one ASCII character")
        return self._container.add_argument(*option_strings, **kwargs)

    def remove(self, action: argparse.Action) -> None:
        """Unregister a previously added option."""
        self._container._remove_action(action)
        for group in self._container._action_groups:
            if action in group._group_actions:
                group._group_actions.remove(action)
        for option_string in action.option_strings:
            if self._container._option_string_actions.get(option_string) is action:
                del self._container._option_string_actions[option_string]

    def lookup(self, name: str) -> Optional[argparse.Action]:
        """Return the action registered under the long name ``name``, if any."""
        return self._container._option_string_actions.get(f"--{name}")

    def lookup_option(self, option_string: str) -> Optional[argparse.Action]:
        """Return the action registered under ``option_string`` (``-n`` or ``--name``)."""
        return self._container._option_string_actions.get(option_string)

    def mark_required(self, name: str) -> None:
        """Mark the option ``name`` as required.

        Raises
        ------
        CommandError
            If no option with that name is registered

        """
        action = self.lookup(name)
        if action is None:
            raise CommandError(f"no such flag -{name}", command=self.name)
        action.required = True

    @property
    def actions(self) -> List[argparse.Action]:
        return list(self._container._actions)

    def __iter__(self) -> Iterator[argparse.Action]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self._container._actions)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None


class Command:
    """A command with options and sub-commands.

    Parameters
    ----------
    use : str
        Command name, as typed on the command line
    short : str, optional
        One line description shown in help
    run : callable, optional
        Called as ``run(command, args)`` by :meth:`execute`

    """

    def __init__(self, use: str = "", *, short: str = "", run: Optional[RunFunc] = None) -> None:
        self.name = use or (sys.argv[0] if sys.argv else "")
        self.short = short
        self.run = run
        self.parent: Optional[Command] = None
        self.commands: List[Command] = []
        self.args: List[str] = []
        self.namespace: Optional[argparse.Namespace] = None

        self._flags = FlagSet(self.name)
        self._persistent_flags = FlagSet(self.name)

    def __repr__(self) -> str:
        return f"Command({self.command_path!r})"

    @property
    def command_path(self) -> str:
        """Return the names from the root command down to this one."""
        if self.parent is None:
            return self.name
        return f"{self.parent.command_path} {self.name}"

    def flags(self) -> FlagSet:
        """Return the options only this command accepts."""
        return self._flags

    def persistent_flags(self) -> FlagSet:
        """Return the options this command and all its sub-commands accept."""
        return self._persistent_flags

    def inherited_flags(self) -> List[FlagSet]:
        """Return the persistent flag sets of all ancestors, root first."""
        chain: List[FlagSet] = []
        parent = self.parent
        while parent is not None:
            chain.insert(0, parent.persistent_flags())
            parent = parent.parent
        return chain

    def add_command(self, *commands: Command) -> None:
        """Attach sub-commands."""
        for command in commands:
            if command is self:
                raise ValueError("command can't be a child of itself")
            command.parent = self
            self.commands.append(command)

    def mark_flag_required(self, name: str) -> None:
        """Require the local option ``name`` to be given."""
        self._flags.mark_required(name)

    def mark_persistent_flag_required(self, name: str) -> None:
        """Require the persistent option ``name`` to be given, here and in sub-commands."""
        self._persistent_flags.mark_required(name)

    def _flag_sets(self) -> List[FlagSet]:
        return [*self.inherited_flags(), self._persistent_flags, self._flags]

    def _lookup_option(self, option_string: str) -> Optional[argparse.Action]:
        for flag_set in reversed(self._flag_sets()):
            action = flag_set.lookup_option(option_string)
            if action is not None:
                return action
        return None

    def build_parser(self) -> _CommandArgumentParser:
        """Build the argparse parser for this command's options.

        Returns
        -------
        ArgumentParser
            Parser holding the inherited persistent, persistent and local options

        """
        parser = _CommandArgumentParser(
            prog=self.command_path,
            description=self.short or None,
            parents=[flag_set._container for flag_set in self._flag_sets()],
            formatter_class=FlagHelpFormatter,
            add_help=False,
            allow_abbrev=False,
            exit_on_error=False,
        )

        help_options = [s for s in ("-h", "--help") if self._lookup_option(s) is None]
        if "--help" in help_options:
            parser.add_argument(*help_options, action="help", help=f"help for {self.name}")

        parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
        return parser

    def parse_flags(self, args: Sequence[str]) -> argparse.Namespace:
        """Parse ``args`` against this command's options.

        Bound options write into their records as they are parsed. Positional
        arguments are kept in :attr:`args`.

        Raises
        ------
        CommandError
            If options of this command and its ancestors conflict, an option is
            unknown, a value is invalid or a required option is missing

        """
        try:
            parser = self.build_parser()
            parser.register_attached_values(args)
            namespace = parser.parse_intermixed_args(list(args))
        except argparse.ArgumentError as e:
            raise CommandError(str(e), command=self.command_path, original_error=e.__cause__ or e) from e

        self.args = list(namespace.args)
        self.namespace = namespace
        return namespace

    def find(self, args: Sequence[str]) -> tuple[Command, List[str]]:
        """Resolve the sub-command named by ``args``.

        Returns
        -------
        tuple[Command, list[str]]
            The deepest matching command and the arguments left for it

        """
        command = self
        remaining = list(args)
        index = 0
        while index < len(remaining):
            token = remaining[index]
            if token == "--":
                break
            if token.startswith("-"):
                action = command._lookup_option(token)
                takes_value = action is not None and action.nargs is None and "=" not in token
                index += 2 if takes_value else 1
                continue

            child = next((c for c in command.commands if c.name == token), None)
            if child is None:
                break
            logger.debug("Resolved sub-command %s", child.command_path)
            command = child
            del remaining[index]

        return command, remaining

    def execute(self, args: Optional[Sequence[str]] = None) -> Any:
        """Resolve the sub-command, parse its options and run it.

        Returns
        -------
        Any
            Whatever the resolved command's ``run`` returns

        """
        if args is None:
            args = sys.argv[1:]

        command, remaining = self.find(args)
        command.parse_flags(remaining)
        if command.run is None:
            logger.debug("Command %s has no run function", command.command_path)
            return None
        return command.run(command, command.args)
