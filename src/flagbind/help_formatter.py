"""Help formatter for commands with bound options.

Appends the bound field's current value to each option's help line, the way
it would be typed on the command line (``1h2m3s`` for a duration, JSON for a
dict). Zero values are omitted.
"""

from __future__ import annotations

import argparse
from typing import Any, Optional

from flagbind.actions import FieldAction


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    try:
        return not value
    except (TypeError, ValueError):
        return False


def _format_default(action: argparse.Action) -> Optional[str]:
    """Return the human-readable default of a bound option, or ``None`` when omitted.

    Parameters
    ----------
    action : argparse.Action
        The action whose default to format

    Returns
    -------
    Optional[str]
        Formatted default value or None

    """
    if not isinstance(action, FieldAction):
        return None

    value = action.ref.get()
    if _is_zero(value):
        return None
    if isinstance(value, str):
        return f'"{value}"'
    return action.format_default()


class FlagHelpFormatter(argparse.HelpFormatter):
    """Help formatter showing the current value of bound options."""

    def _get_help_string(self, action: argparse.Action) -> str:
        help_text = action.help or ""
        default = _format_default(action)
        if default is None:
            return help_text

        # argparse %-formats help strings
        default = default.replace("%", "%%")
        return f"{help_text} (default {default})" if help_text else f"(default {default})"
