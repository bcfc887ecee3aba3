"""SQL argument values and their binding normalization.

SQLite has no native boolean type. Booleans supplied by callers are
converted to ``0``/``1`` here, at the binding boundary, on a copy of the
caller's arguments.
"""

from __future__ import annotations

from typing import Mapping, Sequence, Union

SQLValue = Union[None, int, float, str, bytes, bool]
"""A single value that can be bound to a statement placeholder."""

PositionalArgs = Sequence[SQLValue]
NamedArgs = Mapping[str, SQLValue]
SQLArgs = Union[PositionalArgs, NamedArgs]


def normalize_value(value: SQLValue) -> SQLValue:
    """Convert a boolean to ``0``/``1``; pass anything else through."""
    if isinstance(value, bool):
        return 1 if value else 0
    return value


def normalize_args(args: SQLArgs | None) -> tuple[SQLValue, ...] | dict[str, SQLValue]:
    """Return bindable arguments with booleans normalized.

    Positional arguments come back as a tuple, named arguments as a new
    dict; the caller's container is never modified. ``None`` means no
    arguments.
    """
    if args is None:
        return ()
    if isinstance(args, Mapping):
        return {name: normalize_value(value) for name, value in args.items()}
    if isinstance(args, (str, bytes)):
        raise TypeError("SQL arguments must be a sequence or mapping, not a string")
    return tuple(normalize_value(value) for value in args)
