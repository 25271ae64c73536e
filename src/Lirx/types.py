# types.py

from typing import Any

# One application command definition, shaped like Discord's JSON (name,
# description, type, options, choices, ...). Nested options recurse.
CommandDocument = dict[str, Any]
CommandList = list[CommandDocument]

JSONValue = dict[str, Any] | list[Any] | str | int | float | bool | None

# Discord IDs are unsigned 64-bit ints; decimal strings are accepted too.
Snowflake = int | str
