"""Name transformations between column names and property accessors."""

import re

from rowmapper.errors import InvalidArgument

_SEPARATORS = re.compile(r"[_\-\s]+")


def camelize(value: str) -> str:
    """
    Convert a snake, kebab or space separated name to its accessor form.

    Each token gets its first letter upper-cased and the tokens are joined,
    so "user_name" becomes "UserName". Inner capitals are left alone, which
    makes the transformation idempotent on already-camel input.

    Raises:
        InvalidArgument: if value is empty or not a string
    """
    if not isinstance(value, str) or not value:
        raise InvalidArgument("Camelize need a value for working.")
    return "".join(token[:1].upper() + token[1:] for token in _SEPARATORS.split(value) if token)
