"""Human-readable byte sizes.

``format_bytes`` scales a raw count with binary (1024) steps.
``format_ini_size`` does the same for ini-style size tokens such as
``"128M"``, ``"2g"`` or ``"-1"``::

    >>> format_ini_size("128M")
    '128.00 MB (128M)'
    >>> format_ini_size("-1")
    'Illimité (-1)'
"""

import re
from numbers import Real

UNITS = ("B", "KB", "MB", "GB", "TB")
UNLIMITED = "Illimité"
UNSET = "Non défini"

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_SUFFIX_POWER = {"k": 1, "m": 2, "g": 3}


def format_bytes(value: object) -> str:
    """Format *value* with two decimals and the largest unit below 1024.

    TB absorbs everything above. Anything that is not a number (or a
    numeric string) is returned as ``str(value)``.
    """
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, Real):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return value
    else:
        return str(value)

    index = 0
    while amount >= 1024 and index < len(UNITS) - 1:
        amount /= 1024
        index += 1
    return f"{amount:.2f} {UNITS[index]}"


def parse_ini_size(token: str) -> float | None:
    """Resolve an ini-style size token to bytes.

    Returns ``None`` for an empty token and ``-1`` for unlimited. The
    numeric part is the leading number of the token; a token with no
    leading number counts as 0.
    """
    token = token.strip()
    if not token:
        return None
    match = _LEADING_NUMBER.match(token)
    number = float(match.group()) if match else 0.0
    if number == -1:
        return -1
    power = _SUFFIX_POWER.get(token[-1].lower(), 0)
    resolved = number * 1024**power
    return int(resolved) if resolved.is_integer() else resolved


def format_ini_size(token: str) -> str:
    """Format an ini-style size token for display.

    ``""`` gives ``"Non défini"``, ``"-1"`` (any suffix) gives
    ``"Illimité (-1)"`` and anything else the scaled size followed by the
    raw token in parentheses.
    """
    token = token.strip()
    resolved = parse_ini_size(token)
    if resolved is None:
        return UNSET
    if resolved == -1:
        return f"{UNLIMITED} ({token})"
    return f"{format_bytes(resolved)} ({token})"


def limit_token(value: int | None) -> str:
    """Express a raw limit (bytes, or ``None``/negative for no limit) as a token.

    Exact multiples of 1024 collapse to the largest ``K``/``M``/``G``
    suffix so the token reads the way an operator would write it.
    """
    if value is None or value < 0:
        return "-1"
    for suffix, power in (("G", 3), ("M", 2), ("K", 1)):
        step = 1024**power
        if value and value % step == 0:
            return f"{value // step}{suffix}"
    return str(value)
