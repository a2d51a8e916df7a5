"""Duration strings used for token lifetimes."""

from __future__ import annotations

import re
from typing import Final

DEFAULT_EXPIRY_SECONDS: Final[int] = 900

_UNIT_SECONDS: Final[dict[str, int]] = {"s": 1, "m": 60, "h": 3600, "d": 86_400}
_DURATION = re.compile(r"(\d+)([smhd])")


def parse_expiry_to_seconds(value: str) -> int:
    """
    Convert ``<int><unit>`` to seconds, with units ``s``, ``m``, ``h`` and ``d``.

    Anything else (unknown unit, missing number, non-string) yields
    :data:`DEFAULT_EXPIRY_SECONDS`, i.e. 15 minutes.

    >>> parse_expiry_to_seconds("15m")
    900
    >>> parse_expiry_to_seconds("2w")
    900

    :param value: Duration string.
    :type value: str
    :returns: Duration in seconds.
    :rtype: int
    """
    if not isinstance(value, str):
        return DEFAULT_EXPIRY_SECONDS
    match = _DURATION.fullmatch(value.strip())
    if match is None:
        return DEFAULT_EXPIRY_SECONDS
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]
