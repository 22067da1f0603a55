"""Half-up rounding for reported numbers.

Built-in ``round()`` sends exact halves to the even neighbour
(``round(62.5) == 62``).  Reported values round halves towards +inf
instead, so ``62.5 -> 63`` and ``-2.5 -> -2``.
"""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals, halves towards +inf."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def percent_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
