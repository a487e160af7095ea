"""Shared helper functions used by the providers and the estimators.

Percentages, densities and head counts are reported as whole numbers
rounded half up (``2.5 -> 3``, ``-2.5 -> -2``). The built-in ``round`` rounds
halves to even and must not be used for these figures.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round *value* to the nearest integer, halves going up.

    Example::

        >>> round_half_up(12.5)
        13
        >>> round_half_up(-0.5)
        0
    """
    return math.floor(value + 0.5)
