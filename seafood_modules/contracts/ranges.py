"""Size band labels such as ``"20-25"`` or ``"100 - 150"``.

Shrimp sizes are counts per unit weight, so a band label names an
inclusive interval of counts.  ``band_label_classifier`` is the default
``SizeRangeClassifier`` used by ``ContractsService``.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

_BAND = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")


def parse_band_label(label: str) -> tuple[Decimal, Decimal] | None:
    """Return ``(low, high)`` for a band label, or None if it is not one.

    Reversed bounds (``"25-20"``) are normalized to ascending order.
    """
    if not isinstance(label, str):
        return None
    match = _BAND.match(label)
    if match is None:
        return None
    try:
        low, high = Decimal(match.group(1)), Decimal(match.group(2))
    except InvalidOperation:
        return None
    return (low, high) if low <= high else (high, low)


def band_label_classifier(size: Decimal, label: str) -> bool:
    """True when ``size`` falls inside the inclusive band named by ``label``.

    Labels that are not bands never match.
    """
    bounds = parse_band_label(label)
    if bounds is None:
        return False
    low, high = bounds
    return low <= size <= high
