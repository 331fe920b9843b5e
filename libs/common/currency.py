"""Credit/money conversion utilities.

Internal storage unit: credits (float).
API / display unit: money in the shop currency (float).

Conversion chain
----------------
Money  ÷ value per credit → Credits
Credits × value per credit → Money

``value_per_credit`` is the money worth of one credit. It is resolved per
customer by the store credit service; these helpers only do the arithmetic.
"""

from __future__ import annotations

import math

# ─── constants ───────────────────────────────────────────────────────────────

FALLBACK_VALUE_PER_CREDIT: float = 1.0

# Balances within this many credits of each other compare as equal.
BALANCE_EPSILON: float = 1e-9


# ─── conversion helpers ───────────────────────────────────────────────────────


def parse_positive_rate(value: object) -> float | None:
    """Return ``value`` as a float when it is a usable rate, else None.

    Accepts numbers and numeric strings. Booleans, non-finite and
    non-positive values are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def money_to_credits(amount: float, value_per_credit: float) -> float:
    """Convert a money amount to credits. 0 for non-positive amounts."""
    if amount <= 0:
        return 0.0
    if value_per_credit <= 0:
        value_per_credit = FALLBACK_VALUE_PER_CREDIT
    return amount / value_per_credit


def credits_to_money(credits: float, value_per_credit: float) -> float:
    """Convert credits back to money."""
    return credits * value_per_credit
