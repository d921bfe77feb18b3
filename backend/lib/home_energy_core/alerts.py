from typing import AbstractSet
from .models import BreachFlags

DAILY = "daily"
MONTHLY = "monthly"

DEFAULT_DAILY_LIMIT = 20.0     # units
DEFAULT_MONTHLY_LIMIT = 500.0  # units


def evaluate_breaches(
    daily_units: float,
    monthly_units: float,
    daily_limit: float,
    monthly_limit: float,
    dismissed: AbstractSet[str] = frozenset(),
) -> BreachFlags:
    """
    A limit is breached only when usage strictly exceeds it.
    A breach whose key ('daily' / 'monthly') is in `dismissed` is not reported.
    """
    return BreachFlags(
        daily=daily_units > daily_limit and DAILY not in dismissed,
        monthly=monthly_units > monthly_limit and MONTHLY not in dismissed,
    )
