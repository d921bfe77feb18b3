import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Tuple
from .models import PriceSlab
from .processor import DAYS_PER_MONTH

logger = logging.getLogger(__name__)

# Flat estimation margin added to every reported cost
BUFFER_AMOUNT = 20.0


def round_currency(amount: float) -> float:
    # round to 2 decimal places (banker's rounding avoided; use ROUND_HALF_UP)
    return float(Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def normalize_slabs(slabs: Iterable[PriceSlab]) -> List[PriceSlab]:
    """
    Slabs are user-edited and may arrive unsorted; the walk below relies on
    ascending lower bounds.
    """
    return sorted(slabs, key=lambda s: s.from_units)


def _bill_slabs(units: float, slabs: Iterable[PriceSlab]) -> Tuple[float, float]:
    """
    Walks the tiers in order and returns (cost, units_left_unbilled).

    A bounded tier [from, to] bills the units above both `from - 1` and the
    units already billed, up to `to`. The unbounded tier bills everything
    that is left. A tier is skipped entirely when total usage never reaches
    its lower bound.
    """
    cost = 0.0
    remaining = units
    for slab in normalize_slabs(slabs):
        if remaining <= 0:
            break
        if units < slab.from_units:
            continue
        if slab.is_unbounded:
            applicable = remaining
        else:
            consumed = units - remaining
            applicable = min(remaining, max(0.0, slab.to_units - max(slab.from_units - 1, consumed)))
        if applicable > 0:
            cost += applicable * slab.rate
            remaining -= applicable
    return cost, max(0.0, remaining)


def compute_slab_cost(units: float, slabs: Iterable[PriceSlab]) -> float:
    """
    Tiered cost of `units` without the buffer. Empty slabs cost 0.

    Units not covered by any tier (no unbounded top tier, or a gap) are
    zero-rated; a warning is logged since this usually means the tariff
    is misconfigured.
    """
    cost, uncovered = _bill_slabs(units, slabs)
    if uncovered > 0:
        logger.warning(
            "%.4f of %.4f units are not covered by any price slab and were billed at 0",
            uncovered, units,
        )
    return cost


def validate_slabs(slabs: Iterable[PriceSlab]) -> List[str]:
    """
    Lists configuration problems of a slab set without raising.
    An empty list means the slabs partition [0, inf) contiguously.
    """
    ordered = normalize_slabs(slabs)
    problems = []
    if not ordered:
        return ["no price slabs configured"]

    if ordered[0].from_units != 0:
        problems.append(f"first slab starts at {ordered[0].from_units}, not 0")

    unbounded = [s for s in ordered if s.is_unbounded]
    if len(unbounded) > 1:
        problems.append(f"{len(unbounded)} slabs have no upper bound")
    elif not unbounded:
        problems.append("no unbounded top slab; usage above the last slab is not billed")

    for s in ordered:
        if s.from_units < 0:
            problems.append(f"slab {s.from_units}-{s.to_units} has a negative lower bound")
        if s.to_units is not None and s.to_units < s.from_units:
            problems.append(f"slab {s.from_units}-{s.to_units} ends before it starts")
        if s.rate <= 0:
            problems.append(f"slab {s.from_units}-{s.to_units} has non-positive rate {s.rate}")

    for prev, curr in zip(ordered, ordered[1:]):
        if prev.is_unbounded:
            problems.append(f"slab starting at {curr.from_units} follows an unbounded slab")
            continue
        if curr.from_units <= prev.to_units:
            problems.append(f"slabs {prev.from_units}-{prev.to_units} and {curr.from_units}-{curr.to_units} overlap")
        elif curr.from_units > prev.to_units + 1:
            problems.append(f"gap between {prev.to_units} and {curr.from_units}")
    return problems


def next_slab_from(slabs: List[PriceSlab]) -> int:
    """
    Lower bound for a slab appended after the last one in the list.
    """
    if not slabs or slabs[-1].to_units is None:
        return 0
    return slabs[-1].to_units + 1


class SlabCostCalculator:
    def __init__(self, slabs: Iterable[PriceSlab], buffer_amount: float = BUFFER_AMOUNT):
        """
        slabs: tariff tiers, any order
        buffer_amount: flat margin added to a month; a day gets buffer / 30
        """
        self.slabs = normalize_slabs(slabs)
        self.buffer = float(buffer_amount)

    def slab_cost(self, units: float) -> float:
        return compute_slab_cost(units, self.slabs)

    def uncovered_units(self, units: float) -> float:
        _, uncovered = _bill_slabs(units, self.slabs)
        return uncovered

    def daily_cost(self, daily_units: float) -> float:
        return self.slab_cost(daily_units) + self.buffer / DAYS_PER_MONTH

    def monthly_cost(self, monthly_units: float) -> float:
        return self.slab_cost(monthly_units) + self.buffer

    def problems(self) -> List[str]:
        return validate_slabs(self.slabs)
