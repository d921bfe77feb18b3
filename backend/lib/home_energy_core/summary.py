from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterable, List
from .alerts import DEFAULT_DAILY_LIMIT, DEFAULT_MONTHLY_LIMIT, evaluate_breaches
from .estimator import BUFFER_AMOUNT, SlabCostCalculator, round_currency
from .models import Appliance, BreachFlags, PriceSlab, UsageContext
from .processor import UsageAggregator, usage_status


@dataclass
class UsageSummary:
    daily_units: float
    monthly_units: float
    daily_cost: float
    monthly_cost: float
    breaches: BreachFlags
    buffer: float
    uncovered_monthly_units: float
    usage_pct: float
    status: str
    device_count: int
    active_count: int
    active_wattage: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    slab_problems: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "daily_units": self.daily_units,
            "monthly_units": self.monthly_units,
            "daily_cost": round_currency(self.daily_cost),
            "monthly_cost": round_currency(self.monthly_cost),
            "buffer": self.buffer,
            "breaches": {"daily": self.breaches.daily, "monthly": self.breaches.monthly},
            "uncovered_monthly_units": self.uncovered_monthly_units,
            "usage_pct": round(self.usage_pct, 1),
            "status": self.status,
            "device_count": self.device_count,
            "active_count": self.active_count,
            "active_wattage": self.active_wattage,
            "breakdown": self.breakdown,
            "slab_problems": self.slab_problems,
        }


def summarize(
    appliances: Iterable[Appliance],
    slabs: Iterable[PriceSlab],
    context: UsageContext,
    daily_limit: float = DEFAULT_DAILY_LIMIT,
    monthly_limit: float = DEFAULT_MONTHLY_LIMIT,
    dismissed: AbstractSet[str] = frozenset(),
    buffer_amount: float = BUFFER_AMOUNT,
) -> UsageSummary:
    """
    Runs the aggregator, the slab calculator (once for the daily and once
    for the monthly quantity) and the limit check over one snapshot.
    """
    aggregator = UsageAggregator(appliances, context)
    calculator = SlabCostCalculator(slabs, buffer_amount)

    daily = aggregator.daily_units()
    monthly = aggregator.monthly_units()
    pct, status = usage_status(daily)

    return UsageSummary(
        daily_units=daily,
        monthly_units=monthly,
        daily_cost=calculator.daily_cost(daily),
        monthly_cost=calculator.monthly_cost(monthly),
        breaches=evaluate_breaches(daily, monthly, daily_limit, monthly_limit, dismissed),
        buffer=calculator.buffer,
        uncovered_monthly_units=calculator.uncovered_units(monthly),
        usage_pct=pct,
        status=status,
        device_count=len(aggregator.appliances),
        active_count=aggregator.active_count(),
        active_wattage=aggregator.active_wattage(),
        breakdown=aggregator.appliance_breakdown(),
        slab_problems=calculator.problems(),
    )
