from typing import Dict, Iterable, List, Tuple
from .models import Appliance, Month, UsageContext, UsageType

# An occasional appliance runs about 2 days per month
OCCASIONAL_FACTOR = 2 / 30

# Fixed 30-day month approximation, not calendar accurate
DAYS_PER_MONTH = 30

# Typical household consumption used for the usage status (~450 units/month)
AVERAGE_HOUSEHOLD_DAILY_UNITS = 15.0


def effective_hours(appliance: Appliance, current_month: Month) -> float:
    """
    Daily hours an appliance is counted for, after its usage type is applied.
    """
    if appliance.usage_type == UsageType.OCCASIONAL:
        return appliance.hours_per_day * OCCASIONAL_FACTOR
    if appliance.usage_type == UsageType.SEASONAL:
        # empty seasonal_months means the appliance is never in season
        if current_month in appliance.seasonal_months:
            return appliance.hours_per_day
        return 0.0
    return appliance.hours_per_day


def appliance_daily_units(appliance: Appliance, multiplier: float, current_month: Month) -> float:
    if not appliance.is_on:
        return 0.0
    hours = effective_hours(appliance, current_month)
    return appliance.wattage * hours * multiplier / 1000


def compute_daily_units(appliances: Iterable[Appliance], multiplier: float, current_month: Month) -> float:
    """
    Sum of the daily energy (kWh) of every appliance that is switched on.
    Values are not validated or rounded here.
    """
    return sum(appliance_daily_units(a, multiplier, current_month) for a in appliances)


def compute_monthly_units(appliances: Iterable[Appliance], multiplier: float, current_month: Month) -> float:
    return compute_daily_units(appliances, multiplier, current_month) * DAYS_PER_MONTH


def usage_status(daily_units: float, average_daily_units: float = AVERAGE_HOUSEHOLD_DAILY_UNITS) -> Tuple[float, str]:
    """
    Compares daily usage with an average household.
    Returns (percentage_of_average, label).
    """
    pct = daily_units / average_daily_units * 100
    if pct < 50:
        return pct, "Excellent!"
    if pct < 80:
        return pct, "Good"
    if pct < 100:
        return pct, "Above Average"
    return pct, "High Usage"


class UsageAggregator:
    def __init__(self, appliances: Iterable[Appliance], context: UsageContext):
        # Snapshot so later edits by the caller do not leak into results
        self.appliances: List[Appliance] = list(appliances)
        self.context = context

    def daily_units(self) -> float:
        return compute_daily_units(self.appliances, self.context.multiplier, self.context.month)

    def monthly_units(self) -> float:
        return self.daily_units() * DAYS_PER_MONTH

    def appliance_breakdown(self) -> Dict[str, float]:
        """
        Returns a dict keyed by appliance id -> daily units.
        Appliances that are off are listed with 0.
        """
        return {
            a.id: appliance_daily_units(a, self.context.multiplier, self.context.month)
            for a in self.appliances
        }

    def active_appliances(self) -> List[Appliance]:
        return [a for a in self.appliances if a.is_on]

    def active_count(self) -> int:
        return len(self.active_appliances())

    def active_wattage(self) -> float:
        return sum(a.wattage for a in self.active_appliances())
