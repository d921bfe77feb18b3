import time
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from itertools import count
from typing import FrozenSet, Optional

# Reduced-activity ("vacation") mode keeps 20% of normal consumption
VACATION_MULTIPLIER = 0.2

_id_counter = count(1)


def new_appliance_id() -> str:
    """
    Generate an identifier that is never reused within the process:
    a millisecond timestamp plus a monotonically increasing suffix.
    """
    return f"{int(time.time() * 1000)}-{next(_id_counter)}"


class Month(str, Enum):
    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"

    @classmethod
    def parse(cls, value) -> "Month":
        """
        Accepts a Month, a 3-letter label in any case ('jan', 'Jan')
        or a month number 1-12.
        """
        if isinstance(value, Month):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            if 1 <= value <= 12:
                return list(cls)[value - 1]
            raise ValueError(f"month number out of range: {value}")
        text = str(value).strip()
        if text.isdigit():
            return cls.parse(int(text))
        for month in cls:
            if month.value.lower() == text[:3].lower() and len(text) >= 3:
                return month
        raise ValueError(f"Unknown month label: {value!r}")

    @classmethod
    def from_date(cls, day: date) -> "Month":
        return list(cls)[day.month - 1]

    @classmethod
    def current(cls) -> "Month":
        return cls.from_date(date.today())


class UsageType(str, Enum):
    REGULAR = "regular"
    OCCASIONAL = "occasional"
    SEASONAL = "seasonal"


@dataclass(frozen=True)
class Appliance:
    name: str
    category: str
    wattage: float
    hours_per_day: float
    is_on: bool = True
    usage_type: UsageType = UsageType.REGULAR
    seasonal_months: FrozenSet[Month] = field(default_factory=frozenset)
    id: str = field(default_factory=new_appliance_id)

    @classmethod
    def from_preset(cls, preset: "AppliancePreset", is_on: bool = True) -> "Appliance":
        return cls(
            name=preset.name,
            category=preset.category,
            wattage=preset.wattage,
            hours_per_day=preset.avg_hours,
            is_on=is_on,
            usage_type=preset.usage_type,
            seasonal_months=preset.seasonal_months,
        )

    def toggled(self) -> "Appliance":
        return replace(self, is_on=not self.is_on)

    def with_updates(self, **changes) -> "Appliance":
        # id is assigned once at creation
        changes.pop("id", None)
        return replace(self, **changes)


@dataclass(frozen=True)
class AppliancePreset:
    name: str
    category: str
    wattage: float
    avg_hours: float
    usage_type: UsageType = UsageType.REGULAR
    seasonal_months: FrozenSet[Month] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PriceSlab:
    """
    One tariff tier. Bounds are inclusive, in units (kWh).
    to_units=None means the tier has no upper bound.
    """
    from_units: int
    to_units: Optional[int]
    rate: float
    id: Optional[str] = None

    @property
    def is_unbounded(self) -> bool:
        return self.to_units is None


@dataclass(frozen=True)
class UsageContext:
    month: Month
    multiplier: float = 1.0

    @classmethod
    def for_date(cls, day: date, vacation_mode: bool = False) -> "UsageContext":
        return cls(
            month=Month.from_date(day),
            multiplier=VACATION_MULTIPLIER if vacation_mode else 1.0,
        )


@dataclass(frozen=True)
class BreachFlags:
    daily: bool
    monthly: bool

    @property
    def any(self) -> bool:
        return self.daily or self.monthly


@dataclass(frozen=True)
class MonthlyUsage:
    month: str  # e.g. "Oct 2024"
    units: float
    cost: float
