import csv
import json
import math
from io import StringIO
from typing import Any, Dict, Iterable, List, Optional
from .alerts import DAILY, MONTHLY
from .models import (
    Appliance, AppliancePreset, Month, MonthlyUsage, PriceSlab, UsageContext, UsageType,
    VACATION_MULTIPLIER, new_appliance_id
)
from .presets import DEFAULT_SLABS


class ValidationError(ValueError):
    """Raised when an appliance or slab payload fails boundary validation."""


_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}


def _first(data: Dict, *keys: str) -> Any:
    # Accept snake_case and the camelCase keys sent by the frontend
    if not isinstance(data, dict):
        raise ValidationError(f"expected an object, got {data!r}")
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _to_float(value: Any, field_name: str) -> float:
    if value is None or value == "":
        raise ValidationError(f"Missing field: {field_name}")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    # NaN, Infinity and out-of-range literals like 1e400
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number, got {value!r}")
    return number


def _to_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"is_on must be a boolean, got {value!r}")


def parse_months(value: Any) -> frozenset:
    """
    Accepts a list of labels/numbers or a string separated by ';' or ','.
    """
    if value is None:
        return frozenset()
    if isinstance(value, str):
        parts = [p for p in value.replace(",", ";").split(";") if p.strip()]
    else:
        parts = list(value)
    try:
        return frozenset(Month.parse(p) for p in parts)
    except ValueError as e:
        raise ValidationError(str(e))


def parse_appliance(data: Dict) -> Appliance:
    """
    Build an Appliance from a dict (JSON body or CSV row).
    Enforces wattage > 0 and 0 <= hours_per_day <= 24.
    """
    name = str(_first(data, "name") or "").strip()
    if not name:
        raise ValidationError("Missing field: name")
    category = str(_first(data, "category") or "").strip()

    wattage = _to_float(_first(data, "wattage"), "wattage")
    if wattage <= 0:
        raise ValidationError("wattage must be > 0")

    hours = _to_float(_first(data, "hours_per_day", "hoursPerDay"), "hours_per_day")
    if not 0 <= hours <= 24:
        raise ValidationError("hours_per_day must be between 0 and 24")

    raw_type = _first(data, "usage_type", "usageType") or UsageType.REGULAR.value
    try:
        usage_type = raw_type if isinstance(raw_type, UsageType) else UsageType(str(raw_type).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown usage_type: {raw_type!r}")

    months = frozenset()
    if usage_type == UsageType.SEASONAL:
        months = parse_months(_first(data, "seasonal_months", "seasonalMonths"))

    raw_id = _first(data, "id")
    return Appliance(
        id=str(raw_id) if raw_id is not None and raw_id != "" else new_appliance_id(),
        name=name,
        category=category,
        wattage=wattage,
        hours_per_day=hours,
        is_on=_to_bool(_first(data, "is_on", "isOn"), default=True),
        usage_type=usage_type,
        seasonal_months=months,
    )


def _to_bound(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    number = _to_float(value, field_name)
    if number != int(number):
        raise ValidationError(f"{field_name} must be a whole number of units")
    return int(number)


def parse_slab(data: Dict) -> PriceSlab:
    """
    Build a PriceSlab from a dict. A missing or empty 'to' means unbounded.
    """
    from_units = _to_bound(_first(data, "from_units", "from"), "from")
    if from_units is None:
        raise ValidationError("Missing field: from")
    if from_units < 0:
        raise ValidationError("from must be >= 0")
    to_units = _to_bound(_first(data, "to_units", "to"), "to")
    if to_units is not None and to_units < from_units:
        raise ValidationError("to must be >= from")
    rate = _to_float(_first(data, "rate"), "rate")
    if rate <= 0:
        raise ValidationError("rate must be > 0")
    raw_id = _first(data, "id")
    return PriceSlab(
        from_units=from_units,
        to_units=to_units,
        rate=rate,
        id=str(raw_id) if raw_id is not None else None,
    )


def parse_appliances(items: Iterable[Dict]) -> List[Appliance]:
    return [parse_appliance(item) for item in items]


def parse_slabs(items: Iterable[Dict]) -> List[PriceSlab]:
    return [parse_slab(item) for item in items]


def parse_history(items: Iterable[Dict]) -> List[MonthlyUsage]:
    out = []
    for item in items:
        month = str(_first(item, "month") or "").strip()
        if not month:
            raise ValidationError("Missing field: month")
        out.append(MonthlyUsage(
            month=month,
            units=_to_float(_first(item, "units"), "units"),
            cost=_to_float(_first(item, "cost"), "cost"),
        ))
    return out


# Request payloads (Flask bodies, Lambda bodies and event details)

def read_number(data: Dict, key: str, default: float) -> float:
    value = data.get(key)
    if value is None:
        return default
    return _to_float(value, key)


def build_context(data: Dict) -> UsageContext:
    """
    Build the usage context from a request payload.

    Keys:
        month (optional): 'Jan'..'Dec' or 1..12 (default: current month)
        vacation_mode (optional): true reduces usage to 20%
        multiplier (optional): explicit reduction multiplier, 0 < m <= 1
    """
    try:
        month = Month.parse(data['month']) if data.get('month') is not None else Month.current()
    except ValueError as e:
        raise ValidationError(str(e))

    if data.get('multiplier') is not None:
        multiplier = read_number(data, 'multiplier', 1.0)
        if not 0 < multiplier <= 1:
            raise ValidationError("multiplier must be > 0 and <= 1")
    else:
        multiplier = VACATION_MULTIPLIER if _to_bool_field(data.get('vacation_mode'), 'vacation_mode') else 1.0

    return UsageContext(month=month, multiplier=multiplier)


def _to_bool_field(value: Any, field_name: str) -> bool:
    try:
        return _to_bool(value, default=False)
    except ValidationError:
        raise ValidationError(f"{field_name} must be a boolean, got {value!r}")


def load_appliances(data: Dict) -> List[Appliance]:
    items = data.get('appliances')
    if items is None:
        raise ValidationError("appliances required")
    if not isinstance(items, list):
        raise ValidationError("appliances must be a list")
    return parse_appliances(items)


def load_slabs(data: Dict) -> List[PriceSlab]:
    # Default tariff when the client does not send its own slabs
    items = data.get('slabs')
    if items is None:
        return list(DEFAULT_SLABS)
    if not isinstance(items, list):
        raise ValidationError("slabs must be a list")
    return parse_slabs(items)


def load_dismissed(data: Dict) -> frozenset:
    dismissed = data.get('dismissed')
    if dismissed is None:
        return frozenset()
    if not isinstance(dismissed, list):
        raise ValidationError("dismissed must be a list")
    unknown = [key for key in dismissed if key not in (DAILY, MONTHLY)]
    if unknown:
        raise ValidationError(f"unknown dismissed keys: {unknown}")
    return frozenset(dismissed)


def parse_appliances_csv(csv_text: str) -> List[Appliance]:
    """
    Parse CSV text with header:
    name,category,wattage,hours_per_day,is_on,usage_type,seasonal_months
    seasonal_months are separated by ';', e.g. Apr;May;Jun
    """
    f = StringIO(csv_text.strip())
    reader = csv.DictReader(f)
    appliances = []
    for line_no, row in enumerate(reader, start=2):
        try:
            appliances.append(parse_appliance(row))
        except ValidationError as e:
            raise ValidationError(f"line {line_no}: {e}")
    return appliances


def load_slabs_json(json_text: str) -> List[PriceSlab]:
    data = json.loads(json_text)
    if isinstance(data, dict):
        data = data.get("slabs", [])
    return parse_slabs(data)


def appliance_to_dict(appliance: Appliance) -> Dict:
    return {
        "id": appliance.id,
        "name": appliance.name,
        "category": appliance.category,
        "wattage": appliance.wattage,
        "hours_per_day": appliance.hours_per_day,
        "is_on": appliance.is_on,
        "usage_type": appliance.usage_type.value,
        "seasonal_months": [m.value for m in Month if m in appliance.seasonal_months],
    }


def slab_to_dict(slab: PriceSlab) -> Dict:
    return {
        "id": slab.id,
        "from": slab.from_units,
        "to": slab.to_units,
        "rate": slab.rate,
    }


def preset_to_dict(preset: AppliancePreset) -> Dict:
    return {
        "name": preset.name,
        "category": preset.category,
        "wattage": preset.wattage,
        "hours_per_day": preset.avg_hours,
        "usage_type": preset.usage_type.value,
        "seasonal_months": [m.value for m in Month if m in preset.seasonal_months],
    }
