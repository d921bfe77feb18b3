from backend.lib.home_energy_core.alerts import evaluate_breaches
from backend.lib.home_energy_core.history import summarize_history
from backend.lib.home_energy_core.models import Appliance, Month, MonthlyUsage, UsageContext, UsageType
from backend.lib.home_energy_core.presets import APPLIANCE_PRESETS, DEFAULT_SLABS, find_preset
from backend.lib.home_energy_core.summary import summarize
from datetime import date
import pytest


def test_daily_breach_unless_dismissed():
    flags = evaluate_breaches(21, 630, 20, 1000, set())
    assert flags.daily is True
    assert flags.monthly is False
    assert evaluate_breaches(21, 630, 20, 1000, {"daily"}).daily is False


def test_breach_is_strict():
    flags = evaluate_breaches(20, 500, 20, 500)
    assert not flags.any


def test_dismissal_is_per_key():
    flags = evaluate_breaches(25, 750, 20, 500, {"monthly"})
    assert flags.daily is True
    assert flags.monthly is False


def test_context_for_date():
    ctx = UsageContext.for_date(date(2024, 7, 14), vacation_mode=True)
    assert ctx.month == Month.JUL
    assert ctx.multiplier == 0.2
    assert UsageContext.for_date(date(2024, 1, 1)).multiplier == 1.0


def test_month_parse():
    assert Month.parse("dec") == Month.DEC
    assert Month.parse(3) == Month.MAR
    assert Month.parse("11") == Month.NOV
    assert Month.parse("September") == Month.SEP
    with pytest.raises(ValueError):
        Month.parse("Xyz")
    with pytest.raises(ValueError):
        Month.parse(13)


def test_summary_for_two_appliances():
    appliances = [
        Appliance("LED TV", "Entertainment", 80, 5),
        Appliance("Ceiling Fan", "Cooling", 75, 8),
    ]
    result = summarize(appliances, DEFAULT_SLABS, UsageContext(Month.OCT))
    assert result.daily_units == pytest.approx(1.0)
    assert result.monthly_units == pytest.approx(30.0)
    assert result.daily_cost == pytest.approx(3.0 + 20 / 30)
    assert result.monthly_cost == pytest.approx(90 + 20)
    assert not result.breaches.any
    assert result.status == "Excellent!"
    assert result.device_count == 2
    assert result.active_wattage == 155

    body = result.to_dict()
    assert body["daily_cost"] == 3.67
    assert body["monthly_cost"] == 110.0
    assert body["breaches"] == {"daily": False, "monthly": False}
    assert body["slab_problems"] == []


def test_summary_reports_breaches_and_uncovered_units():
    heater = Appliance("Room Heater", "Appliances", 2000, 12, usage_type=UsageType.SEASONAL,
                       seasonal_months=frozenset({Month.JAN}))
    result = summarize([heater], DEFAULT_SLABS[:2], UsageContext(Month.JAN),
                       daily_limit=20, monthly_limit=500, dismissed={"monthly"})
    # 24 units a day, 720 a month
    assert result.breaches.daily is True
    assert result.breaches.monthly is False
    assert result.uncovered_monthly_units == pytest.approx(520)
    assert result.monthly_cost == pytest.approx(800 + 20)
    assert any("unbounded" in p for p in result.slab_problems)


def test_history_averages_and_trends():
    history = [
        MonthlyUsage("Aug 2024", 300, 1400),
        MonthlyUsage("Sep 2024", 250, 1150),
        MonthlyUsage("Oct 2024", 275, 1265),
    ]
    out = summarize_history(history)
    assert out["count"] == 3
    assert out["avg_units"] == pytest.approx(275)
    assert out["avg_cost"] == pytest.approx(1271.6667, rel=1e-4)
    assert out["unit_change_pct"] == pytest.approx(10)
    assert out["cost_change_pct"] == pytest.approx(10)
    assert out["months"][0]["cost_change_pct"] == 0
    assert out["months"][1]["cost_per_unit"] == pytest.approx(4.6)


def test_history_empty_and_single():
    assert summarize_history([])["avg_units"] == 0
    single = summarize_history([MonthlyUsage("Oct 2024", 0, 20)])
    assert single["unit_change_pct"] == 0
    assert single["months"][0]["cost_per_unit"] == 0


def test_presets():
    assert len(APPLIANCE_PRESETS) == 20
    ac = find_preset("air conditioner")
    assert ac.usage_type == UsageType.SEASONAL
    assert Month.JUL in ac.seasonal_months
    appliance = Appliance.from_preset(ac)
    assert appliance.hours_per_day == 6
    assert appliance.id != Appliance.from_preset(ac).id
    assert find_preset("Toaster") is None
